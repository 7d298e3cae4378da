"""
Analysis option selection and request validation.
"""

from typing import Iterable, List

from script_analyzer.core.errors import AnalysisValidationError
from script_analyzer.schemas.analysis import AnalysisOption

MISSING_DIRECTIVE_MESSAGE = "Please select at least one analysis option or provide custom points."
EMPTY_SCRIPT_MESSAGE = "Script content cannot be empty."


def toggle_option(selected: Iterable[AnalysisOption], option: AnalysisOption) -> List[AnalysisOption]:
    """
    Apply one click on an option checkbox to the current selection.

    - Full Analysis is exclusive: selecting it clears everything else,
      clicking it again deselects it.
    - Selecting any other option drops Full Analysis.
    - Clicking an already-selected option deselects it.
    """
    current = [AnalysisOption(item) for item in selected]

    if option == AnalysisOption.FULL_ANALYSIS:
        if option in current:
            return [item for item in current if item != option]
        return [AnalysisOption.FULL_ANALYSIS]

    current = [item for item in current if item != AnalysisOption.FULL_ANALYSIS]
    if option in current:
        return [item for item in current if item != option]
    return current + [option]


def validate_request(script_text: str, options: List[AnalysisOption], custom_points: str) -> None:
    """
    Reject a request before any generation call is made.

    Raises:
        AnalysisValidationError: No directive selected, or the script is blank
    """
    if not options and not custom_points.strip():
        raise AnalysisValidationError(MISSING_DIRECTIVE_MESSAGE)
    if not script_text.strip():
        raise AnalysisValidationError(EMPTY_SCRIPT_MESSAGE)
