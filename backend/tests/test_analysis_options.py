"""
Unit tests for option selection and request validation.
"""

import pytest

from script_analyzer.core.errors import AnalysisValidationError
from script_analyzer.schemas.analysis import AnalysisOption, AnalysisRequest, Tone
from script_analyzer.services.analysis_options import (
    EMPTY_SCRIPT_MESSAGE,
    MISSING_DIRECTIVE_MESSAGE,
    toggle_option,
    validate_request,
)

FULL = AnalysisOption.FULL_ANALYSIS
PLOT = AnalysisOption.PLOT_ANALYSIS
DIALOGUE = AnalysisOption.DIALOGUE_QUALITY


class TestToggleOption:

    def test_selecting_full_analysis_clears_others(self):
        assert toggle_option([PLOT, DIALOGUE], FULL) == [FULL]

    def test_deselecting_full_analysis(self):
        assert toggle_option([FULL], FULL) == []

    def test_selecting_other_option_removes_full_analysis(self):
        assert toggle_option([FULL], PLOT) == [PLOT]

    def test_selecting_other_option_appends(self):
        assert toggle_option([PLOT], DIALOGUE) == [PLOT, DIALOGUE]

    def test_deselecting_other_option(self):
        assert toggle_option([PLOT, DIALOGUE], PLOT) == [DIALOGUE]

    def test_full_then_other_never_keeps_both(self):
        selection = toggle_option([], FULL)
        selection = toggle_option(selection, PLOT)
        assert FULL not in selection
        selection = toggle_option(selection, FULL)
        assert selection == [FULL]

    def test_accepts_raw_values(self):
        assert toggle_option(["Plot Analysis"], FULL) == [FULL]


class TestValidateRequest:

    def test_valid_with_options(self):
        validate_request("INT. ROOM", [PLOT], "")

    def test_valid_with_only_custom_points(self):
        validate_request("INT. ROOM", [], "Foreshadowing")

    def test_missing_directive(self):
        with pytest.raises(AnalysisValidationError, match=MISSING_DIRECTIVE_MESSAGE):
            validate_request("INT. ROOM", [], "   ")

    def test_empty_script(self):
        with pytest.raises(AnalysisValidationError) as exc_info:
            validate_request(" \n ", [FULL], "")
        assert exc_info.value.message == EMPTY_SCRIPT_MESSAGE

    def test_directive_checked_before_script(self):
        with pytest.raises(AnalysisValidationError) as exc_info:
            validate_request("", [], "")
        assert exc_info.value.message == MISSING_DIRECTIVE_MESSAGE


class TestAnalysisRequestSchema:

    def test_defaults(self):
        request = AnalysisRequest(script_text="INT. ROOM")
        assert request.options == [FULL]
        assert request.tone == Tone.STANDARD
        assert request.custom_points == ""

    def test_duplicates_dropped_in_order(self):
        request = AnalysisRequest(
            script_text="x",
            options=["Dialogue Quality", "Plot Analysis", "Dialogue Quality"],
        )
        assert request.options == [DIALOGUE, PLOT]
