"""
Prompt Builder

Builds the single instruction string sent to the generation service from the
user's script, selected analysis options, tone and custom points.

The option and tone tables are plain configuration data so the builder stays
a pure function: same inputs, byte-identical prompt.
"""

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Union

from script_analyzer.core.config import settings
from script_analyzer.schemas.analysis import AnalysisOption, Tone

FULL_ANALYSIS_INSTRUCTION = (
    "Provide a comprehensive, detailed and in-depth analysis and summary of this script, "
    "including but not limited to:\n"
    "- Introduction of the main characters (personality, motivation, development)\n"
    "- Analysis of the relationships between characters\n"
    "- Story outline (broken down by episode or scene)\n"
    "- Core conflict\n"
    "- Themes explored"
)

OPTION_DIRECTIVES: Mapping[AnalysisOption, str] = MappingProxyType({
    AnalysisOption.CHARACTER_ARCS: (
        "Character arcs and development: analyze the journey of each main character in detail. "
        "How do their personality, motivations and goals evolve over the course of the story? "
        "What key transformations do they go through? "
        "Give each main character a separate section of the analysis."
    ),
    AnalysisOption.PLOT_ANALYSIS: (
        "Plot analysis: evaluate the story structure, pacing and key plot points "
        "(inciting incident, rising action, climax, falling action and resolution). "
        "Is the plot engaging? Are there logical gaps?"
    ),
    AnalysisOption.DIALOGUE_QUALITY: (
        "Dialogue quality: evaluate the dialogue in depth. Analyze how authentic and natural it is, "
        "and whether each character's voice is distinct and consistent. Assess how well the dialogue "
        "reveals character, advances the plot, builds conflict and carries subtext."
    ),
    AnalysisOption.THEMATIC_ELEMENTS: (
        "Thematic elements: identify and explore the core themes and underlying messages of the script. "
        "How are these themes expressed through plot, characters and symbolism?"
    ),
})

TONE_DESCRIPTORS: Mapping[Tone, str] = MappingProxyType({
    Tone.STANDARD: "standard",
    Tone.FORMAL: "formal",
    Tone.INFORMAL: "informal",
    Tone.CRITICAL: "critical",
    Tone.ENTHUSIASTIC: "enthusiastic",
})

GENERIC_INSTRUCTION = "Analyze the script in depth."
SPECIFIC_ASPECTS_LEAD = "Analyze the following specific aspects of the script in depth:"
CUSTOM_POINTS_ONLY_LEAD = "Analyze the script in depth based on the following custom points:"
CUSTOM_POINTS_FOCUS_LEAD = "In your analysis, pay special attention to the following points:"

SECTION_DELIMITER = "\n\n"

PROMPT_TEMPLATE = (
    "You are a professional script analyst. Respond in {language} and analyze the provided "
    "TV script according to the following requirements."
    "{sep}Analysis requirements:\n{instruction}"
    "{sep}Analysis tone:\n{tone_instruction}"
    "{sep}---"
    "{sep}Script content:\n{script}"
)

OptionLike = Union[AnalysisOption, str]


def _coerce_option(option: OptionLike) -> OptionLike:
    """Map raw strings onto the enum where possible; unknown strings pass through."""
    if isinstance(option, AnalysisOption):
        return option
    try:
        return AnalysisOption(option)
    except ValueError:
        return option


def _coerce_tone(tone: Union[Tone, str]) -> Optional[Tone]:
    if isinstance(tone, Tone):
        return tone
    try:
        return Tone(tone)
    except ValueError:
        return None


def describe_option(option: OptionLike) -> str:
    """Directive text for one option, or the option itself if it has none."""
    option = _coerce_option(option)
    if isinstance(option, AnalysisOption) and option in OPTION_DIRECTIVES:
        return OPTION_DIRECTIVES[option]
    return option.value if isinstance(option, AnalysisOption) else str(option)


def tone_instruction(tone: Union[Tone, str]) -> str:
    """Tone sentence for the prompt; unrecognized tones fall back to Standard."""
    descriptor = TONE_DESCRIPTORS.get(_coerce_tone(tone), TONE_DESCRIPTORS[Tone.STANDARD])
    return f"Write the analysis in a {descriptor} tone."


def build_instruction(options: Iterable[OptionLike], custom_points: str = "") -> str:
    """
    Build the analysis directive.

    FullAnalysis anywhere in the options wins over every other option.
    Options keep the order the caller gave them.
    """
    selected: List[OptionLike] = [_coerce_option(option) for option in options]

    if AnalysisOption.FULL_ANALYSIS in selected:
        instruction = FULL_ANALYSIS_INSTRUCTION
    elif selected:
        directives = "\n- ".join(describe_option(option) for option in selected)
        instruction = f"{SPECIFIC_ASPECTS_LEAD}\n- {directives}"
    else:
        instruction = GENERIC_INSTRUCTION

    points = custom_points.strip()
    if points:
        if not selected:
            instruction = f"{CUSTOM_POINTS_ONLY_LEAD}\n{points}"
        else:
            instruction += f"\n\n{CUSTOM_POINTS_FOCUS_LEAD}\n{points}"

    return instruction


def build_prompt(
    script: str,
    options: Iterable[OptionLike],
    tone: Union[Tone, str],
    custom_points: str = "",
    language: Optional[str] = None,
) -> str:
    """
    Compose the full prompt for the generation service.

    Args:
        script: Script text, embedded verbatim at the end of the prompt
        options: Selected analysis options, in display order
        tone: Requested tone
        custom_points: Free-form points to address
        language: Response language, defaults to ANALYSIS_RESPONSE_LANGUAGE

    Returns:
        Prompt string. Never raises for string inputs.
    """
    return PROMPT_TEMPLATE.format(
        language=language or settings.ANALYSIS_RESPONSE_LANGUAGE,
        instruction=build_instruction(options, custom_points),
        tone_instruction=tone_instruction(tone),
        script=script,
        sep=SECTION_DELIMITER,
    )
