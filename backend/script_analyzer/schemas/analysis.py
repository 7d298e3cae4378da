"""
Pydantic schemas for script analysis endpoints
"""

from typing import List, Optional, Literal
from pydantic import BaseModel, Field, field_validator
from enum import Enum


class AnalysisOption(str, Enum):
    """Aspects of a script the analysis can cover."""
    FULL_ANALYSIS = "Full Analysis"
    CHARACTER_ARCS = "Character Arcs and Development"
    PLOT_ANALYSIS = "Plot Analysis"
    DIALOGUE_QUALITY = "Dialogue Quality"
    THEMATIC_ELEMENTS = "Thematic Elements"


class Tone(str, Enum):
    """Voice the analysis is written in."""
    STANDARD = "Standard"
    FORMAL = "Formal"
    INFORMAL = "Informal"
    CRITICAL = "Critical"
    ENTHUSIASTIC = "Enthusiastic"


DEFAULT_OPTIONS: List[AnalysisOption] = [AnalysisOption.FULL_ANALYSIS]
DEFAULT_TONE = Tone.STANDARD


def _dedupe(options: List[AnalysisOption]) -> List[AnalysisOption]:
    seen = set()
    unique = []
    for option in options:
        if option not in seen:
            seen.add(option)
            unique.append(option)
    return unique


class AnalysisRequest(BaseModel):
    """Request schema for running a script analysis."""
    script_text: str = Field(..., description="Full script text to analyze")
    options: List[AnalysisOption] = Field(
        default_factory=lambda: list(DEFAULT_OPTIONS),
        description="Selected analysis options (order preserved, duplicates dropped)"
    )
    tone: Tone = Field(DEFAULT_TONE, description="Tone of the analysis")
    custom_points: str = Field("", description="Free-form points the analysis should address")

    @field_validator("options")
    @classmethod
    def dedupe_options(cls, value: List[AnalysisOption]) -> List[AnalysisOption]:
        return _dedupe(value)


class SpanSchema(BaseModel):
    """Inline run of paragraph text."""
    text: str
    bold: bool = False


class DisplayBlockSchema(BaseModel):
    """One rendered line of analysis output."""
    type: Literal["heading", "list_item", "spacer", "paragraph"]
    level: Optional[int] = Field(None, description="Heading level (1-3), headings only")
    text: Optional[str] = Field(None, description="Text for headings and list items")
    spans: Optional[List[SpanSchema]] = Field(None, description="Spans for paragraphs")


class AnalysisResponse(BaseModel):
    """Response schema for a completed analysis."""
    success: bool = Field(..., description="Whether the request was successful")
    analysis: str = Field(..., description="Raw analysis text returned by the model")
    blocks: List[DisplayBlockSchema] = Field(..., description="Analysis rendered into display blocks")
    persisted: bool = Field(..., description="Whether the result was saved for later restore")


class AnalysisErrorResponse(BaseModel):
    """Error response schema for analysis endpoints."""
    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Error message")


class RenderRequest(BaseModel):
    """Request schema for rendering analysis text."""
    text: str = Field(..., description="Markdown-like analysis text")


class RenderResponse(BaseModel):
    """Response schema for rendered analysis text."""
    blocks: List[DisplayBlockSchema]
    html: str = Field(..., description="Blocks painted as escaped HTML")


class OptionToggleRequest(BaseModel):
    """Request schema for toggling one analysis option."""
    selected: List[AnalysisOption] = Field(default_factory=list, description="Current selection")
    option: AnalysisOption = Field(..., description="Option the user clicked")


class OptionToggleResponse(BaseModel):
    """Response schema for an option toggle."""
    selected: List[AnalysisOption]


class AnalysisOptionsResponse(BaseModel):
    """Available analysis options, tones and their defaults."""
    options: List[AnalysisOption]
    tones: List[Tone]
    default_options: List[AnalysisOption]
    default_tone: Tone


class PersistedState(BaseModel):
    """Last successful analysis, restored when the client starts up."""
    analysis: str = ""
    selected_options: List[AnalysisOption] = Field(default_factory=lambda: list(DEFAULT_OPTIONS))
    selected_tone: Tone = DEFAULT_TONE
    custom_analysis_points: str = ""


class PersistedStateResponse(BaseModel):
    """Response schema for restoring persisted state."""
    found: bool = Field(..., description="Whether a saved analysis existed")
    state: PersistedState
    blocks: List[DisplayBlockSchema] = Field(default_factory=list)


class ScriptUploadResponse(BaseModel):
    """Response schema for a script file upload."""
    success: bool = True
    filename: str
    content: str = Field(..., description="Script text extracted from the file")
    character_count: int
