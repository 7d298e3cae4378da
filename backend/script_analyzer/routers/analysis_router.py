"""
Script analysis endpoints for the Script Analyzer API
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from typing import Optional
import logging

from script_analyzer.core.config import settings
from script_analyzer.core.errors import (
    AnalysisInProgressError,
    AnalysisValidationError,
    GenerationError,
)
from script_analyzer.core.rate_limit import limiter
from script_analyzer.schemas.analysis import (
    AnalysisOption,
    AnalysisOptionsResponse,
    AnalysisRequest,
    AnalysisResponse,
    DEFAULT_OPTIONS,
    DEFAULT_TONE,
    OptionToggleRequest,
    OptionToggleResponse,
    PersistedState,
    PersistedStateResponse,
    RenderRequest,
    RenderResponse,
    Tone,
)
from script_analyzer.services.analysis_options import toggle_option
from script_analyzer.services.analysis_service import AnalysisService, InFlightClients, get_in_flight_clients
from script_analyzer.services.analysis_state_store import AnalysisStateStore, get_state_store
from script_analyzer.services.generation_service import GenerationService, get_generation_service
from script_analyzer.services.markdown_renderer import block_to_dict, render_blocks, render_html

router = APIRouter(prefix="/analysis", tags=["Analysis"])
logger = logging.getLogger(__name__)

CLIENT_ID_REQUIRED_MESSAGE = "The X-Client-Id header is required."


def get_client_id(x_client_id: Optional[str] = Header(None)) -> str:
    """
    Identify the browser whose state is being read or written.

    Saved state and the in-flight guard are scoped to this id.
    """
    if not x_client_id or not x_client_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=CLIENT_ID_REQUIRED_MESSAGE
        )
    return x_client_id.strip()


def get_analysis_service(
    generator: GenerationService = Depends(get_generation_service),
    store: AnalysisStateStore = Depends(get_state_store),
    in_flight: InFlightClients = Depends(get_in_flight_clients)
) -> AnalysisService:
    return AnalysisService(generator=generator, store=store, in_flight=in_flight)


@router.get("/options", response_model=AnalysisOptionsResponse)
async def list_analysis_options():
    """List the analysis options and tones the front-end can offer."""
    return AnalysisOptionsResponse(
        options=list(AnalysisOption),
        tones=list(Tone),
        default_options=DEFAULT_OPTIONS,
        default_tone=DEFAULT_TONE
    )


@router.post("/options/toggle", response_model=OptionToggleResponse)
async def toggle_analysis_option(payload: OptionToggleRequest):
    """Apply one option click to the current selection."""
    return OptionToggleResponse(selected=toggle_option(payload.selected, payload.option))


@router.post("", response_model=AnalysisResponse)
@limiter.limit(settings.ANALYZE_RATE_LIMIT)
async def analyze_script(
    request: Request,
    payload: AnalysisRequest,
    client_id: str = Depends(get_client_id),
    service: AnalysisService = Depends(get_analysis_service)
):
    """
    Analyze a script with the selected options and tone.
    """
    try:
        result = await service.analyze(payload, client_id)

        return AnalysisResponse(
            success=True,
            analysis=result.analysis,
            blocks=[block_to_dict(block) for block in result.blocks],
            persisted=result.persisted
        )

    except AnalysisValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    except AnalysisInProgressError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message
        )
    except GenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during analysis: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to analyze script: {str(e)}"
        )


@router.post("/render", response_model=RenderResponse)
async def render_analysis(payload: RenderRequest):
    """Render markdown-like analysis text into display blocks and HTML."""
    blocks = render_blocks(payload.text)
    return RenderResponse(
        blocks=[block_to_dict(block) for block in blocks],
        html=str(render_html(blocks))
    )


@router.get("/state", response_model=PersistedStateResponse)
async def restore_analysis_state(
    client_id: str = Depends(get_client_id),
    service: AnalysisService = Depends(get_analysis_service)
):
    """
    Return the client's last saved analysis, or defaults if there is none.
    """
    state = await service.restore(client_id)
    if state is None:
        return PersistedStateResponse(found=False, state=PersistedState())

    return PersistedStateResponse(
        found=True,
        state=state,
        blocks=[block_to_dict(block) for block in render_blocks(state.analysis)] if state.analysis else []
    )


@router.delete("/state", status_code=status.HTTP_204_NO_CONTENT)
async def clear_analysis_state(
    client_id: str = Depends(get_client_id),
    service: AnalysisService = Depends(get_analysis_service)
):
    """Clear the client's saved analysis."""
    await service.clear(client_id)
