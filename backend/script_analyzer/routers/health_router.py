from fastapi import APIRouter, status
from pydantic import BaseModel

from script_analyzer.core.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    model: str
    generation_configured: bool


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    description="Reports that the API is up and whether an Anthropic key is configured"
)
async def health_check():
    """Liveness check; does not call the generation service."""
    return HealthResponse(
        status="ok",
        model=settings.ANALYSIS_MODEL,
        generation_configured=bool(settings.ANTHROPIC_API_KEY)
    )
