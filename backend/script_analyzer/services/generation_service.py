"""
Generation Service

Sends a finished analysis prompt to Claude and returns the completion text.
This is the only network call in the analysis flow.
"""

from anthropic import AsyncAnthropic
import logging
from typing import Any, Dict, Optional

from script_analyzer.core.config import settings
from script_analyzer.core.errors import GenerationError
from script_analyzer.middleware.timing import async_timing_context

logger = logging.getLogger(__name__)

GENERATION_ERROR_PREFIX = "An error occurred while analyzing the script"
UNKNOWN_GENERATION_ERROR = "An unknown error occurred while analyzing the script."
EMPTY_RESPONSE_ERROR = "The analysis service returned an empty response."


class GenerationService:
    """
    Thin wrapper around the Anthropic Messages API.

    Features:
    - Optional extended thinking (thinking blocks are dropped from the result)
    - Concatenates every text block of the response
    - Normalizes all failures into GenerationError
    """

    def __init__(
        self,
        client: Optional[AsyncAnthropic] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        thinking_budget: Optional[int] = None
    ):
        """Initialize generation service with an Anthropic client."""
        self.anthropic_client = client or AsyncAnthropic(
            api_key=settings.ANTHROPIC_API_KEY
        )
        self.model = model or settings.ANALYSIS_MODEL
        self.max_tokens = max_tokens or settings.ANALYSIS_MAX_TOKENS
        self.thinking_budget = (
            settings.ANALYSIS_THINKING_BUDGET if thinking_budget is None else thinking_budget
        )

    def _extract_all_text(self, content_blocks) -> str:
        """
        Extract and concatenate all text blocks from Claude response.

        Responses can carry several content blocks (and thinking blocks when
        extended thinking is on); only "text" blocks are kept.

        Args:
            content_blocks: List of content blocks from response.content

        Returns:
            Concatenated text from all text-type blocks, joined by newlines
        """
        text_parts = []
        for block in content_blocks:
            if hasattr(block, 'type') and block.type == "text":
                text_parts.append(block.text)
        return "\n".join(text_parts) if text_parts else ""

    def _request_params(self, prompt: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self.thinking_budget > 0:
            params["thinking"] = {
                "type": "enabled",
                "budget_tokens": self.thinking_budget,
            }
        return params

    async def generate(self, prompt: str) -> str:
        """
        Generate an analysis for the given prompt.

        Args:
            prompt: Complete prompt from the prompt builder

        Returns:
            Completion text (markdown-like)

        Raises:
            GenerationError: If the Claude API call fails or returns no text
        """
        try:
            async with async_timing_context(f"Claude analysis ({self.model})"):
                response = await self.anthropic_client.messages.create(
                    **self._request_params(prompt)
                )
        except Exception as e:
            logger.error(f"Error analyzing script with Claude: {str(e)}")
            message = str(e)
            if message:
                raise GenerationError(f"{GENERATION_ERROR_PREFIX}: {message}") from e
            raise GenerationError(UNKNOWN_GENERATION_ERROR) from e

        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning(
                f"Analysis hit the max_tokens limit ({self.max_tokens}); output may be truncated"
            )

        text = self._extract_all_text(response.content or [])
        if not text.strip():
            logger.error("Claude returned no text content for the analysis prompt")
            raise GenerationError(EMPTY_RESPONSE_ERROR)

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(
                f"Analysis generated: {usage.input_tokens} input tokens, "
                f"{usage.output_tokens} output tokens"
            )

        return text


_generation_service: Optional[GenerationService] = None


def get_generation_service() -> GenerationService:
    """FastAPI dependency returning the shared generation service."""
    global _generation_service
    if _generation_service is None:
        _generation_service = GenerationService()
    return _generation_service
