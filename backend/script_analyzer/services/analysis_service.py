"""
Analysis Service

Runs one script analysis end to end:
validate -> build prompt -> generate -> render -> persist.

Persistence is best effort: a failed save is logged and the result is still
returned to the caller.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set
import logging

from script_analyzer.core.errors import AnalysisInProgressError, PersistenceError
from script_analyzer.schemas.analysis import AnalysisRequest, PersistedState
from script_analyzer.services.analysis_options import validate_request
from script_analyzer.services.analysis_state_store import AnalysisStateStore
from script_analyzer.services.generation_service import GenerationService
from script_analyzer.services.markdown_renderer import DisplayBlock, render_blocks
from script_analyzer.services.prompt_builder import build_prompt

logger = logging.getLogger(__name__)

IN_PROGRESS_MESSAGE = "An analysis is already running. Please wait for it to finish."


@dataclass(frozen=True)
class AnalysisResult:
    analysis: str
    blocks: List[DisplayBlock]
    persisted: bool


class InFlightClients:
    """Client ids with an outstanding generation call."""

    def __init__(self):
        self._clients: Set[str] = set()

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._clients

    @contextmanager
    def claim(self, client_id: str) -> Iterator[None]:
        """
        Hold the client for the duration of the block.

        Raises:
            AnalysisInProgressError: The client is already held
        """
        if client_id in self._clients:
            logger.warning(f"Rejected overlapping analysis for client {client_id}")
            raise AnalysisInProgressError(IN_PROGRESS_MESSAGE)

        self._clients.add(client_id)
        try:
            yield
        finally:
            self._clients.discard(client_id)


class AnalysisService:
    """Coordinates the prompt builder, generation service, renderer and state store."""

    def __init__(
        self,
        generator: GenerationService,
        store: AnalysisStateStore,
        in_flight: Optional[InFlightClients] = None,
    ):
        self.generator = generator
        self.store = store
        self.in_flight = in_flight if in_flight is not None else InFlightClients()

    async def analyze(self, request: AnalysisRequest, client_id: str) -> AnalysisResult:
        """
        Run an analysis for a client.

        Raises:
            AnalysisValidationError: Script blank or no directive selected
            AnalysisInProgressError: The client already has an analysis running
            GenerationError: The generation service failed
        """
        validate_request(request.script_text, request.options, request.custom_points)

        with self.in_flight.claim(client_id):
            prompt = build_prompt(
                request.script_text,
                request.options,
                request.tone,
                request.custom_points,
            )
            logger.info(
                f"Analyzing script for client {client_id}: "
                f"{len(request.script_text)} chars, options={[o.value for o in request.options]}, "
                f"tone={request.tone.value}"
            )
            analysis = await self.generator.generate(prompt)

        blocks = render_blocks(analysis)
        persisted = await self._persist(client_id, request, analysis)
        return AnalysisResult(analysis=analysis, blocks=blocks, persisted=persisted)

    async def _persist(self, client_id: str, request: AnalysisRequest, analysis: str) -> bool:
        state = PersistedState(
            analysis=analysis,
            selected_options=request.options,
            selected_tone=request.tone,
            custom_analysis_points=request.custom_points,
        )
        try:
            await self.store.save(client_id, state)
        except PersistenceError as e:
            logger.error(f"Failed to save analysis for client {client_id}: {e.message}")
            return False
        return True

    async def restore(self, client_id: str) -> Optional[PersistedState]:
        """Saved state for the client, or None if absent or unreadable."""
        try:
            return await self.store.load(client_id)
        except PersistenceError as e:
            logger.error(f"Failed to load saved analysis for client {client_id}: {e.message}")
            return None

    async def clear(self, client_id: str) -> None:
        """Forget the client's saved analysis. Failures are logged only."""
        try:
            await self.store.remove(client_id)
        except PersistenceError as e:
            logger.error(f"Failed to clear saved analysis for client {client_id}: {e.message}")


_in_flight_clients: Optional[InFlightClients] = None


def get_in_flight_clients() -> InFlightClients:
    """FastAPI dependency returning the process-wide in-flight tracker."""
    global _in_flight_clients
    if _in_flight_clients is None:
        _in_flight_clients = InFlightClients()
    return _in_flight_clients
