"""
Analysis State Store

Persists the last successful analysis per client in Redis so the front-end
can restore it on start-up.

Each client has one key: {ANALYSIS_STATE_KEY}:{client_id}, holding a JSON
encoded PersistedState. Values are read as raw bytes and decoded while
parsing, so a record that is not UTF-8 counts as corrupt.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import logging

from pydantic import ValidationError
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from script_analyzer.core.config import settings
from script_analyzer.core.errors import PersistenceError
from script_analyzer.schemas.analysis import PersistedState

logger = logging.getLogger(__name__)


class AnalysisStateStore:
    """
    Save, load and remove persisted analysis state.

    Redis failures surface as PersistenceError. A stored record that no longer
    parses is deleted and reported as absent.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: Optional[str] = None,
        redis_client: Optional[aioredis.Redis] = None,
    ):
        """
        Initialize the state store.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379)
            key_prefix: Prefix for per-client keys
            redis_client: Pre-built bytes client (decode_responses=False)
        """
        self.redis_url = redis_url or settings.REDIS_URL
        self.key_prefix = key_prefix or settings.ANALYSIS_STATE_KEY
        self.redis_client: Optional[aioredis.Redis] = redis_client

        logger.info(f"AnalysisStateStore initialized with URL: {self.redis_url}")

    async def connect(self):
        """Establish connection to Redis."""
        if self.redis_client is None:
            self.redis_client = await aioredis.from_url(
                self.redis_url,
                decode_responses=False
            )
            logger.info("Connected to Redis")

    async def disconnect(self):
        """Close Redis connection."""
        if self.redis_client:
            close_coro = getattr(self.redis_client, "aclose", None)
            if callable(close_coro):
                await close_coro()
            else:  # pragma: no cover - legacy fallback
                await self.redis_client.close()
            self.redis_client = None

        logger.info("Disconnected from Redis")

    def _key(self, client_id: str) -> str:
        return f"{self.key_prefix}:{client_id}"

    async def _client(self) -> aioredis.Redis:
        try:
            await self.connect()
        except (RedisError, OSError) as e:
            raise PersistenceError(f"Could not connect to Redis: {e}") from e
        return self.redis_client

    async def save(self, client_id: str, state: PersistedState) -> None:
        """
        Store the state for a client, replacing any previous record.

        Raises:
            PersistenceError: If Redis rejects the write
        """
        client = await self._client()
        try:
            await client.set(self._key(client_id), state.model_dump_json())
        except (RedisError, OSError) as e:
            raise PersistenceError(f"Failed to save analysis state: {e}") from e
        logger.debug(f"Saved analysis state for client {client_id}")

    @asynccontextmanager
    async def _parsed_record(self, client, key: str) -> AsyncIterator[Optional[PersistedState]]:
        """
        Yield the parsed record at key, or None if it is missing.

        A record that fails to parse is deleted before the context exits.
        """
        try:
            raw = await client.get(key)
        except (RedisError, OSError) as e:
            raise PersistenceError(f"Failed to load analysis state: {e}") from e

        if raw is None:
            yield None
            return

        try:
            state = PersistedState.model_validate_json(raw.decode("utf-8"))
        except (ValidationError, UnicodeDecodeError) as e:
            logger.error(f"Failed to parse saved analysis at {key}, discarding it: {e}")
            try:
                await client.delete(key)
            except (RedisError, OSError) as delete_err:
                raise PersistenceError(
                    f"Failed to discard corrupt analysis state: {delete_err}"
                ) from delete_err
            yield None
            return

        yield state

    async def load(self, client_id: str) -> Optional[PersistedState]:
        """
        Load the saved state for a client.

        Returns:
            PersistedState, or None if nothing usable was stored

        Raises:
            PersistenceError: If Redis cannot be read
        """
        client = await self._client()
        async with self._parsed_record(client, self._key(client_id)) as state:
            return state

    async def remove(self, client_id: str) -> None:
        """
        Delete the saved state for a client. Missing keys are not an error.

        Raises:
            PersistenceError: If Redis rejects the delete
        """
        client = await self._client()
        try:
            await client.delete(self._key(client_id))
        except (RedisError, OSError) as e:
            raise PersistenceError(f"Failed to clear analysis state: {e}") from e
        logger.debug(f"Removed analysis state for client {client_id}")


# Global singleton instance (initialized in main app)
analysis_state_store: Optional[AnalysisStateStore] = None


def get_state_store() -> AnalysisStateStore:
    """Get the global state store, creating an unconnected one on first use."""
    global analysis_state_store
    if analysis_state_store is None:
        analysis_state_store = AnalysisStateStore()
    return analysis_state_store


def initialize_state_store(redis_url: str) -> AnalysisStateStore:
    """
    Initialize the global analysis state store.

    Args:
        redis_url: Redis connection URL

    Returns:
        Initialized AnalysisStateStore instance
    """
    global analysis_state_store
    analysis_state_store = AnalysisStateStore(redis_url)
    return analysis_state_store
