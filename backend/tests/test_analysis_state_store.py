import pytest
from unittest.mock import AsyncMock
from redis.exceptions import ConnectionError as RedisConnectionError

from script_analyzer.core.errors import PersistenceError
from script_analyzer.schemas.analysis import AnalysisOption, PersistedState, Tone
from script_analyzer.services.analysis_state_store import AnalysisStateStore


def _state(**overrides) -> PersistedState:
    data = {
        "analysis": "## Plot\n**Tight** pacing.",
        "selected_options": [AnalysisOption.PLOT_ANALYSIS, AnalysisOption.DIALOGUE_QUALITY],
        "selected_tone": Tone.CRITICAL,
        "custom_analysis_points": "Act 2 midpoint",
    }
    data.update(overrides)
    return PersistedState(**data)


@pytest.mark.asyncio
async def test_save_then_load(state_store: AnalysisStateStore):
    await state_store.save("client-a", _state())

    loaded = await state_store.load("client-a")

    assert loaded == _state()


@pytest.mark.asyncio
async def test_load_missing_is_none(state_store: AnalysisStateStore):
    assert await state_store.load("nobody") is None


@pytest.mark.asyncio
async def test_clients_are_isolated(state_store: AnalysisStateStore):
    await state_store.save("client-a", _state(analysis="A"))
    await state_store.save("client-b", _state(analysis="B"))

    assert (await state_store.load("client-a")).analysis == "A"
    assert (await state_store.load("client-b")).analysis == "B"


@pytest.mark.asyncio
async def test_save_overwrites(state_store: AnalysisStateStore):
    await state_store.save("client-a", _state(analysis="first"))
    await state_store.save("client-a", _state(analysis="second"))

    assert (await state_store.load("client-a")).analysis == "second"


@pytest.mark.asyncio
async def test_remove(state_store: AnalysisStateStore, fake_redis):
    await state_store.save("client-a", _state())

    await state_store.remove("client-a")

    assert await state_store.load("client-a") is None
    assert await fake_redis.exists("scriptAnalysisData:client-a") == 0


@pytest.mark.asyncio
async def test_remove_missing_is_not_an_error(state_store: AnalysisStateStore):
    await state_store.remove("nobody")


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [
    "{not json",
    '"just a string"',
    '{"selected_tone": "Sarcastic"}',
    '{"selected_options": ["Soundtrack"]}',
])
async def test_corrupt_record_is_deleted(state_store: AnalysisStateStore, fake_redis, raw):
    await fake_redis.set("scriptAnalysisData:client-a", raw)

    assert await state_store.load("client-a") is None
    assert await fake_redis.exists("scriptAnalysisData:client-a") == 0


@pytest.mark.asyncio
async def test_non_utf8_record_is_deleted(state_store: AnalysisStateStore, fake_redis):
    await fake_redis.set("scriptAnalysisData:client-a", b"\xff\xfe garbage")

    assert await state_store.load("client-a") is None
    assert await fake_redis.exists("scriptAnalysisData:client-a") == 0
    # A fresh save works after the bad record is gone
    await state_store.save("client-a", _state())
    assert await state_store.load("client-a") == _state()


@pytest.mark.asyncio
async def test_partial_record_uses_defaults(state_store: AnalysisStateStore, fake_redis):
    await fake_redis.set("scriptAnalysisData:client-a", '{"analysis": "saved text"}')

    loaded = await state_store.load("client-a")

    assert loaded.analysis == "saved text"
    assert loaded.selected_options == [AnalysisOption.FULL_ANALYSIS]
    assert loaded.selected_tone == Tone.STANDARD


@pytest.mark.asyncio
async def test_redis_failure_raises_persistence_error():
    broken = AsyncMock()
    broken.set.side_effect = RedisConnectionError("connection refused")
    broken.get.side_effect = RedisConnectionError("connection refused")
    broken.delete.side_effect = RedisConnectionError("connection refused")
    store = AnalysisStateStore(redis_url="redis://nowhere", redis_client=broken)

    with pytest.raises(PersistenceError):
        await store.save("client-a", _state())
    with pytest.raises(PersistenceError):
        await store.load("client-a")
    with pytest.raises(PersistenceError):
        await store.remove("client-a")
