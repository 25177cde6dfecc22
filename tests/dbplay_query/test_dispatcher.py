from __future__ import annotations

import random

import httpx
import pytest

from dbplay_cli.dbplay_query.dispatcher import (
    SIMULATED_DELAY_MIN_MS,
    SIMULATED_DELAY_SPAN_MS,
    QueryDispatcher,
    simulated_delay_ms,
)
from dbplay_cli.dbplay_query.engines import EngineRegistry
from dbplay_cli.dbplay_query.remote import QueryServiceClient
from dbplay_cli.dbplay_query.types import (
    CacheHitResult,
    DocumentResult,
    EngineMode,
    Failure,
    KeyListResult,
    SuccessResult,
    TableResult,
)


class FakeClock:
    """Advances by `step` seconds on every reading."""

    def __init__(self, step: float = 0.0) -> None:
        self.now = 1000.0
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


class RecordingSleep:
    def __init__(self, clock: FakeClock | None = None) -> None:
        self.calls: list[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self._clock is not None:
            self._clock.now += seconds


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__()
        self._value = value

    def random(self) -> float:
        return self._value


def _sql_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "data": {
                "type": "TABLE",
                "data": {"columns": ["id"], "rows": [[1], [2]]},
                "execTimeMs": 1,
            }
        },
    )


def _registry(handler=_sql_handler) -> EngineRegistry:
    client = QueryServiceClient("http://sql.test", transport=httpx.MockTransport(handler))
    return EngineRegistry.default(client)


def _dispatcher(**kwargs) -> tuple[QueryDispatcher, RecordingSleep]:
    clock = kwargs.pop("clock", None) or FakeClock()
    sleep = RecordingSleep(clock)
    dispatcher = QueryDispatcher(
        kwargs.pop("registry", None) or _registry(),
        clock=clock,
        sleep=sleep,
        rng=kwargs.pop("rng", None) or FixedRandom(0.5),
        **kwargs,
    )
    return dispatcher, sleep


@pytest.mark.parametrize("value", [0.0, 0.25, 0.999999])
def test_simulated_delay_range(value: float) -> None:
    delay = simulated_delay_ms(FixedRandom(value))

    assert SIMULATED_DELAY_MIN_MS <= delay < SIMULATED_DELAY_MIN_MS + SIMULATED_DELAY_SPAN_MS


@pytest.mark.asyncio
async def test_document_read_renders_record_and_fields() -> None:
    dispatcher, sleep = _dispatcher()

    model = await dispatcher.dispatch("user:1", EngineMode.DOCUMENT)

    assert '<span class="json-string">&#34;Alice Johnson&#34;</span>' in model.content
    assert model.stats.as_dict()["Fields"] == "3"
    assert model.succeeded is True
    assert sleep.calls == [0.2]


@pytest.mark.asyncio
async def test_elapsed_includes_simulated_delay() -> None:
    dispatcher, sleep = _dispatcher(rng=FixedRandom(0.0))

    result = await dispatcher.run("popular:games", "cache")

    assert result.outcome == CacheHitResult(data=["Minecraft", "Roblox", "Fortnite"])
    assert sleep.calls == [0.1]
    assert result.execution.elapsed_ms == pytest.approx(100.0)


@pytest.mark.asyncio
async def test_cache_set_renders_success() -> None:
    dispatcher, _ = _dispatcher()

    model = await dispatcher.dispatch('SET temp:data "Hello Cache!"', "cache")

    assert "✅ Cache value set successfully (simulated)" in model.content
    assert model.stats.as_dict() == {"Status": "Success"}


@pytest.mark.asyncio
async def test_document_miss_renders_failure() -> None:
    dispatcher, _ = _dispatcher()

    model = await dispatcher.dispatch("user:99", "nosql")

    assert "❌ Error: Key not found in NoSQL store" in model.content
    assert model.badge.startswith("❌ ")
    assert model.stats.as_dict()["Status"] == "Failed"
    assert model.succeeded is False


@pytest.mark.asyncio
async def test_keys_listing() -> None:
    dispatcher, _ = _dispatcher()

    result = await dispatcher.run("KEYS *", EngineMode.DOCUMENT)

    assert result.outcome == KeyListResult(keys=("user:1", "user:2"))
    assert result.succeeded


@pytest.mark.asyncio
async def test_sql_is_not_delayed_and_reaches_service() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return _sql_handler(request)

    dispatcher, sleep = _dispatcher(registry=_registry(handler))

    result = await dispatcher.run("SELECT id FROM t", "sql")

    assert sleep.calls == []
    assert seen == ["/api/query"]
    assert result.outcome == TableResult(columns=("id",), rows=((1,), (2,)), exec_time_ms=1)


@pytest.mark.asyncio
async def test_latency_can_be_disabled() -> None:
    dispatcher, sleep = _dispatcher(simulate_latency=False)

    result = await dispatcher.run("user:2", "nosql")

    assert isinstance(result.outcome, DocumentResult)
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_unknown_mode_yields_failure() -> None:
    dispatcher, sleep = _dispatcher()

    result = await dispatcher.run("user:1", "graph")

    assert result.outcome == Failure(message="Unknown database type")
    assert result.execution.mode is None
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_sequence_numbers_increase_per_dispatch() -> None:
    dispatcher, _ = _dispatcher()

    first = await dispatcher.dispatch("user:1", "nosql")
    second = await dispatcher.dispatch("missing", "cache")
    third = await dispatcher.run("KEYS *", "nosql")

    assert (first.sequence, second.sequence, third.execution.sequence) == (1, 2, 3)


@pytest.mark.asyncio
async def test_elapsed_never_negative() -> None:
    dispatcher, _ = _dispatcher(clock=FakeClock(step=-0.5), simulate_latency=False)

    result = await dispatcher.run('SET user:3 {"name": "Charlie"}', "nosql")

    assert result.outcome == SuccessResult(message="Data stored successfully (simulated)")
    assert result.execution.elapsed_ms == 0
