"""Route queries to the selected engine, time them, and hand the outcome to the formatter."""

from __future__ import annotations

import asyncio
import itertools
import random
import time
from typing import Awaitable, Callable

from dbplay_cli.shared.exceptions import DomainFailure
from dbplay_cli.shared.logging import Logger, get_logger

from .engines import EngineRegistry
from .render import ResultFormatter
from .types import DispatchOutcome, EngineMode, Failure, Outcome, QueryExecution, RenderModel

# Local engines answer after a random delay in [MIN, MIN + SPAN) milliseconds so the
# playground feels like it is talking to a server.
SIMULATED_DELAY_MIN_MS = 100
SIMULATED_DELAY_SPAN_MS = 200

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


def simulated_delay_ms(rng: random.Random) -> float:
    return rng.random() * SIMULATED_DELAY_SPAN_MS + SIMULATED_DELAY_MIN_MS


class QueryDispatcher:
    """Sends a query to the engine for a mode and measures how long it took.

    Each call builds its own QueryExecution, so overlapping dispatches never
    share timing state.
    """

    def __init__(
        self,
        registry: EngineRegistry,
        formatter: ResultFormatter | None = None,
        *,
        simulate_latency: bool = True,
        clock: Clock = time.perf_counter,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._registry = registry
        self._formatter = formatter or ResultFormatter()
        self._simulate_latency = simulate_latency
        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._logger = logger or get_logger()
        self._sequence = itertools.count(1)

    async def run(self, query: str, mode: EngineMode | str) -> DispatchOutcome:
        """Execute `query` and return its outcome plus timing.

        DomainFailure never escapes: it is turned into a Failure outcome here.
        """
        sequence = next(self._sequence)
        started_at = self._clock()
        active: EngineMode | None = None
        try:
            active = EngineMode.parse(mode)
            self._logger.debug(f"dispatch #{sequence} [{active.value}] {query!r}")
            outcome: Outcome = await self._execute(active, query)
        except DomainFailure as exc:
            outcome = Failure(message=exc.message)

        execution = QueryExecution(
            query=query,
            mode=active,
            sequence=sequence,
            started_at=started_at,
            finished_at=self._clock(),
        )
        self._logger.debug(
            f"dispatch #{sequence} finished as {outcome.kind} in {execution.elapsed_ms:.2f}ms"
        )
        return DispatchOutcome(outcome=outcome, execution=execution)

    async def dispatch(self, query: str, mode: EngineMode | str) -> RenderModel:
        """Run the query and render its outcome exactly once."""
        result = await self.run(query, mode)
        return self._formatter.render(
            result.outcome,
            result.execution.elapsed_ms,
            sequence=result.execution.sequence,
        )

    async def _execute(self, mode: EngineMode, query: str) -> Outcome:
        engine = self._registry.get(mode)
        if self._registry.is_remote(mode):
            return await engine.execute(query)
        if self._simulate_latency:
            await self._sleep(simulated_delay_ms(self._rng) / 1000.0)
        return engine.execute(query)
