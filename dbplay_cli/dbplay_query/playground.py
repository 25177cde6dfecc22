"""Wires session, dispatcher, formatter, and render surface together for a host."""

from __future__ import annotations

import httpx

from dbplay_cli.shared.config import AppConfig
from dbplay_cli.shared.logging import Logger, get_logger

from .dispatcher import QueryDispatcher
from .engines import EngineRegistry
from .remote import QueryServiceClient
from .render import ResultFormatter, status_class
from .session import RenderSurface, SessionState
from .types import EngineMode, HealthStatus, RenderModel


class Playground:
    """One user session: pick a mode, run queries, read the rendered regions."""

    def __init__(
        self,
        session: SessionState,
        dispatcher: QueryDispatcher,
        client: QueryServiceClient,
        formatter: ResultFormatter,
        surface: RenderSurface | None = None,
        *,
        logger: Logger | None = None,
    ) -> None:
        self.session = session
        self.surface = surface or RenderSurface()
        self._dispatcher = dispatcher
        self._client = client
        self._formatter = formatter
        self._logger = logger or get_logger()

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: Logger | None = None,
    ) -> Playground:
        logger = logger or get_logger()
        client = QueryServiceClient.from_settings(config.service, transport=transport, logger=logger)
        formatter = ResultFormatter()
        dispatcher = QueryDispatcher(
            EngineRegistry.default(client, logger=logger),
            formatter,
            simulate_latency=config.dispatch.simulate_latency,
            logger=logger,
        )
        session = SessionState(mode=EngineMode.parse(config.session.default_mode))
        return cls(session, dispatcher, client, formatter, logger=logger)

    async def connect(self) -> HealthStatus:
        """Refresh the health snapshot; SQL sample queries come from it."""
        status = await self._client.fetch_health()
        self.session.apply_health(status)
        self._logger.debug(f"service status: {status_class(status.connected)}")
        return status

    def switch(self, mode: EngineMode | str) -> EngineMode:
        return self.session.switch(mode)

    def sample_queries_html(self) -> str:
        return self._formatter.render_sample_queries(self.session.sample_queries())

    async def execute(self, query: str) -> RenderModel:
        """Run `query` against the active mode and publish the result to the surface."""
        self.surface.show_loading(self._formatter.loading())
        model = await self._dispatcher.dispatch(query.strip(), self.session.mode)
        self.surface.apply(model)
        return model
