"""HTTP client for the remote SQL query service."""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from dbplay_cli.shared.config import ServiceSettings
from dbplay_cli.shared.exceptions import TransportFailure
from dbplay_cli.shared.logging import Logger, get_logger

from .types import HealthStatus, SampleQuery

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class QueryServiceClient:
    """Talks to the health and query endpoints of the SQL service."""

    def __init__(
        self,
        base_url: str,
        *,
        health_path: str = "/",
        query_path: str = "/api/query",
        timeout: float | None = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._health_path = health_path
        self._query_path = query_path
        self._timeout = timeout
        self._transport = transport
        self._logger = logger or get_logger()

    @classmethod
    def from_settings(
        cls,
        settings: ServiceSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: Logger | None = None,
    ) -> QueryServiceClient:
        return cls(
            settings.base_url,
            health_path=settings.health_path,
            query_path=settings.query_path,
            timeout=settings.timeout_seconds,
            transport=transport,
            logger=logger,
        )

    def _build_url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}{path}"

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._build_url(path)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, headers=JSON_HEADERS, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{method} {url} failed: {exc}") from exc

        # The service wraps errors in the same envelope, so non-2xx bodies are still parsed.
        try:
            return response.json()
        except ValueError as exc:
            raise TransportFailure(
                f"{method} {url} returned a non-JSON body (HTTP {response.status_code})"
            ) from exc

    async def fetch_health(self) -> HealthStatus:
        """Return the service health; any failure reads as disconnected."""
        try:
            body = await self._request_json("GET", self._health_path)
        except TransportFailure as exc:
            self._logger.warning(f"Health check failed: {exc}")
            return HealthStatus.disconnected(str(exc))

        data = _envelope_data(body)
        if data is None:
            return HealthStatus.disconnected("Health response carried no data")

        try:
            status = HealthStatus(
                connected=bool(data.get("connected", False)),
                sample_queries=tuple(
                    SampleQuery(title=str(item["title"]), query=str(item["query"]))
                    for item in data.get("sampleQueries") or ()
                ),
                table_names=tuple(str(name) for name in data.get("tableNames") or ()),
                message=data.get("message"),
            )
        except (KeyError, TypeError) as exc:
            self._logger.warning(f"Health response was malformed: {exc}")
            return HealthStatus.disconnected(f"Malformed health response: {exc}")

        self._logger.debug(f"tableNames {list(status.table_names)}")
        return status

    async def execute_query(self, sql: str) -> Mapping[str, Any] | None:
        """POST the statement verbatim and return the response's `data` payload."""
        body = await self._request_json("POST", self._query_path, json={"sql": sql})
        return _envelope_data(body)


def _envelope_data(body: Any) -> Mapping[str, Any] | None:
    if not isinstance(body, Mapping):
        return None
    data = body.get("data")
    if not isinstance(data, Mapping):
        return None
    return data
