"""The three simulated engines and the registry that routes modes to them."""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from typing import Any

from dbplay_cli.shared.exceptions import DomainFailure, TransportFailure
from dbplay_cli.shared.logging import Logger, get_logger

from . import seeds
from .remote import QueryServiceClient
from .types import (
    CacheHitResult,
    DocumentResult,
    EngineMode,
    KeyListResult,
    Result,
    ScalarResult,
    SuccessResult,
    TableResult,
)

SET_PREFIX = "SET "
KEYS_ALL = "KEYS *"


class DocumentEngine:
    """Key/document lookups over a fixed in-memory store."""

    mode = EngineMode.DOCUMENT

    def __init__(self, records: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._records = dict(seeds.document_records() if records is None else records)

    def keys(self) -> tuple[str, ...]:
        return tuple(self._records)

    def execute(self, query: str) -> Result:
        statement = query.strip()
        if statement.startswith(SET_PREFIX):
            return SuccessResult(message="Data stored successfully (simulated)")
        if statement == KEYS_ALL:
            return KeyListResult(keys=self.keys())
        if statement in self._records:
            # Callers get their own copy; the store never changes.
            return DocumentResult(data=copy.deepcopy(self._records[statement]))
        raise DomainFailure("Key not found in NoSQL store")


class CacheEngine:
    """GET/SET over a map of JSON-serialised values."""

    mode = EngineMode.CACHE

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries = dict(seeds.cache_entries() if entries is None else entries)

    def keys(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def execute(self, query: str) -> Result:
        statement = query.strip()
        if statement.startswith(SET_PREFIX):
            return SuccessResult(message="Cache value set successfully (simulated)")
        if statement in self._entries:
            return CacheHitResult(data=json.loads(self._entries[statement]))
        raise DomainFailure("Cache key not found")


DEFAULT_SQL_PAYLOAD: Mapping[str, Any] = {
    "type": "ERROR",
    "data": {"columns": [], "rows": []},
    "execTimeMs": 0,
}


class SqlEngine:
    """Forwards statements to the remote service and maps its answer to a Result."""

    mode = EngineMode.SQL

    def __init__(self, client: QueryServiceClient, *, logger: Logger | None = None) -> None:
        self._client = client
        self._logger = logger or get_logger()

    async def execute(self, query: str) -> Result:
        try:
            payload = await self._client.execute_query(query)
        except TransportFailure as exc:
            self._logger.warning(f"SQL service unavailable, showing an empty result: {exc}")
            payload = None
        if payload is None:
            payload = DEFAULT_SQL_PAYLOAD
        return result_from_payload(payload)


def result_from_payload(payload: Mapping[str, Any]) -> Result:
    """Build a Result from the service's `{type, data, execTimeMs}` payload.

    Anything that is not a scalar is treated as a table; missing or malformed
    pieces collapse to empty columns/rows so the caller always gets a complete
    result.
    """
    body = payload.get("data")
    if not isinstance(body, Mapping):
        body = {}
    exec_time = _as_number(payload.get("execTimeMs"))

    if str(payload.get("type") or "").upper() == "SCALAR":
        return ScalarResult(value=_as_number(body.get("value")), message=str(body.get("message") or ""))

    columns = body.get("columns") or []
    rows = body.get("rows") or []
    if not isinstance(columns, list) or not isinstance(rows, list):
        columns, rows = [], []
    return TableResult(
        columns=tuple(str(column) for column in columns),
        rows=tuple(tuple(row) if isinstance(row, (list, tuple)) else (row,) for row in rows),
        exec_time_ms=exec_time,
    )


def _as_number(raw: Any) -> float:
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        return raw
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0


Engine = DocumentEngine | CacheEngine | SqlEngine


class EngineRegistry:
    """Exactly one engine per EngineMode."""

    def __init__(self, engines: Mapping[EngineMode, Engine]) -> None:
        missing = [mode.value for mode in EngineMode if mode not in engines]
        if missing:
            raise ValueError(f"EngineRegistry is missing engines for: {', '.join(missing)}")
        self._engines = dict(engines)

    @classmethod
    def default(cls, client: QueryServiceClient, *, logger: Logger | None = None) -> EngineRegistry:
        return cls(
            {
                EngineMode.SQL: SqlEngine(client, logger=logger),
                EngineMode.DOCUMENT: DocumentEngine(),
                EngineMode.CACHE: CacheEngine(),
            }
        )

    def get(self, mode: EngineMode | str) -> Engine:
        return self._engines[EngineMode.parse(mode)]

    def is_remote(self, mode: EngineMode | str) -> bool:
        return EngineMode.parse(mode) is EngineMode.SQL
