"""Data structures shared across the playground query modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Union

from dbplay_cli.shared.exceptions import DomainFailure


class EngineMode(str, Enum):
    """The simulated backend a query is routed to."""

    SQL = "sql"
    DOCUMENT = "nosql"
    CACHE = "cache"

    @classmethod
    def parse(cls, value: EngineMode | str) -> EngineMode:
        """Resolve a mode tag coming from the host, rejecting unknown ones."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise DomainFailure("Unknown database type")


@dataclass(frozen=True, slots=True)
class SampleQuery:
    """A canned query shown next to the editor."""

    title: str
    query: str


# ----- Results ------------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TableResult:
    """Rows and columns returned by the SQL service."""

    kind: ClassVar[str] = "table"

    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]
    exec_time_ms: float = 0


@dataclass(frozen=True, slots=True)
class DocumentResult:
    kind: ClassVar[str] = "document"

    data: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class CacheHitResult:
    kind: ClassVar[str] = "cache"

    data: Any


@dataclass(frozen=True, slots=True)
class ScalarResult:
    kind: ClassVar[str] = "scalar"

    value: float
    message: str


@dataclass(frozen=True, slots=True)
class SuccessResult:
    kind: ClassVar[str] = "success"

    message: str


@dataclass(frozen=True, slots=True)
class KeyListResult:
    kind: ClassVar[str] = "list"

    keys: tuple[str, ...]


Result = Union[
    TableResult,
    DocumentResult,
    CacheHitResult,
    ScalarResult,
    SuccessResult,
    KeyListResult,
]


@dataclass(frozen=True, slots=True)
class Failure:
    """A recoverable, user-facing negative outcome."""

    kind: ClassVar[str] = "error"

    message: str


Outcome = Union[Result, Failure]


# ----- Dispatch -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class QueryExecution:
    """Timing context owned by a single dispatch."""

    query: str
    mode: EngineMode | None
    sequence: int
    started_at: float
    finished_at: float

    @property
    def elapsed_ms(self) -> float:
        """Wall-clock duration in milliseconds, never negative."""
        return max(0.0, (self.finished_at - self.started_at) * 1000.0)


@dataclass(frozen=True, slots=True)
class DispatchOutcome:
    """Outcome of one dispatch together with its timing context."""

    outcome: Outcome
    execution: QueryExecution

    @property
    def succeeded(self) -> bool:
        return not isinstance(self.outcome, Failure)


@dataclass(frozen=True, slots=True)
class HealthStatus:
    """Snapshot of the remote SQL service as reported by its health endpoint."""

    connected: bool
    sample_queries: tuple[SampleQuery, ...] = ()
    table_names: tuple[str, ...] = ()
    message: str | None = None

    @classmethod
    def disconnected(cls, message: str | None = None) -> HealthStatus:
        return cls(connected=False, message=message)


# ----- Rendering ----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StatsPanel:
    """Heading plus label/value rows for the statistics region."""

    heading: str
    entries: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def as_dict(self) -> dict[str, str]:
        return dict(self.entries)


@dataclass(frozen=True, slots=True)
class RenderModel:
    """Display-ready content for the results, badge, and statistics regions."""

    content: str
    badge: str
    stats: StatsPanel
    stats_html: str
    succeeded: bool
    sequence: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "succeeded": self.succeeded,
            "badge": self.badge,
            "content": self.content,
            "stats": {
                "heading": self.stats.heading,
                "entries": [list(entry) for entry in self.stats.entries],
            },
        }
