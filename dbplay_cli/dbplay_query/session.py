"""Session state and the host-facing render surface."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import seeds
from .types import EngineMode, HealthStatus, RenderModel, SampleQuery

QUERY_PLACEHOLDER = "Enter your query..."


@dataclass(slots=True)
class SessionState:
    """Which engine is selected and what the last health check reported."""

    mode: EngineMode = EngineMode.SQL
    health: HealthStatus = field(default_factory=HealthStatus.disconnected)

    def switch(self, mode: EngineMode | str) -> EngineMode:
        self.mode = EngineMode.parse(mode)
        return self.mode

    def apply_health(self, status: HealthStatus) -> None:
        self.health = status

    @property
    def title(self) -> str:
        return seeds.MODE_TITLES[self.mode]

    def sample_queries(self) -> tuple[SampleQuery, ...]:
        """Samples for the active mode, recomputed on every call."""
        if self.mode is EngineMode.SQL:
            return self.health.sample_queries
        if self.mode is EngineMode.DOCUMENT:
            return seeds.DOCUMENT_SAMPLES
        return seeds.CACHE_SAMPLES

    def default_query(self) -> str:
        samples = self.sample_queries()
        return samples[0].query if samples else QUERY_PLACEHOLDER


@dataclass(slots=True)
class RenderSurface:
    """The three regions a host displays: results, badge, and statistics.

    Models are applied in completion order, but a model from an older dispatch
    is dropped once a newer one has been shown.
    """

    results: str = ""
    badge: str = ""
    stats: str = ""
    last_sequence: int = 0

    def show_loading(self, content: str) -> None:
        self.results = content

    def apply(self, model: RenderModel) -> bool:
        if model.sequence and model.sequence < self.last_sequence:
            return False
        self.results = model.content
        self.badge = model.badge
        self.stats = model.stats_html
        self.last_sequence = max(self.last_sequence, model.sequence)
        return True
