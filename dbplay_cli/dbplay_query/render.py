"""Turn query outcomes into display-ready render models."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .highlight import dump_json, highlight_json
from .types import (
    CacheHitResult,
    DocumentResult,
    Failure,
    KeyListResult,
    Outcome,
    RenderModel,
    SampleQuery,
    ScalarResult,
    StatsPanel,
    SuccessResult,
    TableResult,
)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

SUCCESS_GLYPH = "⚡"
FAILURE_GLYPH = "❌"
RETRY_TIP = "Try one of the sample queries to get started!"


def format_elapsed(elapsed_ms: float) -> str:
    """Two-decimal millisecond figure; negative clock skew reads as zero."""
    return f"{max(0.0, float(elapsed_ms)):.2f}"


def performance_badge(elapsed_ms: float, *, succeeded: bool) -> str:
    glyph = SUCCESS_GLYPH if succeeded else FAILURE_GLYPH
    return f"{glyph} {format_elapsed(elapsed_ms)}ms"


def status_class(connected: bool) -> str:
    """CSS class for the service status indicator."""
    return "status-connected" if connected else "status-disconnected"


class ResultFormatter:
    """Renders Results and Failures through the Jinja templates."""

    def __init__(self, template_dir: Path | None = None) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=select_autoescape(enabled_extensions=("j2", "html"), default_for_string=True),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, outcome: Outcome, elapsed_ms: float, *, sequence: int = 0) -> RenderModel:
        if isinstance(outcome, Failure):
            content, stats = self._render_failure(outcome)
        elif isinstance(outcome, TableResult):
            content, stats = self._render_table(outcome)
        elif isinstance(outcome, DocumentResult):
            content, stats = self._render_document(outcome)
        elif isinstance(outcome, CacheHitResult):
            content, stats = self._render_cache_hit(outcome)
        elif isinstance(outcome, ScalarResult):
            content, stats = self._render_scalar(outcome)
        elif isinstance(outcome, SuccessResult):
            content, stats = self._render_success(outcome)
        elif isinstance(outcome, KeyListResult):
            content, stats = self._render_key_list(outcome)
        else:  # pragma: no cover - the Outcome union is closed
            raise TypeError(f"Cannot render outcome of type {type(outcome).__name__}")

        succeeded = not isinstance(outcome, Failure)
        return RenderModel(
            content=content,
            badge=performance_badge(elapsed_ms, succeeded=succeeded),
            stats=stats,
            stats_html=self._template("stats.html.j2", heading=stats.heading, entries=stats.entries),
            succeeded=succeeded,
            sequence=sequence,
        )

    def loading(self) -> str:
        """Placeholder shown in the results region while a query is in flight."""
        return self._template("loading.html.j2")

    def render_sample_queries(self, samples: Iterable[SampleQuery]) -> str:
        return self._template("sample_queries.html.j2", samples=list(samples))

    def render_json(self, value: Any) -> str:
        return self._template("json_view.html.j2", highlighted=highlight_json(dump_json(value)))

    # ----- per-variant helpers --------------------------------------------------------------

    def _render_table(self, result: TableResult) -> tuple[str, StatsPanel]:
        content = self._template(
            "table.html.j2",
            columns=result.columns,
            rows=[_align_row(row, len(result.columns)) for row in result.rows],
        )
        stats = StatsPanel(
            heading="📈 Data Statistics",
            entries=(
                ("Records returned", str(len(result.rows))),
                ("Server time", f"{_format_number(result.exec_time_ms)}ms"),
            ),
        )
        return content, stats

    def _render_document(self, result: DocumentResult) -> tuple[str, StatsPanel]:
        stats = StatsPanel(
            heading="📄 Document Info",
            entries=(
                ("Document type", "User Profile"),
                ("Fields", str(len(result.data))),
            ),
        )
        return self.render_json(result.data), stats

    def _render_cache_hit(self, result: CacheHitResult) -> tuple[str, StatsPanel]:
        stats = StatsPanel(
            heading="⚡ Cache Performance",
            entries=(
                ("Cache hit", "✅ Found in cache"),
                ("Data type", json_type_name(result.data)),
            ),
        )
        return self.render_json(result.data), stats

    def _render_scalar(self, result: ScalarResult) -> tuple[str, StatsPanel]:
        value = _format_number(result.value)
        stats = StatsPanel(
            heading="📊 Query Result",
            entries=(("Result", result.message), ("Value", value)),
        )
        return self._template("scalar.html.j2", value=value), stats

    def _render_success(self, result: SuccessResult) -> tuple[str, StatsPanel]:
        stats = StatsPanel(heading="✅ Operation Status", entries=(("Status", "Success"),))
        return self._template("status_line.html.j2", ok=True, message=result.message), stats

    def _render_key_list(self, result: KeyListResult) -> tuple[str, StatsPanel]:
        stats = StatsPanel(heading="🔑 Keys Found", entries=(("Total keys", str(len(result.keys))),))
        return self._template("key_list.html.j2", keys=result.keys), stats

    def _render_failure(self, failure: Failure) -> tuple[str, StatsPanel]:
        stats = StatsPanel(
            heading="❌ Query Error",
            entries=(("Status", "Failed"), ("Tip", RETRY_TIP)),
        )
        return self._template("status_line.html.j2", ok=False, message=failure.message), stats

    def _template(self, name: str, **context: Any) -> str:
        return self._env.get_template(name).render(**context).strip()


def json_type_name(value: Any) -> str:
    """Name of the JSON type a deserialised value came from."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, Sequence):
        return "array"
    return type(value).__name__


def _align_row(row: Sequence[Any], width: int) -> list[str]:
    # Cells are read by column position; short rows pad with blanks.
    return [_stringify(row[index]) if index < len(row) else "" for index in range(width)]


def _stringify(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
