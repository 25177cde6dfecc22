from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from dbplay_cli.dbplay_query import seeds
from dbplay_cli.dbplay_query.playground import Playground
from dbplay_cli.dbplay_query.render import ResultFormatter
from dbplay_cli.dbplay_query.session import QUERY_PLACEHOLDER, RenderSurface, SessionState
from dbplay_cli.dbplay_query.types import (
    EngineMode,
    HealthStatus,
    SampleQuery,
    SuccessResult,
)
from dbplay_cli.shared import paths
from dbplay_cli.shared.config import load_config
from dbplay_cli.shared.exceptions import DomainFailure

SQL_SAMPLES = (
    SampleQuery(title="All students", query="SELECT * FROM students;"),
    SampleQuery(title="Count", query="SELECT COUNT(*) AS n FROM students;"),
)


def _service_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/":
        return httpx.Response(
            200,
            json={
                "data": {
                    "connected": True,
                    "sampleQueries": [{"title": s.title, "query": s.query} for s in SQL_SAMPLES],
                    "tableNames": ["students"],
                }
            },
        )
    sql = json.loads(request.content)["sql"]
    return httpx.Response(
        200,
        json={
            "data": {
                "type": "TABLE",
                "data": {"columns": ["sql"], "rows": [[sql]]},
                "execTimeMs": 2,
            }
        },
    )


@pytest.fixture()
def playground(tmp_path: Path) -> Playground:
    config = load_config(env={paths.CONFIG_DIR_ENV: str(tmp_path)}).without_latency()
    return Playground.from_config(config, transport=httpx.MockTransport(_service_handler))


# ----- session state ------------------------------------------------------------------------


def test_session_defaults_to_sql_and_disconnected() -> None:
    session = SessionState()

    assert session.mode is EngineMode.SQL
    assert session.health.connected is False
    assert session.title == "SQL Query Builder"
    assert session.sample_queries() == ()
    assert session.default_query() == QUERY_PLACEHOLDER


def test_session_titles_and_samples_follow_mode() -> None:
    session = SessionState()

    session.switch("nosql")
    assert session.title == "NoSQL Document Store"
    assert session.sample_queries() == seeds.DOCUMENT_SAMPLES
    assert session.default_query() == "user:1"

    session.switch(EngineMode.CACHE)
    assert session.title == "Cache Operations"
    assert session.sample_queries() == seeds.CACHE_SAMPLES
    assert session.default_query() == "session:user1"


def test_session_sql_samples_come_from_health() -> None:
    session = SessionState()
    session.apply_health(HealthStatus(connected=True, sample_queries=SQL_SAMPLES))

    assert session.sample_queries() == SQL_SAMPLES
    assert session.default_query() == "SELECT * FROM students;"

    session.switch("cache")
    session.switch("sql")
    assert session.sample_queries() == SQL_SAMPLES


def test_session_switch_rejects_unknown_mode() -> None:
    session = SessionState(mode=EngineMode.CACHE)

    with pytest.raises(DomainFailure, match="Unknown database type"):
        session.switch("graph")
    assert session.mode is EngineMode.CACHE


# ----- render surface -----------------------------------------------------------------------


def _model(sequence: int, message: str):
    return ResultFormatter().render(SuccessResult(message=message), 1.0, sequence=sequence)


def test_surface_applies_newer_models() -> None:
    surface = RenderSurface()

    assert surface.apply(_model(1, "first"))
    assert surface.apply(_model(2, "second"))
    assert "second" in surface.results
    assert surface.badge == "⚡ 1.00ms"
    assert "Operation Status" in surface.stats
    assert surface.last_sequence == 2


def test_surface_drops_stale_models() -> None:
    surface = RenderSurface()
    surface.apply(_model(3, "newest"))

    assert surface.apply(_model(2, "stale")) is False
    assert "newest" in surface.results


def test_surface_loading_only_touches_results() -> None:
    surface = RenderSurface()
    surface.apply(_model(1, "done"))

    surface.show_loading(ResultFormatter().loading())

    assert "Executing query..." in surface.results
    assert surface.badge == "⚡ 1.00ms"


# ----- playground ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_connect_loads_sql_samples(playground: Playground) -> None:
    status = await playground.connect()

    assert status.connected is True
    assert status.table_names == ("students",)
    assert playground.session.sample_queries() == SQL_SAMPLES
    assert 'data-query="SELECT * FROM students;"' in playground.sample_queries_html()


@pytest.mark.asyncio
async def test_execute_sql_trims_and_publishes(playground: Playground) -> None:
    model = await playground.execute("  SELECT 1;  ")

    assert "<td>SELECT 1;</td>" in model.content
    assert playground.surface.results == model.content
    assert playground.surface.badge == model.badge
    assert playground.surface.stats == model.stats_html


@pytest.mark.asyncio
async def test_execute_follows_mode_switch(playground: Playground) -> None:
    playground.switch("cache")
    hit = await playground.execute("popular:games")
    miss = await playground.execute("user:1")

    assert hit.succeeded is True
    assert "&#34;Minecraft&#34;" in hit.content
    assert miss.succeeded is False
    assert "Cache key not found" in playground.surface.results
    assert playground.surface.last_sequence == 2


def test_from_config_uses_default_mode(tmp_path: Path) -> None:
    config = load_config(env={paths.CONFIG_DIR_ENV: str(tmp_path), "DBPLAY_DEFAULT_MODE": "nosql"})

    playground = Playground.from_config(config)

    assert playground.session.mode is EngineMode.DOCUMENT
    assert "Get user profile" in playground.sample_queries_html()
