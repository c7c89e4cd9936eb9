"""
Unit Tests - Summary Reports
"""
from datetime import datetime

import httpx
import pytest

from backoffice.analytics.queries import DashboardQueries
from backoffice.analytics.summary import SummaryAssembler
from backoffice.api.client import ApiClient
from backoffice.api.dashboard import DashboardApi
from backoffice.api.summary import SummaryApi
from backoffice.api.errors import AuthenticationRequired
from backoffice.auth.gate import AuthReadinessGate
from backoffice.cache.reference import ReferenceDataCache
from backoffice.models import SummaryFilter, SummaryKind, SummaryPage
from backoffice.presentation.badges import MarginTone
from backoffice.utils.retry import RetryPolicy

GAME_ROWS = [
    {"gameAlias": "crash-x", "totalRounds": 10, "wonRounds": 4, "totalBet": 100.0,
     "totalWin": 90.0, "ggr": 10.0, "rtp": "90.00", "platform": "p1", "operator": "o1"},
    {"gameAlias": "mystery", "totalRounds": 10, "wonRounds": 1, "totalBet": 100.0,
     "totalWin": 160.0, "ggr": -60.0, "rtp": "160.00", "platform": "p1", "operator": "o1"},
]


@pytest.fixture
def summary_filter() -> SummaryFilter:
    return SummaryFilter(
        start_time=datetime(2024, 1, 1),
        end_time=datetime(2024, 1, 8),
        platform_id="p1",
        operator_id="ALL",
        game_alias="ALL",
        page_size=25,
    )


def summary_transport(seen):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": GAME_ROWS, "limit": 25, "page": 1, "total": 2})
    return httpx.MockTransport(handler)


class TestSummaryApi:
    """Tests for summary report parameters and parsing"""

    @pytest.mark.asyncio
    async def test_game_summary_params(self, summary_filter):
        seen = []
        client = ApiClient("http://api.test/cms", transport=summary_transport(seen))

        page = await SummaryApi(client).report(SummaryKind.GAME, summary_filter)

        assert page.total == 2
        assert page.data[0].game_alias == "crash-x"
        assert seen[0].url.path == "/cms/reports/gameSummary"
        params = dict(seen[0].url.params)
        assert params["platform"] == "p1"
        assert "operator" not in params
        assert "gameAlias" not in params
        assert params["pageSize"] == "25"
        assert params["sortDirection"] == "-1"
        assert params["playerCurrencyCode"] == "INR"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_bare_array(self, summary_filter):
        client = ApiClient("http://api.test/cms", transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json=GAME_ROWS)
        ))

        page = await SummaryApi(client).report(SummaryKind.DAILY, summary_filter)

        assert page.total == 2
        await client.aclose()


class TestSummaryAssembler:
    """Tests for summary rows and page totals"""

    @pytest.mark.asyncio
    async def test_game_rows_and_totals(self, fetcher, clock):
        cache = ReferenceDataCache(fetcher, clock=clock)
        await cache.refresh_all()
        page = SummaryPage.model_validate({"data": GAME_ROWS, "total": 2})

        view = SummaryAssembler(cache).assemble(SummaryKind.GAME, page)

        assert [r.label for r in view.rows] == ["Crash X", "mystery"]
        assert view.rows[0].rtp == pytest.approx(90.0)
        assert view.rows[0].win_rate == pytest.approx(40.0)
        assert view.rows[1].tone is MarginTone.UNFAVOURABLE
        assert view.stats.total_rounds == 20
        assert view.stats.ggr == -50.0
        assert view.stats.avg_rtp == pytest.approx(125.0)
        assert view.stats.win_rate == pytest.approx(25.0)

    def test_player_labels(self):
        page = SummaryPage.model_validate({"data": [
            {"externalPlayerId": None, "gameAlias": "crash-x", "totalBet": 5.0},
            {"externalPlayerId": "u1", "gameAlias": "crash-x", "totalBet": 5.0},
        ]})

        players = SummaryAssembler(None).assemble(SummaryKind.PLAYER, page)
        player_games = SummaryAssembler(None).assemble(SummaryKind.PLAYER_GAME, page)

        assert [r.label for r in players.rows] == ["Anonymous", "u1"]
        assert player_games.rows[1].label == "u1 / crash-x"

    def test_empty_page_has_no_totals(self):
        view = SummaryAssembler(None).assemble(SummaryKind.DAILY, SummaryPage())

        assert view.enabled
        assert view.rows == []
        assert view.stats is None

    def test_disabled(self):
        view = SummaryAssembler(None).assemble(SummaryKind.GAME, None)

        assert not view.enabled
        assert view.kind is SummaryKind.GAME


class TestSummaryQueries:
    """Tests for gating of summary reports"""

    @pytest.mark.asyncio
    async def test_disabled_until_ready(self, summary_filter):
        seen = []
        client = ApiClient("http://api.test/cms", transport=summary_transport(seen))
        queries = DashboardQueries(DashboardApi(client), AuthReadinessGate())

        assert await queries.summary(SummaryKind.GAME, summary_filter) is None
        with pytest.raises(AuthenticationRequired):
            await queries.summary(SummaryKind.GAME, summary_filter, required=True)
        assert seen == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_loads_when_ready(self, summary_filter):
        seen = []
        client = ApiClient("http://api.test/cms", transport=summary_transport(seen))
        gate = AuthReadinessGate(settle_seconds=0.01)
        gate.observe("token")
        await gate.wait_ready(timeout=1)
        queries = DashboardQueries(DashboardApi(client), gate, RetryPolicy(base_delay=0, max_delay=0))

        page = await queries.summary(SummaryKind.PLAYER, summary_filter)

        assert len(page.data) == 2
        assert seen[0].url.path == "/cms/reports/playerSummary"
        await client.aclose()
