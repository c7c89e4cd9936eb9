"""
Unit Tests - Remote API Clients
"""
from datetime import datetime

import httpx
import pytest

from backoffice.api.client import ApiClient
from backoffice.api.dashboard import DashboardApi
from backoffice.api.errors import ApiException
from backoffice.api.management import ApiManagementApi
from backoffice.api.reference import ReferenceDataFetcher
from backoffice.models import DashboardFilter, Resource
from backoffice.utils.retry import RetryPolicy, call_with_retry, retry_async

BASE_URL = "http://api.test/cms"


def make_client(handler) -> ApiClient:
    return ApiClient(BASE_URL, transport=httpx.MockTransport(handler))


class TestApiClient:
    """Tests for request/response handling"""

    @pytest.mark.asyncio
    async def test_bearer_token_and_none_params(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        client = make_client(handler)
        client.set_tokens("abc", "refresh")

        result = await client.get("/thing", params={"a": 1, "b": None})

        assert result == {"ok": True}
        assert seen[0].headers["Authorization"] == "Bearer abc"
        assert dict(seen[0].url.params) == {"a": "1"}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_skip_auth(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        client = make_client(handler)
        client.set_tokens("abc")

        await client.post("/user/login", {"email": "x"}, skip_auth=True)

        assert "Authorization" not in seen[0].headers
        await client.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,message", [
        (401, "Authentication required"),
        (403, "Access denied"),
        (404, "Resource not found"),
        (500, "Internal server error"),
        (503, "Service temporarily unavailable"),
    ])
    async def test_default_error_messages(self, status, message):
        client = make_client(lambda request: httpx.Response(status))

        with pytest.raises(ApiException) as exc_info:
            await client.get("/x")

        assert exc_info.value.status == status
        assert exc_info.value.message == message
        await client.aclose()

    @pytest.mark.asyncio
    async def test_body_message_wins(self):
        client = make_client(lambda request: httpx.Response(400, json={"message": "Bad filter", "code": "E1"}))

        with pytest.raises(ApiException) as exc_info:
            await client.get("/x")

        assert exc_info.value.message == "Bad filter"
        assert exc_info.value.code == "E1"
        assert not exc_info.value.is_retryable
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_is_status_zero(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)

        with pytest.raises(ApiException) as exc_info:
            await client.get("/x")

        assert exc_info.value.status == 0
        assert exc_info.value.is_retryable
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        await client.aclose()


class TestRetry:
    """Tests for the query-layer retry policy"""

    def test_delay_doubles_and_caps(self):
        policy = RetryPolicy(retries=5, base_delay=1.0, max_delay=30.0)

        assert [policy.delay_for(i) for i in range(6)] == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0]

    @pytest.mark.asyncio
    async def test_two_retries_then_raise(self):
        attempts = []

        async def failing():
            attempts.append(1)
            raise ApiException(500, "down")

        with pytest.raises(ApiException):
            await call_with_retry(failing, policy=RetryPolicy(retries=2, base_delay=0, max_delay=0))

        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_client_errors_not_retried(self):
        attempts = []

        @retry_async(RetryPolicy(retries=2, base_delay=0, max_delay=0))
        async def forbidden():
            attempts.append(1)
            raise ApiException(403, "no")

        with pytest.raises(ApiException):
            await forbidden()

        assert len(attempts) == 1


class TestReferenceDataFetcher:
    """Tests for list endpoint parameters and parsing"""

    @pytest.mark.asyncio
    async def test_list_platforms(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"platforms": [{"_id": "p1", "platformName": "One"}]})

        fetcher = ReferenceDataFetcher(make_client(handler))

        platforms = await fetcher.fetch(Resource.PLATFORMS)

        assert platforms[0].name == "One"
        assert seen[0].url.path == "/cms/platform/get"
        assert dict(seen[0].url.params) == {"pageNo": "1", "pageSize": "100", "sortDirection": "-1"}

    @pytest.mark.asyncio
    async def test_operators_use_default_platform(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"operators": [{"_id": "o1", "operatorName": "Op", "platform": "p9"}]})

        fetcher = ReferenceDataFetcher(make_client(handler), default_platform_id="p9")

        operators = await fetcher.list_operators()

        assert operators[0].platform_id == "p9"
        assert seen[0].url.params["platforms"] == "p9"

    @pytest.mark.asyncio
    async def test_brands_params(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"brands": []})

        fetcher = ReferenceDataFetcher(make_client(handler))

        assert await fetcher.fetch(Resource.BRANDS, {"platform_id": "p1", "operator_id": "o1"}) == []
        assert seen[0].url.params["platforms"] == "p1"
        assert seen[0].url.params["operators"] == "o1"

    @pytest.mark.asyncio
    async def test_games_skip_all_filters(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": [{"_id": "g1", "gameName": "Crash", "gameAlias": "crash"}]})

        fetcher = ReferenceDataFetcher(make_client(handler))

        games = await fetcher.list_games(platform_id="ALL", brand_id="b1", is_active=True)

        assert games[0].option_id == "crash"
        params = dict(seen[0].url.params)
        assert params["pageSize"] == "500"
        assert params["sortDirection"] == "1"
        assert params["brand"] == "b1"
        assert params["isActive"] == "true"
        assert "platform" not in params


class TestDashboardApi:
    """Tests for report endpoints"""

    @pytest.mark.asyncio
    async def test_chart_data_and_rankings(self, chart_payload, winners_payload):
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path.endswith("dashboardChartSummary"):
                return httpx.Response(200, json={"data": chart_payload})
            return httpx.Response(200, json={"data": winners_payload})

        api = DashboardApi(make_client(handler))
        filters = DashboardFilter(
            start_time=datetime(2024, 1, 1),
            end_time=datetime(2024, 1, 2),
            game_alias="ALL",
        )

        chart = await api.chart_data(filters)
        winners = await api.winners(filters)

        assert chart.generic.bet_amount == 1000.0
        assert len(chart.bets_ggr_turn_over) == 2
        assert winners[0].margin_in_amount == -30.0
        assert "gameAlias" not in seen[0].url.params
        assert seen[0].url.params["playerCurrencyCode"] == "INR"
        assert seen[1].url.params["type"] == "winners"


class TestApiManagementApi:
    """Tests for API-permission CRUD paths"""

    @pytest.mark.asyncio
    async def test_list_bare_array(self):
        entry = {"_id": "a1", "name": "List", "endPoint": "/x/get", "role": ["ROOT"]}
        api = ApiManagementApi(make_client(lambda request: httpx.Response(200, json=[entry])))

        page = await api.list(page=1, limit=10)

        assert page.total_items == 1
        assert page.data[0].end_point == "/x/get"

    @pytest.mark.asyncio
    async def test_crud_paths(self):
        seen = []
        entry = {"_id": "a1", "name": "List", "endPoint": "/x/get"}

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json={"data": entry})

        api = ApiManagementApi(make_client(handler))

        await api.get("a1")
        await api.create({"name": "List"})
        await api.update("a1", {"name": "List"})
        await api.toggle_status("a1")
        await api.delete("a1")

        assert seen == [
            ("GET", "/cms/apiManagement/get/a1"),
            ("POST", "/cms/apiManagement/create"),
            ("PUT", "/cms/apiManagement/update"),
            ("PATCH", "/cms/apiManagement/toggle-status/a1"),
            ("DELETE", "/cms/apiManagement/delete/a1"),
        ]
