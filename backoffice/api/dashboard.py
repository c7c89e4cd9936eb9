"""
Dashboard Analytics Source

Report endpoints feeding the dashboard: the chart summary (totals, hourly
series, per-game/per-player/per-brand turnover, unique players) and the
winners/contributors rankings.
"""

from typing import List

import structlog

from backoffice.api.client import ApiClient
from backoffice.models import DashboardChartData, DashboardFilter, PlayerRanking, WinnersContributorsData

logger = structlog.get_logger(__name__)

CHART_SUMMARY_PATH = "/reports/dashboardChartSummary"
WINNERS_CONTRIBUTORS_PATH = "/reports/winnersAndContributors"


class DashboardApi:
    """Typed access to the dashboard report endpoints"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def chart_data(self, filters: DashboardFilter) -> DashboardChartData:
        payload = await self.client.get(CHART_SUMMARY_PATH, params=filters.to_params())
        # the summary is wrapped in {"data": {...}}
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        return DashboardChartData.model_validate(payload or {})

    async def _rankings(self, filters: DashboardFilter, kind: str) -> List[PlayerRanking]:
        params = filters.to_params()
        params["type"] = kind
        payload = await self.client.get(WINNERS_CONTRIBUTORS_PATH, params=params)
        if isinstance(payload, list):
            payload = {"data": payload}
        result = WinnersContributorsData.model_validate(payload or {})
        logger.debug("Fetched player rankings", type=kind, rows=len(result.data))
        return result.data

    async def winners(self, filters: DashboardFilter) -> List[PlayerRanking]:
        return await self._rankings(filters, "winners")

    async def contributors(self, filters: DashboardFilter) -> List[PlayerRanking]:
        return await self._rankings(filters, "contributors")
