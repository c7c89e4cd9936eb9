"""
Summary Report Endpoints

Paged per-day, per-game, per-player and per-player-game totals.
"""

import structlog

from backoffice.api.client import ApiClient
from backoffice.models import SummaryFilter, SummaryKind, SummaryPage

logger = structlog.get_logger(__name__)

SUMMARY_PATHS = {
    SummaryKind.DAILY: "/reports/dailySummary",
    SummaryKind.GAME: "/reports/gameSummary",
    SummaryKind.PLAYER: "/reports/playerSummary",
    SummaryKind.PLAYER_GAME: "/reports/playerGameSummary",
}


class SummaryApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def report(self, kind: SummaryKind, filters: SummaryFilter) -> SummaryPage:
        payload = await self.client.get(SUMMARY_PATHS[kind], params=filters.to_params())
        if isinstance(payload, list):
            payload = {"data": payload, "total": len(payload)}
        page = SummaryPage.model_validate(payload or {})
        logger.debug("Fetched summary report", kind=kind.value, rows=len(page.data), total=page.total)
        return page
