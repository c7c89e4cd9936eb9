"""
Dashboard Queries

Gated, retried access to the analytics source. While the auth gate is not
ready every query is disabled and returns None instead of failing.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, TypeVar

import structlog

from backoffice.api.dashboard import DashboardApi
from backoffice.api.summary import SummaryApi
from backoffice.auth.gate import AuthReadinessGate
from backoffice.models import (
    DashboardChartData,
    DashboardFilter,
    PlayerRanking,
    SummaryFilter,
    SummaryKind,
    SummaryPage,
)
from backoffice.utils.retry import RetryPolicy, call_with_retry

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class DashboardData:
    chart: DashboardChartData
    winners: List[PlayerRanking]
    contributors: List[PlayerRanking]


class DashboardQueries:
    def __init__(
        self,
        api: DashboardApi,
        gate: AuthReadinessGate,
        retry_policy: Optional[RetryPolicy] = None,
        summary_api: Optional[SummaryApi] = None,
    ):
        self.api = api
        self.gate = gate
        self.retry_policy = retry_policy or RetryPolicy()
        self.summary_api = summary_api or SummaryApi(api.client)

    @property
    def enabled(self) -> bool:
        return self.gate.is_ready

    async def _run(
        self,
        func: Callable[[DashboardFilter], Awaitable[T]],
        filters: DashboardFilter,
        required: bool,
    ) -> Optional[T]:
        if not self.gate.is_ready:
            if required:
                self.gate.require_ready()
            logger.debug("Analytics query disabled until authenticated", query=func.__name__)
            return None
        return await call_with_retry(func, filters, policy=self.retry_policy)

    async def chart_data(self, filters: DashboardFilter, required: bool = False) -> Optional[DashboardChartData]:
        return await self._run(self.api.chart_data, filters, required)

    async def winners(self, filters: DashboardFilter, required: bool = False) -> Optional[List[PlayerRanking]]:
        return await self._run(self.api.winners, filters, required)

    async def contributors(self, filters: DashboardFilter, required: bool = False) -> Optional[List[PlayerRanking]]:
        return await self._run(self.api.contributors, filters, required)

    async def summary(
        self,
        kind: SummaryKind,
        filters: SummaryFilter,
        required: bool = False,
    ) -> Optional[SummaryPage]:
        async def summary_report(f: SummaryFilter) -> SummaryPage:
            return await self.summary_api.report(kind, f)

        return await self._run(summary_report, filters, required)

    async def load(self, filters: DashboardFilter) -> Optional[DashboardData]:
        """All dashboard reports concurrently, or None while disabled."""
        if not self.enabled:
            logger.debug("Dashboard load disabled until authenticated")
            return None

        chart, winners, contributors = await asyncio.gather(
            self.chart_data(filters),
            self.winners(filters),
            self.contributors(filters),
        )
        return DashboardData(
            chart=chart or DashboardChartData(),
            winners=winners or [],
            contributors=contributors or [],
        )
