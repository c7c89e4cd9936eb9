"""
Back-Office State Container

Builds and owns every process-wide component: the API client, the reference
cache, the auth gate and session, and the dashboard query/assembly pipeline.
Components receive their collaborators explicitly; nothing here is a
module-level singleton.
"""

import asyncio
from typing import Optional

import httpx
import structlog

from backoffice.analytics.dashboard import DashboardAssembler, DashboardViewModel
from backoffice.analytics.queries import DashboardQueries
from backoffice.analytics.summary import SummaryAssembler, SummaryReportView
from backoffice.api.auth import AuthApi
from backoffice.api.client import ApiClient
from backoffice.api.dashboard import DashboardApi
from backoffice.api.management import ApiManagementApi
from backoffice.api.reference import ReferenceDataFetcher
from backoffice.api.summary import SummaryApi
from backoffice.auth.gate import AuthReadinessGate
from backoffice.auth.session import AuthSession
from backoffice.cache.reference import ReferenceDataCache
from backoffice.cascade import CascadingResolver
from backoffice.config.settings import Settings
from backoffice.models import DashboardFilter, Resource, SummaryFilter, SummaryKind
from backoffice.utils.retry import RetryPolicy

logger = structlog.get_logger(__name__)


class BackOffice:
    """
    Example:
        backoffice = BackOffice(get_settings(), store=PersistedStateStore(redis))
        await backoffice.startup()
        view = await backoffice.load_dashboard(filters)
        await backoffice.shutdown()

    ``management`` is the API-permission client; only its list, detail and
    status-toggle calls are served over HTTP.
    """

    def __init__(
        self,
        settings: Settings,
        store=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        fetcher=None,
    ):
        self.settings = settings
        self.store = store
        self.retry_policy = RetryPolicy.from_settings(settings)

        self.client = ApiClient.from_settings(settings, transport=transport)
        self.fetcher = fetcher or ReferenceDataFetcher.from_settings(self.client, settings)
        self.gate = AuthReadinessGate(settings.auth.settle_seconds)
        self.cache = ReferenceDataCache.from_settings(self.fetcher, self.gate, settings)
        self.resolver = CascadingResolver(self.cache)
        self.session = AuthSession(AuthApi(self.client), self.gate, store)
        self.management = ApiManagementApi(self.client)
        self.queries = DashboardQueries(
            DashboardApi(self.client),
            self.gate,
            self.retry_policy,
            summary_api=SummaryApi(self.client),
        )
        self.assembler = DashboardAssembler.from_settings(self.cache, settings)
        self.summary_assembler = SummaryAssembler.from_settings(self.cache, settings)

        self.gate.add_logout_listener(self.cache.clear)

    async def startup(self) -> bool:
        """Restore the persisted session; returns whether one was found."""
        restored = await self.session.restore()
        logger.info("Back-office started", session_restored=restored)
        return restored

    async def shutdown(self) -> None:
        self.gate.close()
        await self.client.aclose()
        logger.info("Back-office stopped")

    async def warm_cache(self) -> None:
        """Wait for readiness, then load whatever reference data needs it."""
        if not await self.gate.wait_ready(timeout=max(self.settings.auth.settle_seconds * 10, 1.0)):
            logger.info("Skipping cache warm-up, not authenticated")
            return
        stale = [r for r in Resource if self.cache.should_fetch(r)]
        await asyncio.gather(*(self.cache.fetch(r) for r in stale))

    async def load_dashboard(self, filters: DashboardFilter) -> DashboardViewModel:
        data = await self.queries.load(filters)
        return self.assembler.assemble(data, filters.game_alias)

    async def load_summary(self, kind: SummaryKind, filters: SummaryFilter) -> SummaryReportView:
        page = await self.queries.summary(kind, filters)
        return self.summary_assembler.assemble(kind, page)
