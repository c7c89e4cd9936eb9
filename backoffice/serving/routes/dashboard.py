"""
Dashboard Endpoints
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from backoffice.analytics.dashboard import DashboardViewModel
from backoffice.container import BackOffice
from backoffice.models import DashboardFilter
from backoffice.serving.dependencies import get_backoffice

router = APIRouter()


@router.get("", response_model=DashboardViewModel)
async def get_dashboard(
    start_time: datetime = Query(...),
    end_time: datetime = Query(...),
    currency: Optional[str] = None,
    game_alias: Optional[str] = None,
    external_player_id: Optional[str] = None,
    backoffice: BackOffice = Depends(get_backoffice),
) -> DashboardViewModel:
    """
    Chart-ready dashboard for the given window.

    Returns ``enabled: false`` with an empty view while the session is not
    authenticated.
    """
    filters = DashboardFilter(
        start_time=start_time,
        end_time=end_time,
        currency=currency or backoffice.settings.analytics.default_currency,
        game_alias=game_alias,
        external_player_id=external_player_id,
    )
    return await backoffice.load_dashboard(filters)
