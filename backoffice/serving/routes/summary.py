"""
Summary Report Endpoints
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from backoffice.analytics.summary import SummaryReportView
from backoffice.container import BackOffice
from backoffice.models import SummaryFilter, SummaryKind
from backoffice.serving.dependencies import get_backoffice

router = APIRouter()


@router.get("/{kind}", response_model=SummaryReportView)
async def get_summary(
    kind: SummaryKind,
    start_time: datetime = Query(...),
    end_time: datetime = Query(...),
    platform: Optional[str] = None,
    operator: Optional[str] = None,
    brand: Optional[str] = None,
    game_alias: Optional[str] = None,
    external_player_id: Optional[str] = None,
    currency: Optional[str] = None,
    page_no: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    sort_direction: int = Query(default=-1),
    backoffice: BackOffice = Depends(get_backoffice),
) -> SummaryReportView:
    """
    One page of a daily, game, player or player-game summary with page totals.

    Returns ``enabled: false`` while the session is not authenticated.
    """
    filters = SummaryFilter(
        start_time=start_time,
        end_time=end_time,
        currency=currency or backoffice.settings.analytics.default_currency,
        game_alias=game_alias,
        external_player_id=external_player_id,
        platform_id=platform,
        operator_id=operator,
        brand_id=brand,
        page_no=page_no,
        page_size=page_size,
        sort_direction=sort_direction,
    )
    return await backoffice.load_summary(kind, filters)
