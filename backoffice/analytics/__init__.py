"""
Dashboard analytics: aggregation engine, gated queries, view-model assembly
"""
from .aggregation import (
    bucket_hourly,
    ggr,
    group_by_entity,
    margin,
    summary_stats,
    top_n,
    unique_players_by_key,
)
from .dashboard import DashboardAssembler, DashboardViewModel
from .queries import DashboardData, DashboardQueries
from .summary import SummaryAssembler, SummaryReportView

__all__ = [
    "DashboardAssembler",
    "DashboardData",
    "DashboardQueries",
    "DashboardViewModel",
    "SummaryAssembler",
    "SummaryReportView",
    "bucket_hourly",
    "ggr",
    "group_by_entity",
    "margin",
    "summary_stats",
    "top_n",
    "unique_players_by_key",
]
