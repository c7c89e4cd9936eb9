"""
Summary Report View

Labels summary report rows from the reference cache and adds page-level
totals (rounds, bet, win, GGR, average RTP, win rate).
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.analytics.aggregation import SummaryStats, margin, summary_stats
from backoffice.models import Resource, SummaryKind, SummaryPage, SummaryRow
from backoffice.presentation.badges import MarginTone, margin_tone


class SummaryLine(BaseModel):
    key: Optional[str]
    label: str
    total_rounds: int = 0
    won_rounds: int = 0
    total_bet: float = 0.0
    total_win: float = 0.0
    ggr: float = 0.0
    rtp: float = 0.0
    win_rate: float = 0.0
    tone: MarginTone = MarginTone.FAVOURABLE


class SummaryReportView(BaseModel):
    enabled: bool = True
    kind: SummaryKind
    currency: str = "INR"
    page: int = 1
    limit: int = 50
    total: int = 0
    rows: List[SummaryLine] = Field(default_factory=list)
    stats: Optional[SummaryStats] = None


class SummaryAssembler:
    def __init__(self, cache, currency: str = "INR"):
        self.cache = cache
        self.currency = currency

    @classmethod
    def from_settings(cls, cache, settings) -> "SummaryAssembler":
        return cls(cache, currency=settings.analytics.default_currency)

    def _game_label(self, alias: Optional[str]) -> str:
        if alias is None:
            return "Unknown"
        if self.cache is None:
            return alias
        return self.cache.label_map(Resource.GAMES).get(alias, alias)

    def _key_and_label(self, kind: SummaryKind, row: SummaryRow):
        player = row.external_player_id or "Anonymous"
        if kind is SummaryKind.DAILY:
            return row.date, row.date or "No Date"
        if kind is SummaryKind.GAME:
            return row.game_alias, self._game_label(row.game_alias)
        if kind is SummaryKind.PLAYER:
            return row.external_player_id, player
        return (
            f"{row.external_player_id}:{row.game_alias}",
            f"{player} / {self._game_label(row.game_alias)}",
        )

    def line(self, kind: SummaryKind, row: SummaryRow) -> SummaryLine:
        key, label = self._key_and_label(kind, row)
        return SummaryLine(
            key=key,
            label=label,
            total_rounds=row.total_rounds,
            won_rounds=row.won_rounds,
            total_bet=row.total_bet,
            total_win=row.total_win,
            ggr=row.ggr,
            rtp=row.total_win / row.total_bet * 100 if row.total_bet > 0 else 0.0,
            win_rate=row.won_rounds / row.total_rounds * 100 if row.total_rounds > 0 else 0.0,
            tone=margin_tone(margin(row.total_bet, row.total_win)),
        )

    def assemble(self, kind: SummaryKind, page: Optional[SummaryPage]) -> SummaryReportView:
        if page is None:
            return SummaryReportView(enabled=False, kind=kind, currency=self.currency)
        return SummaryReportView(
            kind=kind,
            currency=self.currency,
            page=page.page,
            limit=page.limit,
            total=page.total,
            rows=[self.line(kind, row) for row in page.data],
            stats=summary_stats(page.data),
        )
