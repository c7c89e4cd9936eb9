"""
Dashboard View-Model Assembler

Combines aggregation results with cached reference labels into the
structures the dashboard charts and tables consume. Label lookups that miss
fall back to the raw id; assembling never waits for the cache.
"""

from datetime import tzinfo
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field
import structlog

from backoffice.analytics.aggregation import (
    bucket_hourly,
    ggr,
    group_by_entity,
    margin,
    top_n,
    unique_players_by_key,
)
from backoffice.analytics.queries import DashboardData
from backoffice.models import (
    DashboardChartData,
    EntityTotals,
    GenericTotals,
    PlayerRanking,
    Resource,
    TurnoverRow,
)
from backoffice.presentation.badges import MarginTone, Perspective, margin_tone, trend_icon

logger = structlog.get_logger(__name__)


class ChartPoint(BaseModel):
    x: Union[int, str]
    y: float


class DashboardStats(BaseModel):
    bet_counts: int = 0
    bet_amount: float = 0.0
    win_amount: float = 0.0
    ggr: float = 0.0
    ggr_percentage: float = 0.0
    tone: MarginTone = MarginTone.FAVOURABLE
    unique_players: int = 0
    updated_at: Optional[str] = None


class EntityRow(BaseModel):
    """One line of a breakdown or leaderboard table"""
    rank: int
    key: Optional[str]
    label: str
    bet_counts: int = 0
    bet_amount: float = 0.0
    win_amount: float = 0.0
    ggr: float = 0.0
    margin: float = 0.0
    tone: MarginTone = MarginTone.FAVOURABLE
    trend: str = "trending-up"


class DashboardViewModel(BaseModel):
    enabled: bool = True
    currency: str = "INR"
    game_alias: Optional[str] = None
    stats: DashboardStats = Field(default_factory=DashboardStats)
    bets_series: List[ChartPoint] = Field(default_factory=list)
    ggr_series: List[ChartPoint] = Field(default_factory=list)
    turnover_series: List[ChartPoint] = Field(default_factory=list)
    margin_series: List[ChartPoint] = Field(default_factory=list)
    unique_users_by_brand: List[ChartPoint] = Field(default_factory=list)
    turnover_by_brand: List[EntityRow] = Field(default_factory=list)
    top_games: List[EntityRow] = Field(default_factory=list)
    top_players: List[EntityRow] = Field(default_factory=list)
    winners: List[EntityRow] = Field(default_factory=list)
    contributors: List[EntityRow] = Field(default_factory=list)

    @classmethod
    def disabled(cls, currency: str = "INR") -> "DashboardViewModel":
        return cls(enabled=False, currency=currency)


def _is_all(value: Optional[str]) -> bool:
    return not value or value.upper() == "ALL"


class DashboardAssembler:
    """
    Example:
        assembler = DashboardAssembler(cache, leaderboard_size=20)
        view = assembler.assemble(data, game_alias="crash-x")
    """

    def __init__(
        self,
        cache,
        leaderboard_size: int = 20,
        currency: str = "INR",
        tz: Union[str, tzinfo, None] = None,
    ):
        self.cache = cache
        self.leaderboard_size = leaderboard_size
        self.currency = currency
        self.tz = tz

    @classmethod
    def from_settings(cls, cache, settings) -> "DashboardAssembler":
        return cls(
            cache,
            leaderboard_size=settings.analytics.leaderboard_size,
            currency=settings.analytics.default_currency,
            tz=settings.analytics.timezone,
        )

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def _labels(self, resource: Resource) -> Dict[str, str]:
        if self.cache is None:
            return {}
        return self.cache.label_map(resource)

    @staticmethod
    def _label(labels: Dict[str, str], key: Optional[str]) -> str:
        if key is None:
            return "Unknown"
        return labels.get(key, key)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def stats(self, chart: DashboardChartData, game_alias: Optional[str] = None) -> DashboardStats:
        """Generic totals, or the selected game's row when a game is chosen."""
        if not _is_all(game_alias):
            row = next((r for r in chart.turn_over_by_game_alias if r.game_alias == game_alias), None)
            if row is None:
                return DashboardStats(unique_players=chart.unique_players.uap)
            percentage = margin(row.bet_amount, row.win_amount)
            return DashboardStats(
                bet_counts=row.bet_counts,
                bet_amount=row.bet_amount,
                win_amount=row.win_amount,
                ggr=ggr(row.bet_amount, row.win_amount),
                ggr_percentage=percentage,
                tone=margin_tone(percentage),
                unique_players=chart.unique_players.uap,
            )

        generic: GenericTotals = chart.generic
        percentage = margin(generic.bet_amount, generic.win_amount)
        return DashboardStats(
            bet_counts=generic.bet_counts,
            bet_amount=generic.bet_amount,
            win_amount=generic.win_amount,
            ggr=ggr(generic.bet_amount, generic.win_amount),
            ggr_percentage=percentage,
            tone=margin_tone(percentage),
            unique_players=chart.unique_players.uap,
            updated_at=generic.updated_at,
        )

    def _hourly(self, chart: DashboardChartData, field: str):
        return bucket_hourly(chart.bets_ggr_turn_over, field, time_field="hour", tz=self.tz)

    def _series(self, chart: DashboardChartData, field: str) -> List[ChartPoint]:
        return [ChartPoint(x=int(b.key), y=round(b.sum, 2)) for b in self._hourly(chart, field)]

    def margin_series(self, chart: DashboardChartData) -> List[ChartPoint]:
        bets = {b.key: b.sum for b in self._hourly(chart, "betAmount")}
        wins = {b.key: b.sum for b in self._hourly(chart, "winAmount")}
        return [ChartPoint(x=int(hour), y=round(margin(bet, wins.get(hour, 0.0)), 2)) for hour, bet in bets.items()]

    def unique_users_by_brand(self, chart: DashboardChartData) -> List[ChartPoint]:
        labels = self._labels(Resource.BRANDS)
        records = [
            {
                "brand": self._label(labels, row.brand) if row.brand else (row.brand_name or "Unknown"),
                "externalPlayerId": row.external_player_id,
            }
            for row in chart.unique_players.data
        ]
        counts = unique_players_by_key(records, key_field="brand")
        return [ChartPoint(x=brand, y=count) for brand, count in counts.items()]

    def _rows(
        self,
        totals: List[EntityTotals],
        labels: Dict[str, str],
        perspective: Perspective = Perspective.HOUSE,
    ) -> List[EntityRow]:
        rows = []
        for rank, entity in enumerate(totals, start=1):
            percentage = margin(entity.bet_amount, entity.win_amount)
            rows.append(EntityRow(
                rank=rank,
                key=entity.key,
                label=self._label(labels, entity.key),
                bet_counts=entity.bet_counts,
                bet_amount=entity.bet_amount,
                win_amount=entity.win_amount,
                ggr=entity.ggr,
                margin=percentage,
                tone=margin_tone(percentage, perspective),
                trend=trend_icon(percentage),
            ))
        return rows

    @staticmethod
    def _turnover_records(rows: List[TurnoverRow], key_attr: str, fallback_attr: Optional[str] = None) -> List[dict]:
        records = []
        for row in rows:
            key = getattr(row, key_attr)
            if key is None and fallback_attr:
                key = getattr(row, fallback_attr)
            records.append({
                "key": key,
                "betAmount": row.bet_amount,
                "winAmount": row.win_amount,
                "betCounts": row.bet_counts,
            })
        return records

    def turnover_by_brand(self, chart: DashboardChartData) -> List[EntityRow]:
        grouped = group_by_entity(self._turnover_records(chart.turn_over_by_operator, "brand_id", "brand_name"), "key")
        ranked = top_n(grouped.values(), "bet_amount", len(grouped), "key")
        return self._rows(ranked, self._labels(Resource.BRANDS))

    def top_games(self, chart: DashboardChartData) -> List[EntityRow]:
        grouped = group_by_entity(self._turnover_records(chart.turn_over_by_game_alias, "game_alias"), "key")
        ranked = top_n(grouped.values(), "bet_amount", self.leaderboard_size, "key")
        return self._rows(ranked, self._labels(Resource.GAMES))

    def top_players(self, chart: DashboardChartData) -> List[EntityRow]:
        grouped = group_by_entity(self._turnover_records(chart.turn_over_by_player, "external_player_id"), "key")
        ranked = top_n(grouped.values(), "bet_amount", self.leaderboard_size, "key")
        return self._rows(ranked, {})

    def _rankings(self, rankings: List[PlayerRanking], by: str, perspective: Perspective) -> List[EntityRow]:
        ranked = top_n(rankings, by, self.leaderboard_size, "externalPlayerId")
        totals = [
            EntityTotals(
                key=r.external_player_id,
                bet_amount=r.bet_amount,
                win_amount=r.win_amount,
                bet_counts=r.bet_counts,
            )
            for r in ranked
        ]
        rows = self._rows(totals, {}, perspective)
        for row in rows:
            if row.key is None:
                row.label = "Anonymous"
        return rows

    def winners(self, rankings: List[PlayerRanking]) -> List[EntityRow]:
        return self._rankings(rankings, "winAmount", Perspective.PLAYER)

    def contributors(self, rankings: List[PlayerRanking]) -> List[EntityRow]:
        return self._rankings(rankings, "marginInAmount", Perspective.HOUSE)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def assemble(self, data: Optional[DashboardData], game_alias: Optional[str] = None) -> DashboardViewModel:
        if data is None:
            return DashboardViewModel.disabled(self.currency)

        chart = data.chart
        view = DashboardViewModel(
            currency=self.currency,
            game_alias=None if _is_all(game_alias) else game_alias,
            stats=self.stats(chart, game_alias),
            bets_series=self._series(chart, "betCounts"),
            ggr_series=self._series(chart, "ggr"),
            turnover_series=self._series(chart, "betAmount"),
            margin_series=self.margin_series(chart),
            unique_users_by_brand=self.unique_users_by_brand(chart),
            turnover_by_brand=self.turnover_by_brand(chart),
            top_games=self.top_games(chart),
            top_players=self.top_players(chart),
            winners=self.winners(data.winners),
            contributors=self.contributors(data.contributors),
        )
        logger.debug(
            "Dashboard assembled",
            hours=len(view.turnover_series),
            brands=len(view.turnover_by_brand),
            games=len(view.top_games),
        )
        return view
