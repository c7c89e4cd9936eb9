"""
Back-Office Domain Models

Pydantic models for the entities and payloads exchanged with the remote
back-office API, plus the value types produced by the aggregation engine.

Wire payloads use camelCase (and Mongo-style ``_id``) field names; every model
accepts both the wire alias and the Python field name.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_timestamp(value: Any) -> Any:
    """Parse ISO-8601 strings (including a trailing ``Z``) into datetimes."""
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Invalid timestamp: {value!r}") from e
    return value


class WireModel(BaseModel):
    """Base for models that mirror the remote API's JSON."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Resource(str, Enum):
    """Cached reference resources"""
    PLATFORMS = "platforms"
    OPERATORS = "operators"
    BRANDS = "brands"
    GAMES = "games"


# =============================================================================
# Reference entities: Platform -> Operator -> Brand, plus the game catalog
# =============================================================================

class FilterOption(BaseModel):
    """Display-ready projection of an entity for dropdowns."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    value: str


class ReferenceEntity(WireModel):
    """Common identity fields of every cached entity"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(alias="_id")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @property
    def label(self) -> str:
        raise NotImplementedError

    @property
    def option_id(self) -> str:
        return self.id

    def to_option(self) -> FilterOption:
        return FilterOption(id=self.option_id, label=self.label, value=self.option_id)


class Platform(ReferenceEntity):
    """Top of the hierarchy"""

    name: str = Field(alias="platformName")

    @property
    def label(self) -> str:
        return self.name


class Operator(ReferenceEntity):
    """Belongs to exactly one platform"""

    name: str = Field(alias="operatorName")
    platform_id: str = Field(alias="platform")

    @property
    def label(self) -> str:
        return self.name


class Brand(ReferenceEntity):
    """Belongs to an operator, which in turn belongs to the brand's platform"""

    name: str = Field(alias="brandName")
    platform_id: str = Field(alias="platform")
    operator_id: str = Field(alias="operator")
    is_active: bool = Field(default=True, alias="isActive")

    @property
    def label(self) -> str:
        return self.name


class Game(ReferenceEntity):
    """Operator game catalog entry; options are keyed by game alias"""

    name: str = Field(alias="gameName")
    alias: str = Field(alias="gameAlias")
    platform_id: Optional[str] = Field(default=None, alias="platform")
    operator_id: Optional[str] = Field(default=None, alias="operator")
    brand_id: Optional[str] = Field(default=None, alias="brand")
    is_active: bool = Field(default=True, alias="isActive")
    game_type: Optional[str] = Field(default=None, alias="gameType")
    game_mode: Optional[str] = Field(default=None, alias="gameMode")
    min_bet: Optional[float] = Field(default=None, alias="minBet")
    max_bet: Optional[float] = Field(default=None, alias="maxBet")
    default_bet: Optional[float] = Field(default=None, alias="defaultBet")

    @property
    def label(self) -> str:
        return self.name

    @property
    def option_id(self) -> str:
        return self.alias


# =============================================================================
# Analytics
# =============================================================================

class RoundRecord(WireModel):
    """A single settled round as reported by the analytics source."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    bet_amount: float = Field(alias="betAmount")
    win_amount: float = Field(alias="winAmount")
    timestamp: datetime
    player_id: Optional[str] = Field(default=None, alias="externalPlayerId")
    game_alias: Optional[str] = Field(default=None, alias="gameAlias")
    brand_id: Optional[str] = Field(default=None, alias="brandId")
    operator_id: Optional[str] = Field(default=None, alias="operatorId")

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, value: Any) -> Any:
        return parse_timestamp(value)


@dataclass(frozen=True)
class Bucket:
    """Aggregation unit keyed by hour, day or entity id"""
    key: str
    sum: float
    count: int


@dataclass(frozen=True)
class EntityTotals:
    """Summed bet/win/count figures for one entity"""
    key: Optional[str]
    bet_amount: float
    win_amount: float
    bet_counts: int

    @property
    def ggr(self) -> float:
        return self.bet_amount - self.win_amount

    def as_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "betAmount": self.bet_amount,
            "winAmount": self.win_amount,
            "betCounts": self.bet_counts,
        }


class TurnoverRow(WireModel):
    """Per-brand, per-game or per-player turnover line"""

    brand_name: Optional[str] = Field(default=None, alias="brandName")
    brand_id: Optional[str] = Field(default=None, alias="brandId")
    game_alias: Optional[str] = Field(default=None, alias="gameAlias")
    external_player_id: Optional[str] = Field(default=None, alias="externalPlayerId")
    bet_counts: int = Field(default=0, alias="betCounts")
    bet_amount: float = Field(default=0.0, alias="betAmount")
    win_amount: float = Field(default=0.0, alias="winAmount")
    margin: float = 0.0


class HourlyRow(WireModel):
    """One point of the bets/GGR/turnover series"""

    hour: Union[int, str]
    bet_counts: int = Field(default=0, alias="betCounts")
    bet_amount: float = Field(default=0.0, alias="betAmount")
    win_amount: float = Field(default=0.0, alias="winAmount")
    ggr: float = 0.0
    margin: float = 0.0
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class UniquePlayerRow(WireModel):
    brand_name: Optional[str] = Field(default=None, alias="brandName")
    brand: Optional[str] = None
    external_player_id: Optional[str] = Field(default=None, alias="externalPlayerId")


class UniquePlayers(WireModel):
    data: List[UniquePlayerRow] = Field(default_factory=list)
    uap: int = 0


class GenericTotals(WireModel):
    bet_counts: int = Field(default=0, alias="betCounts")
    bet_amount: float = Field(default=0.0, alias="betAmount")
    win_amount: float = Field(default=0.0, alias="winAmount")
    ggr: float = 0.0
    margin: float = 0.0
    ggr_in_percentage: float = Field(default=0.0, alias="ggrInPercentage")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class DashboardChartData(WireModel):
    """Response of the dashboard chart summary report"""

    turn_over_by_operator: List[TurnoverRow] = Field(default_factory=list, alias="turnOverByOperator")
    turn_over_by_game_alias: List[TurnoverRow] = Field(default_factory=list, alias="turnOverByGameAlias")
    turn_over_by_player: List[TurnoverRow] = Field(default_factory=list, alias="turnOverByPlayer")
    bets_ggr_turn_over: List[HourlyRow] = Field(default_factory=list, alias="betsGGRTurnOver")
    unique_players: UniquePlayers = Field(default_factory=UniquePlayers, alias="uniquePlayers")
    generic: GenericTotals = Field(default_factory=GenericTotals)


class PlayerRanking(WireModel):
    """Winners/contributors report line"""

    external_player_id: Optional[str] = Field(default=None, alias="externalPlayerId")
    bet_counts: int = Field(default=0, alias="betCounts")
    bet_amount: float = Field(default=0.0, alias="betAmount")
    win_amount: float = Field(default=0.0, alias="winAmount")
    margin_in_amount: float = Field(default=0.0, alias="marginInAmount")
    margin_in_percentage: float = Field(default=0.0, alias="marginInPercentage")


class WinnersContributorsData(WireModel):
    data: List[PlayerRanking] = Field(default_factory=list)


class DashboardFilter(BaseModel):
    """Filters shared by every dashboard report"""

    start_time: datetime
    end_time: datetime
    currency: str = "INR"
    game_alias: Optional[str] = None
    external_player_id: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        params = {
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "playerCurrencyCode": self.currency,
        }
        if self.game_alias and self.game_alias.upper() != "ALL":
            params["gameAlias"] = self.game_alias
        if self.external_player_id:
            params["externalPlayerId"] = self.external_player_id
        return params


# =============================================================================
# Summary reports
# =============================================================================

class SummaryKind(str, Enum):
    """Summary report granularity"""
    DAILY = "daily"
    GAME = "game"
    PLAYER = "player"
    PLAYER_GAME = "player-game"


class SummaryFilter(DashboardFilter):
    """Dashboard filters plus hierarchy scope and paging"""

    platform_id: Optional[str] = None
    operator_id: Optional[str] = None
    brand_id: Optional[str] = None
    page_no: int = 1
    page_size: int = 50
    sort_direction: int = -1

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = dict(super().to_params())
        for wire_name, value in (
            ("platform", self.platform_id),
            ("operator", self.operator_id),
            ("brand", self.brand_id),
        ):
            if value and value.upper() != "ALL":
                params[wire_name] = value
        params["sortDirection"] = self.sort_direction
        params["pageNo"] = self.page_no
        params["pageSize"] = self.page_size
        return params


class SummaryRow(WireModel):
    """One line of a daily, game, player or player-game summary"""

    total_rounds: int = Field(default=0, alias="totalRounds")
    won_rounds: int = Field(default=0, alias="wonRounds")
    total_bet: float = Field(default=0.0, alias="totalBet")
    total_win: float = Field(default=0.0, alias="totalWin")
    ggr: float = 0.0
    rtp: Optional[Union[str, float]] = None
    date: Optional[str] = None
    game_alias: Optional[str] = Field(default=None, alias="gameAlias")
    external_player_id: Optional[str] = Field(default=None, alias="externalPlayerId")
    platform: Optional[str] = None
    operator: Optional[str] = None


class SummaryPage(WireModel):
    data: List[SummaryRow] = Field(default_factory=list)
    limit: int = 50
    page: int = 1
    total: int = 0


# =============================================================================
# API permission entries and session
# =============================================================================

class ApiPermission(WireModel):
    """API-management entry: which roles and tenants may call an endpoint"""

    id: str = Field(alias="_id")
    name: str
    end_point: str = Field(alias="endPoint")
    description: str = ""
    status: bool = True
    role: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)
    operators: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class ApiPermissionPage(WireModel):
    data: List[ApiPermission] = Field(default_factory=list)
    total_items: int = Field(default=0, alias="totalItems")
    limit: int = 50
    page: int = 1
    total_pages: int = Field(default=1, alias="totalPages")
    more_pages: bool = Field(default=False, alias="morePages")


class User(WireModel):
    id: str
    email: str
    name: str
    role: str
    avatar: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class LoginResult(WireModel):
    user: User
    token: str
    refresh_token: str = Field(default="", alias="refreshToken")
    expires_in: int = Field(default=3600, alias="expiresIn")
