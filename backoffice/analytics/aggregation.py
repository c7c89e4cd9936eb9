"""
Aggregation Engine

Pure functions turning per-round (or pre-aggregated) analytics rows into
hourly buckets, per-entity totals, margin figures and top-N rankings.

Records may be mappings keyed by wire names (``betAmount``) or pydantic
models, in which case either the field name or its alias is accepted.
Malformed input (missing fields, non-numeric amounts, unparseable
timestamps) raises immediately.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union
from zoneinfo import ZoneInfo

import polars as pl

from backoffice.models import Bucket, EntityTotals, parse_timestamp

_MISSING = object()


def _value(record: Any, field: str, default: Any = _MISSING) -> Any:
    if isinstance(record, Mapping):
        if field in record:
            return record[field]
    elif hasattr(record, field):
        return getattr(record, field)
    else:
        for name, info in getattr(type(record), "model_fields", {}).items():
            if info.alias == field:
                return getattr(record, name)

    if default is _MISSING:
        raise KeyError(field)
    return default


def _number(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Field '{field}' must be numeric, got {value!r}")
    return value


def _zone(tz: Union[str, tzinfo, None]) -> Optional[tzinfo]:
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def _hour_of(value: Any, zone: Optional[tzinfo]) -> int:
    """Local calendar hour of a timestamp, or a bare hour value as given."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid hour: {value!r}")
    if isinstance(value, int):
        hour = value
    elif isinstance(value, str) and value.strip().isdigit():
        hour = int(value)
    else:
        moment = parse_timestamp(value)
        if not isinstance(moment, datetime):
            raise ValueError(f"Invalid timestamp: {value!r}")
        if moment.tzinfo is not None:
            moment = moment.astimezone(zone)
        hour = moment.hour

    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range: {value!r}")
    return hour


def bucket_hourly(
    records: Iterable[Any],
    field: str,
    time_field: str = "timestamp",
    tz: Union[str, tzinfo, None] = None,
) -> List[Bucket]:
    """
    Sum ``field`` per hour of ``time_field``.

    Hours without records are omitted; buckets come back ordered by hour
    with the decimal hour as key. Timezone-aware timestamps are converted
    to ``tz`` (host local time when None) before the hour is taken.

    Example:
        >>> bucket_hourly([{"timestamp": "2024-01-01T10:15", "v": 5},
        ...                {"timestamp": "2024-01-01T10:45", "v": 3}], "v")
        [Bucket(key='10', sum=8.0, count=2)]
    """
    zone = _zone(tz)
    hours: List[int] = []
    values: List[float] = []
    for record in records:
        hours.append(_hour_of(_value(record, time_field), zone))
        values.append(_number(_value(record, field), field))

    if not hours:
        return []

    df = pl.DataFrame({"hour": hours, "value": values}, schema={"hour": pl.Int32, "value": pl.Float64})
    grouped = (
        df.group_by("hour")
        .agg(
            pl.col("value").sum().alias("sum"),
            pl.len().alias("count"),
        )
        .sort("hour")
    )

    return [
        Bucket(key=str(row["hour"]), sum=row["sum"], count=row["count"])
        for row in grouped.iter_rows(named=True)
    ]


def group_by_entity(
    records: Iterable[Any],
    key_field: str,
    bet_field: str = "betAmount",
    win_field: str = "winAmount",
    count_field: str = "betCounts",
) -> Dict[Optional[str], EntityTotals]:
    """
    Sum bet, win and bet-count per ``key_field`` value.

    Groups keep the order in which their key first appears. Rows without a
    ``count_field`` count as a single bet.
    """
    keys: List[Optional[str]] = []
    bets: List[float] = []
    wins: List[float] = []
    counts: List[int] = []
    for record in records:
        key = _value(record, key_field)
        keys.append(None if key is None else str(key))
        bets.append(_number(_value(record, bet_field), bet_field))
        wins.append(_number(_value(record, win_field), win_field))
        counts.append(int(_number(_value(record, count_field, 1), count_field)))

    if not keys:
        return {}

    df = pl.DataFrame(
        {"key": keys, "bet": bets, "win": wins, "count": counts},
        schema={"key": pl.Utf8, "bet": pl.Float64, "win": pl.Float64, "count": pl.Int64},
    )
    grouped = df.group_by("key", maintain_order=True).agg(
        pl.col("bet").sum(),
        pl.col("win").sum(),
        pl.col("count").sum(),
    )

    return {
        row["key"]: EntityTotals(
            key=row["key"],
            bet_amount=row["bet"],
            win_amount=row["win"],
            bet_counts=row["count"],
        )
        for row in grouped.iter_rows(named=True)
    }


def margin(bet_amount: float, win_amount: float) -> float:
    """House margin in percent; positive favours the house, 0 when nothing was bet."""
    if bet_amount > 0:
        return (bet_amount - win_amount) * 100 / bet_amount
    return 0.0


def ggr(bet_amount: float, win_amount: float) -> float:
    return bet_amount - win_amount


def top_n(groups: Iterable[Any], by: str, n: int, dedupe_key: str) -> List[Any]:
    """
    Highest ``n`` groups by ``by``, keeping only the first entry per ``dedupe_key``.

    Equal values keep their input order. Entries whose key is None have no
    identity to collapse on and are all kept.
    """
    if n <= 0:
        return []

    ranked = sorted(groups, key=lambda g: _number(_value(g, by), by), reverse=True)

    seen = set()
    result = []
    for group in ranked:
        key = _value(group, dedupe_key)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        result.append(group)
        if len(result) == n:
            break
    return result


def unique_players_by_key(
    records: Iterable[Any],
    key_field: str = "brandName",
    player_field: str = "externalPlayerId",
) -> Dict[Optional[str], int]:
    """Distinct player count per key, in first-seen key order."""
    keys = []
    players = []
    for record in records:
        key = _value(record, key_field)
        player = _value(record, player_field)
        keys.append(None if key is None else str(key))
        players.append(None if player is None else str(player))

    if not keys:
        return {}

    df = pl.DataFrame({"key": keys, "player": players}, schema={"key": pl.Utf8, "player": pl.Utf8})
    grouped = df.group_by("key", maintain_order=True).agg(pl.col("player").drop_nulls().n_unique().alias("players"))
    return {row["key"]: row["players"] for row in grouped.iter_rows(named=True)}


@dataclass(frozen=True)
class SummaryStats:
    total_rounds: int
    won_rounds: int
    total_bet: float
    total_win: float
    ggr: float
    avg_rtp: float
    win_rate: float


def summary_stats(rows: Sequence[Any]) -> Optional[SummaryStats]:
    """
    Totals over summary report rows (``totalRounds``, ``wonRounds``,
    ``totalBet``, ``totalWin``, ``ggr``) plus average RTP and win rate.
    Returns None for no rows.
    """
    if not rows:
        return None

    columns = ("totalRounds", "wonRounds", "totalBet", "totalWin", "ggr")
    df = pl.DataFrame(
        {c: [float(_number(_value(row, c), c)) for row in rows] for c in columns},
    )
    totals = df.sum().row(0, named=True)

    total_bet = totals["totalBet"]
    total_rounds = int(totals["totalRounds"])
    won_rounds = int(totals["wonRounds"])

    return SummaryStats(
        total_rounds=total_rounds,
        won_rounds=won_rounds,
        total_bet=total_bet,
        total_win=totals["totalWin"],
        ggr=totals["ggr"],
        avg_rtp=totals["totalWin"] / total_bet * 100 if total_bet > 0 else 0.0,
        win_rate=won_rounds / total_rounds * 100 if total_rounds > 0 else 0.0,
    )
