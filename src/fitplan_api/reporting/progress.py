"""Progress aggregation over completed sessions."""
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

from fitplan_api.models import CompletedSession

DEFAULT_WINDOW_DAYS = 30


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def local_date(moment: datetime, tz: tzinfo = timezone.utc) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


@dataclass
class DayBucket:
    """Totals for one calendar day."""
    day: date
    label: str
    weight: int = 0
    duration: int = 0  # minutes
    workouts: int = 0
    sets: int = 0


@dataclass
class HistorySummary:
    total_workouts: int
    total_seconds: int
    total_weight: float
    total_sets: int

    @property
    def total_minutes(self) -> int:
        return round_half_up(self.total_seconds / 60)


def daily_buckets(
    history: Iterable[CompletedSession],
    today: Optional[date] = None,
    days: int = DEFAULT_WINDOW_DAYS,
    tz: tzinfo = timezone.utc,
) -> List[DayBucket]:
    """
    One bucket per day for the last `days` days (today included), oldest first.

    Sessions outside the window are ignored. Weight and duration are summed
    raw and rounded once per bucket.
    """
    today = today or datetime.now(tz).date()
    first = today - timedelta(days=days - 1)

    weights = [0.0] * days
    seconds = [0] * days
    workouts = [0] * days
    sets = [0] * days

    for session in history:
        offset = (local_date(session.completed_at, tz) - first).days
        if 0 <= offset < days:
            weights[offset] += float(session.total_weight)
            seconds[offset] += session.duration
            workouts[offset] += 1
            sets[offset] += session.completed_sets

    buckets = []
    for offset in range(days):
        day = first + timedelta(days=offset)
        buckets.append(DayBucket(
            day=day,
            label=day.strftime("%d/%m"),
            weight=round_half_up(weights[offset]),
            duration=round_half_up(seconds[offset] / 60),
            workouts=workouts[offset],
            sets=sets[offset],
        ))
    return buckets


def summarize(history: Iterable[CompletedSession]) -> HistorySummary:
    sessions = list(history)
    return HistorySummary(
        total_workouts=len(sessions),
        total_seconds=sum(session.duration for session in sessions),
        total_weight=sum(float(session.total_weight) for session in sessions),
        total_sets=sum(session.completed_sets for session in sessions),
    )
