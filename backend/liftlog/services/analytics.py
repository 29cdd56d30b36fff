# liftlog/services/analytics.py
"""
Statistics derived from a user's workout history.

Everything here is a pure function over already-loaded records, so it can run
next to a live session without coordination. Workouts need ``id``,
``started_at`` and ``finished_at``; sets need ``workout_id``, ``reps``,
``weight_kg``, ``exercise`` (with ``primary_muscles``/``secondary_muscles``)
and ``custom_exercise_primary_muscles``. All calendar math is UTC.

Unless stated otherwise only finished workouts count.
"""
from __future__ import annotations

import calendar
import logging
import math
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from liftlog.services.muscles import CANONICAL_GROUPS, muscle_group
from liftlog.timeutil import as_utc, utc_date

log = logging.getLogger(__name__)

PRIMARY_WEIGHT = 1.0
SECONDARY_WEIGHT = 0.5
STREAK_LOOKBACK_DAYS = 365


def _round(x: float) -> int:
    # half-up, matching how the charts have always displayed totals
    return int(math.floor(x + 0.5))


def _month_shift(year: int, month: int, delta: int) -> tuple[int, int]:
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def _months_ago(now: datetime, months: int) -> datetime:
    y, m = _month_shift(now.year, now.month, -months)
    day = min(now.day, calendar.monthrange(y, m)[1])
    return now.replace(year=y, month=m, day=day)


def _week_start(d: date) -> date:
    """Sunday on or before ``d``."""
    return d - timedelta(days=(d.weekday() + 1) % 7)


def _finished(workouts: Iterable) -> list:
    return [w for w in workouts if w.finished_at is not None]


def set_volume(s) -> float | None:
    if s.reps is None or s.weight_kg is None:
        return None
    return float(s.reps) * float(s.weight_kg)


def workout_stats(workouts: Sequence, sets: Sequence, *, now: datetime) -> dict:
    now = as_utc(now)
    finished = _finished(workouts)
    finished_ids = {w.id for w in finished}

    total_volume = 0.0
    for s in sets:
        v = set_volume(s)
        if v is not None and s.workout_id in finished_ids:
            total_volume += v

    durations = [
        (as_utc(w.finished_at) - as_utc(w.started_at)).total_seconds() / 60 for w in finished
    ]
    average = _round(sum(durations) / len(durations)) if durations else 0

    week_ago = now - timedelta(days=7)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return {
        "total_workouts": len(workouts),
        "total_sets": len(sets),
        "total_volume": round(total_volume, 2),
        "average_workout_duration": average,
        "workouts_this_week": sum(1 for w in workouts if as_utc(w.started_at) >= week_ago),
        "workouts_this_month": sum(1 for w in workouts if as_utc(w.started_at) >= month_start),
    }


def overall_progress(workouts: Sequence, *, weeks: int = 6, now: datetime) -> list[dict]:
    """Finished workouts per Sunday-started week, oldest week first."""
    this_week = _week_start(as_utc(now).date())
    starts = [this_week - timedelta(weeks=weeks - 1 - i) for i in range(weeks)]
    counts = Counter(_week_start(utc_date(w.started_at)) for w in _finished(workouts))
    return [{"week": f"{s.month:02d}/{s.day:02d}", "workouts": counts.get(s, 0)} for s in starts]


def muscle_group_breakdown(workouts: Sequence, sets: Sequence, *, months: int = 6,
                           now: datetime) -> list[dict]:
    """Volume-weighted emphasis per canonical muscle group.

    Each set is one set, so its volume is ``reps * weight_kg``. Primary muscles
    get the full volume and secondary muscles half of it. Names that do not map
    to a canonical group land in "Other", which is not reported.
    """
    since = _months_ago(as_utc(now), months)
    in_window = {w.id for w in _finished(workouts) if as_utc(w.started_at) >= since}

    scores: dict[str, float] = defaultdict(float)
    for s in sets:
        if s.workout_id not in in_window:
            continue
        volume = set_volume(s)
        if volume is None:
            continue
        if s.exercise is not None:
            primary = s.exercise.primary_muscles or []
            secondary = s.exercise.secondary_muscles or []
        else:
            primary = s.custom_exercise_primary_muscles or []
            secondary = []
        for muscle in primary:
            scores[muscle_group(muscle)] += volume * PRIMARY_WEIGHT
        for muscle in secondary:
            scores[muscle_group(muscle)] += volume * SECONDARY_WEIGHT

    log.debug("muscle group scores: %s", dict(scores))
    return [{"muscle_group": g, "volume": _round(scores.get(g, 0.0))} for g in CANONICAL_GROUPS]


def volume_over_time(workouts: Sequence, sets: Sequence, *, months: int = 6,
                     now: datetime) -> list[dict]:
    """Monthly ``reps * weight_kg`` totals over the trailing window, oldest month first."""
    now = as_utc(now)
    # newest month first, reversed at the end
    buckets = [_month_shift(now.year, now.month, -i) for i in range(months)]
    monthly: dict[tuple[int, int], float] = {b: 0.0 for b in buckets}

    started = {w.id: as_utc(w.started_at) for w in _finished(workouts)}
    for s in sets:
        when = started.get(s.workout_id)
        volume = set_volume(s)
        if when is None or volume is None:
            continue
        key = (when.year, when.month)
        if key in monthly:
            monthly[key] += volume

    rows = [{"month": calendar.month_name[m], "volume": _round(monthly[(y, m)])} for y, m in buckets]
    rows.reverse()
    return rows


def workout_days(workouts: Iterable) -> set[date]:
    return {utc_date(w.started_at) for w in _finished(workouts)}


def current_streak(days: Iterable[date], *, today: date,
                   lookback: int = STREAK_LOOKBACK_DAYS) -> int:
    """Consecutive workout days walking back from ``today``.

    Days before the most recent workout day are skipped; the run ends at the
    first gap after it.
    """
    days = set(days)
    streak = 0
    cursor = today
    earliest = today - timedelta(days=lookback)
    while cursor >= earliest:
        if cursor in days:
            streak += 1
        elif streak > 0:
            break
        cursor -= timedelta(days=1)
    return streak


def longest_streak(days: Iterable[date]) -> int:
    ordered = sorted(set(days))
    if not ordered:
        return 0
    best = run = 1
    for prev, cur in zip(ordered, ordered[1:]):
        run = run + 1 if (cur - prev).days == 1 else 1
        best = max(best, run)
    return best


def workout_calendar(workouts: Iterable) -> dict[date, int]:
    return dict(sorted(Counter(utc_date(w.started_at) for w in _finished(workouts)).items()))


def streak_summary(workouts: Sequence, *, now: datetime) -> dict:
    now = as_utc(now)
    days = workout_days(workouts)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    finished = _finished(workouts)
    return {
        "total_workouts": len(finished),
        "current_streak": current_streak(days, today=now.date()),
        "longest_streak": longest_streak(days),
        "this_month_workouts": sum(1 for w in finished if as_utc(w.started_at) >= month_start),
        "calendar": [{"date": d.isoformat(), "count": c} for d, c in workout_calendar(workouts).items()],
    }
