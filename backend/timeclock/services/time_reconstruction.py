"""Worked time and break time derived from a punch sequence.

The ledger does not enforce in/out alternation, so the walk accepts any
sequence:

- an "in" replaces any earlier unclosed "in" (the earlier session is dropped)
- an "out" closes the open session, or is ignored when none is open
- an open session only counts when the window contains "now" (live total);
  on a past day it is left unresolved and contributes nothing
- break time is a separate pass over adjacent punches: every out -> in gap

Inputs are any objects with ``punch_type`` and ``timestamp`` attributes
(ORM rows or plain records).
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass
class WorkedTime:
    hours_worked: float = 0.0
    break_time_minutes: float = 0.0


@dataclass
class DaySummary:
    day: date
    label: str
    hours_worked: float
    break_time_minutes: float
    is_today: bool


def compute_worked_time(
    punches: Iterable,
    now: Optional[datetime] = None,
    clocked_in: Optional[bool] = None,
) -> WorkedTime:
    """Reconstruct worked hours and break minutes for one window.

    Pass ``now`` only when the window includes the current moment. ``clocked_in``
    lets the caller supply the ledger's current status; when omitted an open
    session at the end of the walk is taken to mean the employee is still in.
    """
    ordered = sorted(punches, key=lambda p: p.timestamp)
    if not ordered:
        return WorkedTime()

    worked = timedelta(0)
    last_clock_in = None
    for punch in ordered:
        if punch.punch_type == "in":
            last_clock_in = punch.timestamp
        elif punch.punch_type == "out" and last_clock_in is not None:
            worked += punch.timestamp - last_clock_in
            last_clock_in = None

    if now is not None and last_clock_in is not None and clocked_in is not False:
        worked += now - last_clock_in

    on_break = timedelta(0)
    for prev, curr in zip(ordered, ordered[1:]):
        if prev.punch_type == "out" and curr.punch_type == "in":
            on_break += curr.timestamp - prev.timestamp

    return WorkedTime(
        hours_worked=worked.total_seconds() / 3600.0,
        break_time_minutes=on_break.total_seconds() / 60.0,
    )


def punches_on(punches: Iterable, day: date) -> List:
    return [p for p in punches if p.timestamp.date() == day]


def day_summary(
    punches: Iterable,
    day: date,
    now: datetime,
    clocked_in: Optional[bool] = None,
) -> DaySummary:
    """Totals for one calendar day; only today gets the live add-on."""
    is_today = day == now.date()
    totals = compute_worked_time(
        punches_on(punches, day),
        now=now if is_today else None,
        clocked_in=clocked_in,
    )
    return DaySummary(
        day=day,
        label=DAY_LABELS[(day.weekday() + 1) % 7],
        hours_worked=totals.hours_worked,
        break_time_minutes=totals.break_time_minutes,
        is_today=is_today,
    )


def start_of_week(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_summary(
    punches: Iterable,
    week_start: date,
    now: datetime,
    clocked_in: Optional[bool] = None,
) -> List[DaySummary]:
    """Seven independent day buckets starting at ``week_start``."""
    punches = list(punches)
    return [
        day_summary(punches, week_start + timedelta(days=offset), now, clocked_in=clocked_in)
        for offset in range(7)
    ]
