"""Compliance event generation from obligation frequencies."""

import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from covtrack.domain.entities import (
    ComplianceEvent,
    EventStatus,
    Frequency,
    Obligation,
)

logger = logging.getLogger(__name__)

DUE_SOON_DAYS = 7

_CURSOR_STEPS = {
    Frequency.ANNUAL: relativedelta(years=1),
    Frequency.SEMI_ANNUAL: relativedelta(months=6),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.MONTHLY: relativedelta(months=1),
}


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _frequency(value: str) -> Optional[Frequency]:
    try:
        return Frequency(value)
    except ValueError:
        return None


def period_for(frequency: Frequency, cursor: date) -> tuple[date, date]:
    """Reporting period containing ``cursor`` for a recurring frequency.

    Raises:
        ValueError: For one-time or unrecognised frequencies, which have no
            calendar period
    """
    year = cursor.year
    if frequency == Frequency.ANNUAL:
        return date(year, 1, 1), date(year, 12, 31)
    if frequency == Frequency.SEMI_ANNUAL:
        if cursor.month <= 6:
            return date(year, 1, 1), date(year, 6, 30)
        return date(year, 7, 1), date(year, 12, 31)
    if frequency == Frequency.QUARTERLY:
        start = date(year, (cursor.month - 1) // 3 * 3 + 1, 1)
        return start, start + relativedelta(months=3) - timedelta(days=1)
    if frequency == Frequency.MONTHLY:
        start = cursor.replace(day=1)
        return start, start + relativedelta(months=1) - timedelta(days=1)
    raise ValueError(f"Frequency '{frequency.value}' has no calendar period")


def event_status(deadline_date: date, now: date | datetime) -> EventStatus:
    """Initial status of an event: due soon within a week of its deadline."""
    remaining = _as_datetime(deadline_date) - _as_datetime(now)
    days_until_deadline = math.ceil(remaining / timedelta(days=1))
    if days_until_deadline <= DUE_SOON_DAYS:
        return EventStatus.DUE_SOON
    return EventStatus.UPCOMING


def default_horizon(now: date | datetime) -> tuple[date, date]:
    """One-year generation window starting at ``now``."""
    start = _as_date(now)
    return start, start + relativedelta(years=1)


def _build_event(
    obligation: Obligation,
    period_start: date,
    period_end: date,
    deadline_base: date,
    now: date | datetime,
) -> Optional[ComplianceEvent]:
    deadline_date = deadline_base + timedelta(days=obligation.deadline_days)
    if _as_datetime(deadline_date) <= _as_datetime(now):
        logger.debug(
            "Skipping period %s..%s of obligation %s: deadline %s already passed",
            period_start,
            period_end,
            obligation.id,
            deadline_date,
        )
        return None
    return ComplianceEvent(
        reference_period_start=period_start,
        reference_period_end=period_end,
        deadline_date=deadline_date,
        grace_deadline_date=deadline_date + timedelta(days=obligation.grace_period_days),
        status=event_status(deadline_date, now),
        obligation_id=obligation.id,
        facility_id=obligation.facility_id,
    )


def generate_events(
    obligation: Obligation,
    horizon_start: date | datetime,
    horizon_end: date | datetime,
    now: date | datetime,
) -> list[ComplianceEvent]:
    """Project the compliance events of an obligation over a horizon.

    A cursor walks from ``horizon_start`` one period at a time until it
    reaches ``horizon_end``. Each period produces an event whose deadline is
    ``deadline_days`` after the period end, provided that deadline is still
    ahead of ``now``. One-time obligations produce a single event whose
    deadline is counted from ``horizon_start``; unrecognised frequencies
    produce nothing.

    Args:
        obligation: Obligation to project (not modified)
        horizon_start: First day of the generation window
        horizon_end: Exclusive end of the generation window
        now: Generation instant, used to drop past deadlines and set status

    Returns:
        Events in period order
    """
    frequency = _frequency(obligation.frequency)
    if frequency is None or frequency == Frequency.OTHER:
        logger.debug(
            "Obligation %s has frequency '%s'; no events generated",
            obligation.id,
            obligation.frequency,
        )
        return []

    start = _as_date(horizon_start)
    end = _as_date(horizon_end)

    if frequency == Frequency.ONE_TIME:
        event = _build_event(obligation, start, start, start, now)
        return [event] if event is not None else []

    events = []
    step = _CURSOR_STEPS[frequency]
    cursor = start
    advances = 0
    while cursor < end:
        period_start, period_end = period_for(frequency, cursor)
        event = _build_event(obligation, period_start, period_end, period_end, now)
        if event is not None:
            events.append(event)
        advances += 1
        # Step from the horizon start so month-end clamping does not drift
        cursor = start + step * advances
    return events
