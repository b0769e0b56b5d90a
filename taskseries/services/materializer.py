"""Occurrence dates for a recurrence rule.

Every occurrence is computed from the rule's anchor (``schedule_from``), never
from the previous occurrence, so a monthly series anchored on the 31st comes
back to the 31st after passing through a shorter month.
"""

from __future__ import annotations

from datetime import date, timedelta

from taskseries.domain.datekeys import format_date_key, parse_date_key
from taskseries.domain.enums import RecurrencePattern
from taskseries.domain.recurrence import RecurrenceRule


def next_occurrence_after(rule: RecurrenceRule, after_date_key: str) -> str | None:
    """First occurrence strictly after ``after_date_key``, or None once ``end_date`` is reached."""
    after = parse_date_key(after_date_key)
    candidate = _next_date_after(rule, after)
    if rule.end_date is not None and candidate >= rule.end_date:
        return None
    return format_date_key(candidate)


def occurrences_between(
    rule: RecurrenceRule,
    start_date_key_exclusive: str,
    end_date_key_inclusive: str,
) -> list[str]:
    end = parse_date_key(end_date_key_inclusive)
    keys: list[str] = []
    current = start_date_key_exclusive
    while True:
        next_key = next_occurrence_after(rule, current)
        if next_key is None or parse_date_key(next_key) > end:
            return keys
        keys.append(next_key)
        current = next_key


def _next_date_after(rule: RecurrenceRule, after: date) -> date:
    anchor = rule.schedule_from
    if after < anchor:
        return anchor

    if rule.pattern in (RecurrencePattern.DAILY, RecurrencePattern.WEEKLY):
        step = rule.interval * (7 if rule.pattern == RecurrencePattern.WEEKLY else 1)
        steps = (after - anchor).days // step + 1
        return anchor + timedelta(days=steps * step)

    step = rule.interval * (12 if rule.pattern == RecurrencePattern.YEARLY else 1)
    elapsed = (after.year - anchor.year) * 12 + (after.month - anchor.month)
    steps = elapsed // step
    candidate = _add_months(anchor, steps * step)
    while candidate <= after:
        steps += 1
        candidate = _add_months(anchor, steps * step)
    return candidate


def _add_months(base: date, months: int) -> date:
    year = base.year + (base.month - 1 + months) // 12
    month = (base.month - 1 + months) % 12 + 1
    day = min(base.day, _days_in_month(year, month))
    return date(year, month, day)


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - timedelta(days=1)).day
