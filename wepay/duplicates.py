"""
Duplicate Expense Detection

Guards against the same expense being submitted twice on one day. The key
is (description, amount, paid_by) plus the calendar day of creation;
split_between is deliberately left out of the key.
"""

from datetime import date, datetime, timezone, tzinfo
from typing import Iterable, Optional

from .models import Expense


def calendar_day(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """
    Calendar day of a timestamp as seen from ``tz``

    With no ``tz`` the server's local timezone is used. Naive timestamps are
    taken to be in that zone already.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def find_duplicate_expense(
    candidate: Expense,
    existing: Iterable[Expense],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> Optional[Expense]:
    """
    Return the first existing expense that makes ``candidate`` a duplicate

    Args:
        candidate: Expense about to be appended
        existing: The group's current expenses
        now: Reference time for "today" (defaults to the current time)
        tz: Timezone deciding where a day starts (defaults to server local)

    Returns:
        The matching Expense, or None
    """
    today = calendar_day(now or datetime.now(timezone.utc), tz)

    for expense in existing:
        if (expense.description == candidate.description
                and expense.amount == candidate.amount
                and expense.paid_by == candidate.paid_by
                and calendar_day(expense.created_at, tz) == today):
            return expense
    return None


def is_duplicate_expense(
    candidate: Expense,
    existing: Iterable[Expense],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> bool:
    """Check whether an identical expense was already logged today"""
    return find_duplicate_expense(candidate, existing, now=now, tz=tz) is not None
