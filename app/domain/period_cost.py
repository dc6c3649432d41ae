"""
Period cost aggregation — total subscription cost over an inclusive month window.

Rules:
  - Closed subscription (end_date set): price x number of months shared with the window
    (both ends inclusive).
  - Open-ended subscription (end_date is NULL): price once, only if its start month
    falls inside the window. Months still running inside the window are not counted.

Pure functions: records are already fetched and filtered by the caller.
"""
from dataclasses import dataclass
from typing import Iterable

from app.domain.calendar_month import (
    CalendarMonth, InvalidRangeError, parse_month,
)


@dataclass(frozen=True)
class QueryWindow:
    start: CalendarMonth
    end: CalendarMonth

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidRangeError("start_period must be before or equal to end_period")

    def contains(self, month: CalendarMonth) -> bool:
        return self.start <= month <= self.end


@dataclass(frozen=True)
class SubscriptionInterval:
    """Read-only view of a subscription record for cost aggregation"""
    price: int
    start: CalendarMonth
    end: CalendarMonth | None  # None = open-ended (still active)

    @property
    def is_open_ended(self) -> bool:
        return self.end is None

    @classmethod
    def from_record(cls, price: int, start_date: str, end_date: str | None) -> "SubscriptionInterval":
        """Build from stored "MM-YYYY" strings; empty end_date means open-ended."""
        return cls(
            price=price,
            start=parse_month(start_date, "start_date"),
            end=parse_month(end_date, "end_date") if end_date else None,
        )


def validate_window(start_text: str, end_text: str) -> QueryWindow:
    """
    Провалидировать период запроса

    Raises:
        InvalidFormatError: start_period / end_period не в формате MM-YYYY
        InvalidRangeError: start_period позже end_period
    """
    start = parse_month(start_text, "start_period")
    end = parse_month(end_text, "end_period")
    return QueryWindow(start=start, end=end)


def overlap_months(
    window_start: CalendarMonth,
    window_end: CalendarMonth,
    sub_start: CalendarMonth,
    sub_end: CalendarMonth,
) -> int:
    """Count of months shared by [window_start, window_end] and [sub_start, sub_end]."""
    effective_start = max(window_start, sub_start)
    effective_end = min(window_end, sub_end)

    if effective_start > effective_end:
        return 0

    # +1: both boundary months are charged
    return (
        (effective_end.year - effective_start.year) * 12
        + (effective_end.month - effective_start.month)
        + 1
    )


def subscription_cost(window: QueryWindow, sub: SubscriptionInterval) -> int:
    if sub.end is None:
        return sub.price if window.contains(sub.start) else 0
    return sub.price * overlap_months(window.start, window.end, sub.start, sub.end)


def total_cost(window: QueryWindow, subscriptions: Iterable[SubscriptionInterval]) -> int:
    return sum(subscription_cost(window, sub) for sub in subscriptions)
