#!/usr/bin/env python3
"""
File: record_filter.py
Description:
    Month and week grouping of the time records.

    Months are 0-based indices (January is 0). Weeks are numbered from 1
    inside their month and are aligned on calendar weeks: the first week
    runs from the 1st to the end of its calendar week, which may be
    shorter than 7 days. The first day of a week is configurable and
    defaults to Sunday.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import calendar
import datetime as dt
import math
from dataclasses import dataclass, replace
from typing import Iterable, Optional

# Internal libraries
from core.time_record import TimeRecord

__all__ = [
    "MAX_WEEKS",
    "FilterSelection",
    "week_of_month",
    "available_months",
    "available_weeks",
    "filter_records",
    "month_name",
]

# A month spans at most 6 calendar weeks
MAX_WEEKS = 6


def week_of_month(date: dt.date, first_weekday: int = calendar.SUNDAY) -> int:
    """
    Get the 1-based week number of the date within its month.

    Args:
        date (datetime.date): Date to locate.
        first_weekday (int): First day of the week as a `calendar`
            weekday constant (Monday is 0).

    Returns:
        int: Week number, from 1 to 6.
    """
    offset = (date.replace(day=1).weekday() - first_weekday) % 7
    return math.ceil((date.day + offset) / 7)


def available_months(records: Iterable[TimeRecord]) -> set[int]:
    """
    Get the 0-based months in which records exist.
    """
    return {record.date.month - 1 for record in records}


def available_weeks(
    records: Iterable[TimeRecord],
    month: Optional[int],
    first_weekday: int = calendar.SUNDAY,
) -> set[int]:
    """
    Get the week numbers in which records exist for the given 0-based
    month. There is no week without a month.
    """
    if month is None:
        return set()
    return {
        week_of_month(record.date, first_weekday)
        for record in records
        if record.date.month - 1 == month
    }


def filter_records(
    records: Iterable[TimeRecord],
    month: Optional[int] = None,
    week: Optional[int] = None,
    first_weekday: int = calendar.SUNDAY,
) -> list[TimeRecord]:
    """
    Keep the records of the given 0-based month and week, `None` meaning
    any. The records order is preserved.
    """
    return [
        record
        for record in records
        if (month is None or record.date.month - 1 == month)
        and (week is None or week_of_month(record.date, first_weekday) == week)
    ]


def month_name(month: int) -> str:
    """
    Get the name of the 0-based month in the current LC_TIME locale.
    """
    return calendar.month_name[month + 1]


@dataclass(frozen=True)
class FilterSelection:
    """
    User selection of a month and a week, `None` meaning all.

    A week only makes sense inside a month: changing the month always
    clears the week.
    """

    month: Optional[int] = None
    week: Optional[int] = None

    def __post_init__(self):
        if self.month is not None and not 0 <= self.month <= 11:
            raise ValueError(f"Month index must be within 0 and 11, got {self.month}.")
        if self.week is not None:
            if self.month is None:
                raise ValueError("A week cannot be selected without a month.")
            if not 1 <= self.week <= MAX_WEEKS:
                raise ValueError(
                    f"Week number must be within 1 and {MAX_WEEKS}, got {self.week}."
                )

    def with_month(self, month: Optional[int]) -> "FilterSelection":
        return FilterSelection(month=month)

    def with_week(self, week: Optional[int]) -> "FilterSelection":
        return replace(self, week=week)

    def apply(
        self, records: Iterable[TimeRecord], first_weekday: int = calendar.SUNDAY
    ) -> list[TimeRecord]:
        return filter_records(records, self.month, self.week, first_weekday)
