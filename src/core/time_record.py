#!/usr/bin/env python3
"""
File: time_record.py
Description:
    Domain model of the daily time record.

    A `TimeRecord` is a finished day: a time-in, an optional break and a
    time-out, together with the worked hours. Records are immutable once
    created. This module also declares the punch actions, the punch
    status and the exceptions raised by the core modules.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum, auto
from typing import NamedTuple, Optional
import datetime as dt

########################################################################
#                    Core related errors declaration                   #
########################################################################


class DTRException(Exception):
    """Base type for all exceptions raised by the core modules."""

    pass


class IllegalTransitionError(DTRException):
    """A punch action was attempted in a status that doesn't allow it."""

    def __init__(self, action: "PunchAction", status: "Status"):
        super().__init__(f"Cannot {action} while status is {status}.")
        self.action = action
        self.status = status


class CorruptPersistedDataError(DTRException):
    """Stored records exist but cannot be decoded."""

    def __init__(self, message: str = "Persisted records are corrupted."):
        super().__init__(message)


class StorageError(DTRException):
    """The storage backend failed to read or write."""

    def __init__(self, message: str = "Storage operation failed."):
        super().__init__(message)


########################################################################
#                     Punch actions and status                         #
########################################################################


class PunchAction(Enum):
    """Punch actions enumeration."""

    TIME_IN = auto()  # The day starts
    BREAK_OUT = auto()  # The break starts
    BREAK_IN = auto()  # The break ends
    TIME_OUT = auto()  # The day ends

    def __str__(self):
        return self.name.lower().replace("_", "-")


class Status(Enum):
    """Current phase of the day."""

    OUT = auto()
    IN = auto()
    BREAK = auto()

    def __str__(self):
        return self.name


########################################################################
#                       Time record declaration                        #
########################################################################


class BreakPeriod(NamedTuple):
    """A closed break, from break-out to break-in."""

    start: dt.time
    end: dt.time


@dataclass(frozen=True)
class TimeRecord:
    """
    A finished daily time record.

    Attributes:
        date (datetime.date): Day of the record.
        time_in (datetime.time): Time at which the day started.
        time_out (datetime.time): Time at which the day ended.
        total_hours (str): Worked hours as a fixed point string with two
            decimals (e.g. "7.50").
        break_period (Optional[BreakPeriod]): The break taken, if any.
        clock_anomaly (bool): The elapsed time computed negative and
            `total_hours` has been clamped to "0.00".
    """

    date: dt.date
    time_in: dt.time
    time_out: dt.time
    total_hours: str
    break_period: Optional[BreakPeriod] = None
    clock_anomaly: bool = False

    @property
    def break_out(self) -> Optional[dt.time]:
        return self.break_period.start if self.break_period else None

    @property
    def break_in(self) -> Optional[dt.time]:
        return self.break_period.end if self.break_period else None

    def __str__(self):
        pause = ""
        if self.break_period:
            pause = (
                f" (break {self.break_period.start:%H:%M:%S}"
                f"-{self.break_period.end:%H:%M:%S})"
            )
        return (
            f"{self.date.isoformat()} {self.time_in:%H:%M:%S}-{self.time_out:%H:%M:%S}"
            f"{pause} = {self.total_hours} h"
        )


########################################################################
#                          Hours computation                           #
########################################################################

_ONE_HOUR = Decimal(3600)
_TWO_DECIMALS = Decimal("0.01")


def format_hours(elapsed: dt.timedelta) -> str:
    """
    Format a duration as hours with exactly two decimals, rounded half
    up (e.g. 7h30 gives "7.50").
    """
    seconds = Decimal(elapsed.days * 86400 + elapsed.seconds)
    seconds += Decimal(elapsed.microseconds) / Decimal(1_000_000)
    hours = (seconds / _ONE_HOUR).quantize(_TWO_DECIMALS, rounding=ROUND_HALF_UP)
    return f"{hours:.2f}"


def worked_time(
    date: dt.date,
    time_in: dt.time,
    time_out: dt.time,
    break_period: Optional[BreakPeriod] = None,
) -> dt.timedelta:
    """
    Compute the worked time of a day, the break being subtracted. All
    times are taken on the same calendar day, so the result is negative
    if the time-out precedes the time-in.
    """
    elapsed = dt.datetime.combine(date, time_out) - dt.datetime.combine(date, time_in)
    if break_period:
        elapsed -= dt.datetime.combine(date, break_period.end) - dt.datetime.combine(
            date, break_period.start
        )
    return elapsed
