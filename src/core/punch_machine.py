#!/usr/bin/env python3
"""
File: punch_machine.py
Description:
    The punch state machine enforces the legal sequence of punch actions
    and computes the worked hours when the day is over.

    The machine states are the draft records themselves. Each draft
    variant only holds the fields that make sense at its phase of the
    day, so an unclosed break or a break-in without a break-out cannot
    be represented:

        NotStarted --time-in--> Started --break-out--> OnBreak
        OnBreak --break-in--> ResumedFromBreak --break-out--> OnBreak
        Started | ResumedFromBreak --time-out--> NotStarted

    The current time is read from an injectable clock at the moment an
    action is punched.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import datetime as dt
from dataclasses import dataclass
from typing import Callable, ClassVar, NamedTuple, Optional, cast

# Internal libraries
from common.state_machine import IStateBehavior, IStateMachine
from core.time_record import (
    BreakPeriod,
    IllegalTransitionError,
    PunchAction,
    Status,
    TimeRecord,
    format_hours,
    worked_time,
)

__all__ = [
    "PunchStateMachine",
    "PunchEvent",
    "Draft",
    "NotStarted",
    "Started",
    "OnBreak",
    "ResumedFromBreak",
]

logger = logging.getLogger(__name__)


class PunchEvent(NamedTuple):
    """A punch action and the local time at which it occurred."""

    action: PunchAction
    at: dt.datetime


########################################################################
#                          Draft record states                         #
########################################################################


class Draft(IStateBehavior):
    """
    Base of the draft variants. A draft is both the record under
    construction and the state of the punch machine.
    """

    # Status reported while in this draft
    status: ClassVar[Status]
    # Actions allowed from this draft
    allowed_actions: ClassVar[frozenset[PunchAction]]

    def accepts(self, event: object) -> bool:
        return isinstance(event, PunchEvent) and event.action in self.allowed_actions

    @property
    def break_period(self) -> Optional[BreakPeriod]:
        """
        Closed break to subtract from the worked time, if any.
        """
        return None


@dataclass(frozen=True)
class NotStarted(Draft):
    """No day in progress."""

    status: ClassVar[Status] = Status.OUT
    allowed_actions: ClassVar[frozenset[PunchAction]] = frozenset(
        {PunchAction.TIME_IN}
    )

    def handle(self, event: PunchEvent) -> Draft:
        return Started(date=event.at.date(), time_in=event.at.time())


@dataclass(frozen=True)
class Started(Draft):
    """The day started, no break taken yet."""

    date: dt.date
    time_in: dt.time

    status: ClassVar[Status] = Status.IN
    allowed_actions: ClassVar[frozenset[PunchAction]] = frozenset(
        {PunchAction.BREAK_OUT, PunchAction.TIME_OUT}
    )

    def handle(self, event: PunchEvent) -> Draft:
        if event.action is PunchAction.BREAK_OUT:
            return OnBreak(self.date, self.time_in, break_out=event.at.time())
        return NotStarted()


@dataclass(frozen=True)
class OnBreak(Draft):
    """The break is in progress."""

    date: dt.date
    time_in: dt.time
    break_out: dt.time

    status: ClassVar[Status] = Status.BREAK
    allowed_actions: ClassVar[frozenset[PunchAction]] = frozenset(
        {PunchAction.BREAK_IN}
    )

    def handle(self, event: PunchEvent) -> Draft:
        return ResumedFromBreak(
            self.date, self.time_in, self.break_out, break_in=event.at.time()
        )


@dataclass(frozen=True)
class ResumedFromBreak(Draft):
    """Back to work after the break."""

    date: dt.date
    time_in: dt.time
    break_out: dt.time
    break_in: dt.time

    status: ClassVar[Status] = Status.IN
    allowed_actions: ClassVar[frozenset[PunchAction]] = frozenset(
        {PunchAction.BREAK_OUT, PunchAction.TIME_OUT}
    )

    @property
    def break_period(self) -> Optional[BreakPeriod]:
        return BreakPeriod(self.break_out, self.break_in)

    def handle(self, event: PunchEvent) -> Draft:
        if event.action is PunchAction.BREAK_OUT:
            # A record holds a single break, the new one replaces it
            logger.warning(
                f"A second break starts, the break {self.break_out}-{self.break_in} "
                "is no longer subtracted."
            )
            return OnBreak(self.date, self.time_in, break_out=event.at.time())
        return NotStarted()


########################################################################
#                          Punch state machine                         #
########################################################################


class PunchStateMachine(IStateMachine):
    """
    Owns the draft record and accepts the punch actions.
    """

    def __init__(
        self,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
        sink: Optional[Callable[[TimeRecord], None]] = None,
    ):
        """
        Create the machine, no day in progress.

        Args:
            clock (Callable[[], datetime]): Returns the current local
                date and time.
            sink (Optional[Callable[[TimeRecord], None]]): Receives each
                finished record before the machine leaves the day. If it
                raises, the time-out is not applied.
        """
        super().__init__(NotStarted())
        self._clock = clock
        self._sink = sink

    @property
    def sink(self) -> Optional[Callable[[TimeRecord], None]]:
        return self._sink

    @sink.setter
    def sink(self, sink: Optional[Callable[[TimeRecord], None]]):
        self._sink = sink

    @property
    def draft(self) -> Draft:
        return cast(Draft, self._state)

    @property
    def status(self) -> Status:
        return self.draft.status

    @property
    def enabled_actions(self) -> frozenset[PunchAction]:
        return self.draft.allowed_actions

    def is_enabled(self, action: PunchAction) -> bool:
        """
        Tell if the action is allowed in the current status.
        """
        return action in self.draft.allowed_actions

    def punch(self, action: PunchAction) -> Optional[TimeRecord]:
        """
        Punch an action at the current time.

        Returns:
            Optional[TimeRecord]: The finished record on time-out,
                `None` otherwise.

        Raises:
            IllegalTransitionError: The action is not allowed in the
                current status. Nothing changed.
            Exception: Any error raised by the sink on time-out. Nothing
                changed.
        """
        if not self.is_enabled(action):
            logger.warning(f"Rejected {action}, status is {self.status}.")
            raise IllegalTransitionError(action, self.status)

        # Records are kept to the second
        now = self._clock().replace(microsecond=0)
        event = PunchEvent(action, now)

        record = None
        if action is PunchAction.TIME_OUT:
            record = self.__complete(now.time())
            if self._sink:
                self._sink(record)

        self.dispatch(event)
        return record

    def __complete(self, time_out: dt.time) -> TimeRecord:
        """
        Build the finished record from the current draft.
        """
        draft = self.draft
        assert isinstance(draft, (Started, ResumedFromBreak))

        elapsed = worked_time(draft.date, draft.time_in, time_out, draft.break_period)

        anomaly = elapsed < dt.timedelta(0)
        if anomaly:
            logger.warning(
                f"Worked time computed negative ({elapsed}) for {draft.date}, "
                "clamped to zero."
            )
            elapsed = dt.timedelta(0)

        record = TimeRecord(
            date=draft.date,
            time_in=draft.time_in,
            time_out=time_out,
            total_hours=format_hours(elapsed),
            break_period=draft.break_period,
            clock_anomaly=anomaly,
        )
        logger.info(f"Day completed: {record}.")
        return record

    def on_state_changed(self, old_state: IStateBehavior, new_state: IStateBehavior):
        logger.debug(f"Draft changed from {old_state!r} to {new_state!r}.")
