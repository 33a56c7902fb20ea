#!/usr/bin/env python3
"""
File: dtr_viewmodel.py
Description:
    The ViewModel serves as the intermediary between the view and the
    core modules. It forwards the punch actions to the punch state
    machine, saves the finished records in the record store and
    publishes everything the view displays as observable live data:
    the punch status, the enabled actions, the records, the month and
    week options and the filtered records.

    Core errors never leave the viewmodel as exceptions during normal
    use. They are logged and turned into user notifications through the
    `message` live data.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import calendar
from pathlib import Path
from typing import Callable, Optional

# Internal libraries
from common.live_data import LiveData  # For view communication
from common.translations import untranslated
from core.punch_machine import PunchStateMachine
from core.record_store import RecordCodec, RecordStore
from core.records_exporter import RecordsExporter
from core.record_filter import (
    FilterSelection,
    available_months,
    available_weeks,
    month_name,
)
from core.time_record import (
    CorruptPersistedDataError,
    DTRException,
    IllegalTransitionError,
    PunchAction,
    Status,
    StorageError,
    TimeRecord,
)

__all__ = ["DTRViewModel"]

logger = logging.getLogger(__name__)

# Translation function signature, message ID and placeholders values
Translate = Callable[..., str]

# Message IDs of the actions and status, for the view labels
ACTION_LABELS = {
    PunchAction.TIME_IN: "Time In",
    PunchAction.BREAK_OUT: "Break Out",
    PunchAction.BREAK_IN: "Break In",
    PunchAction.TIME_OUT: "Time Out",
}
STATUS_LABELS = {
    Status.OUT: "Not working",
    Status.IN: "Working",
    Status.BREAK: "On break",
}


class DTRViewModel:
    """
    Application viewmodel.
    """

    def __init__(
        self,
        machine: PunchStateMachine,
        store: RecordStore,
        first_weekday: int = calendar.SUNDAY,
        exporter: Optional[RecordsExporter] = None,
        translate: Translate = untranslated,
    ):
        """
        Create the viewmodel. The record store becomes the sink of the
        punch machine, so each finished day is saved before the machine
        leaves it.

        Args:
            machine (PunchStateMachine): Punch state machine to drive.
            store (RecordStore): Store of the finished records.
            first_weekday (int): First day of the week, as a `calendar`
                weekday constant, used to number the weeks.
            exporter (Optional[RecordsExporter]): Export service, the
                export is unavailable if not provided.
            translate (Translate): Translation function of the user
                notifications.
        """
        self._machine = machine
        self._store = store
        self._first_weekday = first_weekday
        self._exporter = exporter
        self._tr = translate

        self._machine.sink = self._store.append

        # Live data are observed by the view
        self._status = LiveData[Status](machine.status)
        self._enabled_actions = LiveData[frozenset[PunchAction]](
            machine.enabled_actions
        )
        self._records = LiveData[tuple[TimeRecord, ...]](store.records)
        self._filtered_records = LiveData[tuple[TimeRecord, ...]](store.records)
        self._months = LiveData[tuple[int, ...]](())
        self._weeks = LiveData[tuple[int, ...]](())
        self._selection = LiveData[FilterSelection](FilterSelection())
        # Notifications are events, repeat them even if equal
        self._message = LiveData[str]("", bus_mode=True)

        self.__refresh_records()

    ### Get UI information as observables ###

    @property
    def status(self) -> LiveData[Status]:
        return self._status

    @property
    def enabled_actions(self) -> LiveData[frozenset[PunchAction]]:
        return self._enabled_actions

    @property
    def records(self) -> LiveData[tuple[TimeRecord, ...]]:
        """
        All records, in creation order.
        """
        return self._records

    @property
    def filtered_records(self) -> LiveData[tuple[TimeRecord, ...]]:
        """
        Records matching the current month and week selection.
        """
        return self._filtered_records

    @property
    def months(self) -> LiveData[tuple[int, ...]]:
        """
        Sorted 0-based months in which records exist.
        """
        return self._months

    @property
    def weeks(self) -> LiveData[tuple[int, ...]]:
        """
        Sorted week numbers in which records exist for the selected
        month, empty without a selected month.
        """
        return self._weeks

    @property
    def selection(self) -> LiveData[FilterSelection]:
        return self._selection

    @property
    def message(self) -> LiveData[str]:
        """
        User notifications.
        """
        return self._message

    @property
    def codec(self) -> RecordCodec:
        return self._store.codec

    ### Labels ###

    def action_label(self, action: PunchAction) -> str:
        return self._tr(ACTION_LABELS[action])

    def status_label(self, status: Status) -> str:
        return self._tr(STATUS_LABELS[status])

    def month_label(self, month: Optional[int]) -> str:
        if month is None:
            return self._tr("All months")
        return month_name(month)

    def week_label(self, week: Optional[int]) -> str:
        if week is None:
            return self._tr("All weeks")
        return self._tr("Week {week}", week=week)

    def period_label(self) -> str:
        """
        Describe the selected period, e.g. "March, Week 2".
        """
        selection = self._selection.value
        if selection.month is None:
            return self.month_label(None)
        if selection.week is None:
            return self.month_label(selection.month)
        return f"{self.month_label(selection.month)}, {self.week_label(selection.week)}"

    ### User actions ###

    def load(self):
        """
        Restore the stored records.

        Raises:
            CorruptPersistedDataError: The stored records cannot be
                decoded. Nothing is loaded, to avoid overwriting them.
            StorageError: The storage cannot be read.
        """
        try:
            self._store.load_all()
        except CorruptPersistedDataError as e:
            logger.error(f"Stored records are corrupted: {e}")
            self._message.value = self._tr("Stored records are corrupted: {error}", error=e)
            raise
        except StorageError as e:
            logger.error(f"Unable to read the stored records: {e}")
            self._message.value = self._tr("Unable to read the records: {error}", error=e)
            raise

        self.__refresh_records()

    def is_enabled(self, action: PunchAction) -> bool:
        return self._machine.is_enabled(action)

    def punch(self, action: PunchAction) -> bool:
        """
        Punch an action at the current time. A time-out saves the
        finished day.

        Returns:
            bool: `True` if the action has been applied, `False` if it
                was not allowed or the day could not be saved.
        """
        try:
            record = self._machine.punch(action)

        except IllegalTransitionError as e:
            self._message.value = self._tr(
                "{action} is not allowed now.", action=self.action_label(e.action)
            )
            return False

        except StorageError as e:
            logger.error(f"Unable to save the finished day: {e}")
            self._message.value = self._tr(
                "The day could not be saved, please retry: {error}", error=e
            )
            return False

        logger.info(f"Punched {action}, status is now {self._machine.status}.")
        self._status.value = self._machine.status
        self._enabled_actions.value = self._machine.enabled_actions

        if record:
            self.__refresh_records()
            if record.clock_anomaly:
                self._message.value = self._tr(
                    "The time-out precedes the time-in, the day is saved with 0.00 hours."
                )
            else:
                self._message.value = self._tr(
                    "Day saved: {hours} hours worked.", hours=record.total_hours
                )

        return True

    def select_month(self, month: Optional[int]):
        """
        Select a 0-based month, or `None` for all months. The week
        selection is always cleared.
        """
        self._selection.value = self._selection.value.with_month(month)
        self.__apply_selection()

    def select_week(self, week: Optional[int]) -> bool:
        """
        Select a week of the selected month, or `None` for all weeks.

        Returns:
            bool: `False` if no month is selected or the week number is
                invalid, the selection is then unchanged.
        """
        try:
            selection = self._selection.value.with_week(week)
        except ValueError as e:
            logger.warning(f"Week selection rejected: {e}")
            return False

        self._selection.value = selection
        self.__apply_selection()
        return True

    def export(self, path: Optional[str | Path] = None) -> Optional[Path]:
        """
        Export the filtered records to a workbook.

        Returns:
            Optional[Path]: The workbook path, `None` on failure.
        """
        if not self._exporter:
            logger.warning("Export requested but no exporter is configured.")
            self._message.value = self._tr("Export is not available.")
            return None

        try:
            target = self._exporter.export(
                self._filtered_records.value, path, subtitle=self.period_label()
            )
        except DTRException as e:
            logger.error(f"Export failed: {e}")
            self._message.value = self._tr("Export failed: {error}", error=e)
            return None

        self._message.value = self._tr("Records exported to {path}.", path=target)
        return target

    def close(self):
        """
        Close the viewmodel. A day still in progress is not saved.
        """
        if self._machine.status is not Status.OUT:
            logger.warning(
                f"Closing while the status is {self._machine.status}, "
                "the day in progress is lost."
            )
        logger.info("Viewmodel closed.")

    ### Internal helpers ###

    def __refresh_records(self):
        """
        Publish the records and the derived options after a change.
        """
        records = self._store.records
        self._records.value = records
        self._months.value = tuple(sorted(available_months(records)))

        # Keep the selection while its month still exists
        selection = self._selection.value
        if selection.month is not None and selection.month not in self._months.value:
            self._selection.value = FilterSelection()
        self.__apply_selection()

    def __apply_selection(self):
        """
        Publish the week options and the filtered records for the
        current selection.
        """
        records = self._store.records
        selection = self._selection.value
        self._weeks.value = tuple(
            sorted(available_weeks(records, selection.month, self._first_weekday))
        )
        self._filtered_records.value = tuple(
            selection.apply(records, self._first_weekday)
        )
