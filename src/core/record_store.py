#!/usr/bin/env python3
"""
File: record_store.py
Description:
    The record store holds the append-only list of finished time records
    and persists it in a key-value storage.

    The whole list is saved under a single key as a JSON array. Each
    record is an object using the field names `date`, `timeIn`,
    `breakOut`, `breakIn`, `timeOut` and `totalHours`. Dates and times
    are written as text with configurable `strftime` formats. The break
    fields are omitted when no break was taken, and `clockAnomaly` is
    only written for flagged records.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import json
import re
import datetime as dt
from typing import Any, Iterable, Optional

# Internal libraries
from core.storage import KeyValueStorage
from core.time_record import (
    BreakPeriod,
    CorruptPersistedDataError,
    StorageError,
    TimeRecord,
)

__all__ = ["RecordStore", "RecordCodec", "RECORDS_KEY"]

logger = logging.getLogger(__name__)

# Default storage key of the records list
RECORDS_KEY = "timeRecords"

# Default text formats, which also read the US locale strings
DEFAULT_DATE_FORMAT = "%m/%d/%Y"
DEFAULT_TIME_FORMAT = "%I:%M:%S %p"

_TOTAL_HOURS_PATTERN = re.compile(r"^\d+\.\d{2}$")
# Sample written and read back to check the formats are lossless
_FORMAT_SAMPLE = dt.datetime(2025, 12, 31, 23, 59, 58)


class RecordCodec:
    """
    Converts a records list to its JSON text and back.
    """

    def __init__(
        self,
        date_format: str = DEFAULT_DATE_FORMAT,
        time_format: str = DEFAULT_TIME_FORMAT,
    ):
        """
        Raises:
            ValueError: A format cannot be read back to the same date or
                time to the second.
        """
        self._date_format = date_format
        self._time_format = time_format
        self.__check_formats()

    def __check_formats(self):
        try:
            date = dt.datetime.strptime(
                self.format_date(_FORMAT_SAMPLE.date()), self._date_format
            )
            time = dt.datetime.strptime(
                self.format_time(_FORMAT_SAMPLE.time()), self._time_format
            )
        except ValueError as e:
            raise ValueError(f"Record formats cannot be read back: {e}.") from e

        if date.date() != _FORMAT_SAMPLE.date():
            raise ValueError(f"Date format '{self._date_format}' loses the date.")
        if time.time() != _FORMAT_SAMPLE.time():
            raise ValueError(
                f"Time format '{self._time_format}' loses the time, the seconds "
                "and the AM/PM marker must be kept."
            )

    @property
    def date_format(self) -> str:
        return self._date_format

    @property
    def time_format(self) -> str:
        return self._time_format

    def format_date(self, date: dt.date) -> str:
        return date.strftime(self._date_format)

    def format_time(self, time: Optional[dt.time]) -> str:
        return time.strftime(self._time_format) if time is not None else ""

    def encode(self, records: Iterable[TimeRecord]) -> str:
        return json.dumps([self.__to_dict(record) for record in records], indent=2)

    def __to_dict(self, record: TimeRecord) -> dict[str, Any]:
        data: dict[str, Any] = {
            "date": self.format_date(record.date),
            "timeIn": self.format_time(record.time_in),
        }
        if record.break_period:
            data["breakOut"] = self.format_time(record.break_period.start)
            data["breakIn"] = self.format_time(record.break_period.end)
        data["timeOut"] = self.format_time(record.time_out)
        data["totalHours"] = record.total_hours
        if record.clock_anomaly:
            data["clockAnomaly"] = True
        return data

    def decode(self, text: str) -> list[TimeRecord]:
        """
        Decode a records list.

        Raises:
            CorruptPersistedDataError: The text is not a valid records
                list. No partial result is returned.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptPersistedDataError(f"Records are not valid JSON: {e}.") from e

        if not isinstance(data, list):
            raise CorruptPersistedDataError(
                f"Records must be a JSON array, got '{type(data).__name__}'."
            )

        return [self.__from_dict(index, entry) for index, entry in enumerate(data)]

    def __from_dict(self, index: int, entry: Any) -> TimeRecord:
        """
        Decode the record at the given position of the list.
        """
        if not isinstance(entry, dict):
            raise CorruptPersistedDataError(f"Record {index} is not an object.")

        def field(name: str, required: bool = True) -> Optional[str]:
            value = entry.get(name)
            if value is None or value == "":
                if required:
                    raise CorruptPersistedDataError(
                        f"Record {index} misses the '{name}' field."
                    )
                return None
            if not isinstance(value, str):
                raise CorruptPersistedDataError(
                    f"Field '{name}' of record {index} must be a string."
                )
            return value

        def parse(name: str, value: str, fmt: str) -> dt.datetime:
            try:
                return dt.datetime.strptime(value, fmt)
            except ValueError as e:
                raise CorruptPersistedDataError(
                    f"Field '{name}' of record {index} doesn't match '{fmt}': '{value}'."
                ) from e

        def parse_time(name: str, required: bool = True) -> Optional[dt.time]:
            value = field(name, required)
            return parse(name, value, self._time_format).time() if value else None

        date = parse("date", field("date") or "", self._date_format).date()
        time_in = parse_time("timeIn")
        time_out = parse_time("timeOut")
        break_out = parse_time("breakOut", required=False)
        break_in = parse_time("breakIn", required=False)
        assert time_in is not None and time_out is not None

        if (break_out is None) != (break_in is None):
            raise CorruptPersistedDataError(
                f"Record {index} has an unclosed break, both 'breakOut' and "
                "'breakIn' are expected."
            )

        total_hours = field("totalHours") or ""
        if not _TOTAL_HOURS_PATTERN.match(total_hours):
            raise CorruptPersistedDataError(
                f"Field 'totalHours' of record {index} is not a two decimals "
                f"number: '{total_hours}'."
            )

        anomaly = entry.get("clockAnomaly", False)
        if not isinstance(anomaly, bool):
            raise CorruptPersistedDataError(
                f"Field 'clockAnomaly' of record {index} must be a boolean."
            )

        return TimeRecord(
            date=date,
            time_in=time_in,
            time_out=time_out,
            total_hours=total_hours,
            break_period=(
                BreakPeriod(break_out, break_in)
                if break_out is not None and break_in is not None
                else None
            ),
            clock_anomaly=anomaly,
        )


class RecordStore:
    """
    Append-only list of finished records, kept in creation order.

    The in-memory list always reflects what has been durably stored: it
    is updated only once the storage write succeeded.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        codec: Optional[RecordCodec] = None,
        key: str = RECORDS_KEY,
    ):
        self._storage = storage
        self._codec = codec or RecordCodec()
        self._key = key
        self._records: tuple[TimeRecord, ...] = ()
        self._loaded = False

    @property
    def codec(self) -> RecordCodec:
        return self._codec

    @property
    def records(self) -> tuple[TimeRecord, ...]:
        return self._records

    @property
    def loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._records)

    def load_all(self) -> tuple[TimeRecord, ...]:
        """
        Restore the records from the storage. The store is empty if
        nothing was stored yet.

        Raises:
            StorageError: The storage failed to read.
            CorruptPersistedDataError: The stored records cannot be
                decoded. The in-memory list is left unchanged and
                appending is refused until a load succeeds.
        """
        text = self._storage.read(self._key)
        if text is None:
            logger.info(f"No records stored under '{self._key}', starting empty.")
            self._records = ()
            self._loaded = True
            return self._records

        try:
            self._records = tuple(self._codec.decode(text))
        except CorruptPersistedDataError:
            # Never overwrite stored records that could not be read
            self._loaded = False
            raise

        self._loaded = True
        logger.info(f"Loaded {len(self._records)} record(s) from '{self._key}'.")
        return self._records

    def append(self, record: TimeRecord) -> None:
        """
        Add a record at the end of the list and persist the whole list.

        Raises:
            StorageError: The storage failed to write or the records have
                not been loaded yet. The record is not added.
        """
        # Never overwrite stored records that could not be read
        if not self._loaded:
            raise StorageError("Records must be loaded before appending.")

        updated = self._records + (record,)
        self._storage.write(self._key, self._codec.encode(updated))
        self._records = updated
        logger.info(f"Record saved, {len(updated)} record(s) stored.")
