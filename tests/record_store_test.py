#!/usr/bin/env python3
"""
File: record_store_test.py
Description:
    Unit test the records codec and the record store persistence.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import pytest
import logging
import json
import datetime as dt

# Internal libraries
from .test_constants import *
from .classes_mocks import FailingStorage
from core.record_store import RecordCodec, RecordStore
from core.storage import JsonFileStorage, MemoryStorage
from core.time_record import (
    BreakPeriod,
    CorruptPersistedDataError,
    StorageError,
    TimeRecord,
)

logger = logging.getLogger(__name__)

RECORD_WITH_BREAK = TimeRecord(
    date=TEST_DATE,
    time_in=dt.time(9),
    time_out=dt.time(17),
    total_hours="7.50",
    break_period=BreakPeriod(dt.time(12), dt.time(12, 30)),
)
RECORD_WITHOUT_BREAK = TimeRecord(
    date=dt.date(2025, 3, 3),
    time_in=dt.time(9),
    time_out=dt.time(13),
    total_hours="4.00",
)

########################################################################
#                             Records codec                            #
########################################################################


def test_decode_stored_records():
    """
    Decode records written with the default formats, single digit dates
    and hours included.
    """
    records = RecordCodec().decode(TEST_STORED_RECORDS)
    assert records == [RECORD_WITH_BREAK, RECORD_WITHOUT_BREAK]


def test_encode_fields():
    data = json.loads(RecordCodec().encode([RECORD_WITH_BREAK, RECORD_WITHOUT_BREAK]))
    assert data[0] == {
        "date": "01/15/2025",
        "timeIn": "09:00:00 AM",
        "breakOut": "12:00:00 PM",
        "breakIn": "12:30:00 PM",
        "timeOut": "05:00:00 PM",
        "totalHours": "7.50",
    }
    # No break fields and no anomaly flag when absent
    assert set(data[1]) == {"date", "timeIn", "timeOut", "totalHours"}


def test_codec_round_trip_with_anomaly():
    record = TimeRecord(
        TEST_DATE, dt.time(22, 5, 7), dt.time(1), "0.00", clock_anomaly=True
    )
    codec = RecordCodec("%Y-%m-%d", "%H:%M:%S")
    text = codec.encode([record])

    assert json.loads(text)[0]["clockAnomaly"] is True
    assert json.loads(text)[0]["date"] == "2025-01-15"
    assert codec.decode(text) == [record]


def test_decode_empty_list():
    assert RecordCodec().decode("[]") == []


def test_format_helpers():
    codec = RecordCodec()
    assert codec.format_date(TEST_DATE) == "01/15/2025"
    assert codec.format_time(dt.time(14, 5, 9)) == "02:05:09 PM"
    assert codec.format_time(None) == ""


def _entry(**changes) -> str:
    entry = {
        "date": "1/15/2025",
        "timeIn": "9:00:00 AM",
        "timeOut": "5:00:00 PM",
        "totalHours": "8.00",
    }
    entry.update(changes)
    entry = {key: value for key, value in entry.items() if value is not None}
    return json.dumps([entry])


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '{"date": "1/15/2025"}',
        "[42]",
        _entry(date=None),
        _entry(timeIn=""),
        _entry(timeOut=17),
        _entry(date="2025-01-15"),
        _entry(timeIn="25:00:00 AM"),
        _entry(breakOut="12:00:00 PM"),
        _entry(breakIn="12:30:00 PM"),
        _entry(totalHours="8"),
        _entry(totalHours="-1.00"),
        _entry(clockAnomaly="yes"),
    ],
)
def test_decode_corrupted(text: str):
    with pytest.raises(CorruptPersistedDataError):
        RecordCodec().decode(text)


########################################################################
#                             Record store                             #
########################################################################


def test_load_nothing_stored(storage: FailingStorage):
    store = RecordStore(storage)
    assert not store.loaded
    assert store.load_all() == ()
    assert store.loaded
    assert len(store) == 0


def test_load_stored_records():
    store = RecordStore(MemoryStorage({TEST_RECORDS_KEY: TEST_STORED_RECORDS}))
    assert store.load_all() == (RECORD_WITH_BREAK, RECORD_WITHOUT_BREAK)
    assert store.records == (RECORD_WITH_BREAK, RECORD_WITHOUT_BREAK)


def test_append_keeps_order(store: RecordStore, storage: FailingStorage):
    store.append(RECORD_WITHOUT_BREAK)
    store.append(RECORD_WITH_BREAK)

    assert store.records == (RECORD_WITHOUT_BREAK, RECORD_WITH_BREAK)
    assert storage.writes == 2
    # The whole list is persisted under the key
    stored = storage.read(TEST_RECORDS_KEY)
    assert stored is not None
    assert store.codec.decode(stored) == [RECORD_WITHOUT_BREAK, RECORD_WITH_BREAK]


def test_records_survive_restart(file_storage: JsonFileStorage):
    """
    Records appended by one store are loaded back by a new one.
    """
    store = RecordStore(file_storage)
    store.load_all()
    store.append(RECORD_WITH_BREAK)
    store.append(RECORD_WITHOUT_BREAK)

    restarted = RecordStore(JsonFileStorage(file_storage.directory))
    assert restarted.load_all() == (RECORD_WITH_BREAK, RECORD_WITHOUT_BREAK)


def test_failed_append_changes_nothing(store: RecordStore, storage: FailingStorage):
    store.append(RECORD_WITH_BREAK)
    stored = storage.read(TEST_RECORDS_KEY)

    storage.fail_writes = True
    with pytest.raises(StorageError):
        store.append(RECORD_WITHOUT_BREAK)

    assert store.records == (RECORD_WITH_BREAK,)
    assert storage.read(TEST_RECORDS_KEY) == stored


def test_corrupted_store_is_never_overwritten():
    """
    If the stored records cannot be decoded, the store refuses to write
    so the data can still be recovered by hand.
    """
    storage = FailingStorage({TEST_RECORDS_KEY: "[{broken"})
    store = RecordStore(storage)

    with pytest.raises(CorruptPersistedDataError):
        store.load_all()
    assert not store.loaded
    assert store.records == ()

    with pytest.raises(StorageError):
        store.append(RECORD_WITH_BREAK)
    assert storage.read(TEST_RECORDS_KEY) == "[{broken"
    assert storage.writes == 0


def test_append_before_load_refused(storage: FailingStorage):
    store = RecordStore(storage)
    with pytest.raises(StorageError):
        store.append(RECORD_WITH_BREAK)
    assert storage.read(TEST_RECORDS_KEY) is None


def test_reload_corrupted_refuses_append(store: RecordStore, storage: FailingStorage):
    """
    Records corrupted after a successful load are not overwritten by the
    records kept in memory.
    """
    store.append(RECORD_WITH_BREAK)
    storage.write(TEST_RECORDS_KEY, "[{broken")

    with pytest.raises(CorruptPersistedDataError):
        store.load_all()
    assert not store.loaded
    assert store.records == (RECORD_WITH_BREAK,)

    with pytest.raises(StorageError):
        store.append(RECORD_WITHOUT_BREAK)
    assert storage.read(TEST_RECORDS_KEY) == "[{broken"

    # Repaired by hand, the store accepts records again
    storage.write(TEST_RECORDS_KEY, "[]")
    store.load_all()
    store.append(RECORD_WITHOUT_BREAK)
    assert store.records == (RECORD_WITHOUT_BREAK,)


@pytest.mark.parametrize(
    "date_format, time_format",
    [
        ("%m/%d/%Y", "%H:%M"),
        ("%m/%d/%Y", "%I:%M:%S"),
        ("%m/%d", "%H:%M:%S"),
        ("%Y-%m", "%H:%M:%S"),
    ],
)
def test_lossy_formats_rejected(date_format: str, time_format: str):
    with pytest.raises(ValueError):
        RecordCodec(date_format, time_format)


@pytest.mark.parametrize(
    "date_format, time_format",
    [("%d.%m.%Y", "%H:%M:%S"), ("%Y-%m-%d", "%H%M%S"), ("%B %d, %Y", "%I:%M:%S %p")],
)
def test_lossless_formats_accepted(date_format: str, time_format: str):
    codec = RecordCodec(date_format, time_format)
    assert codec.decode(codec.encode([RECORD_WITH_BREAK])) == [RECORD_WITH_BREAK]
