#!/usr/bin/env python3
"""
File: records_exporter_test.py
Description:
    Unit test the records export to Excel workbooks.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import pytest
from pytest import approx
import logging
import datetime as dt
from pathlib import Path

# Third-party libraries
import openpyxl

# Internal libraries
from .test_constants import *
from core.records_exporter import HEADERS, NO_BREAK, RecordsExporter
from core.record_store import RecordCodec
from core.time_record import BreakPeriod, StorageError, TimeRecord

logger = logging.getLogger(__name__)

RECORDS = [
    TimeRecord(
        TEST_DATE,
        dt.time(9),
        dt.time(17),
        "7.50",
        BreakPeriod(dt.time(12), dt.time(12, 30)),
    ),
    TimeRecord(dt.date(2025, 3, 3), dt.time(9), dt.time(13), "4.00"),
]


def _rows(path: Path) -> list[tuple]:
    workbook = openpyxl.load_workbook(path)
    sheet = workbook["Records"]
    return [tuple(row) for row in sheet.iter_rows(values_only=True)]


def test_default_path(exporter: RecordsExporter, tmp_path: Path):
    assert exporter.default_path() == tmp_path / "exports" / "dtr-20250115-090000.xlsx"


def test_export_records(exporter: RecordsExporter):
    path = exporter.export(RECORDS, subtitle="All months")

    assert path.exists()
    rows = _rows(path)
    assert rows[0][0] == "Test Record - All months"
    assert rows[1] == HEADERS
    assert rows[2][:5] == (
        "01/15/2025",
        "09:00:00 AM",
        "12:00:00 PM",
        "12:30:00 PM",
        "05:00:00 PM",
    )
    assert rows[2][5] == approx(7.5)
    assert rows[3][2:4] == (NO_BREAK, NO_BREAK)
    assert rows[3][5] == approx(4.0)
    assert rows[4][0] == "Total"
    assert rows[4][5] == approx(11.5)
    assert len(rows) == 5


def test_export_empty(exporter: RecordsExporter, tmp_path: Path):
    path = exporter.export([], tmp_path / "empty.xlsx")

    assert path == tmp_path / "empty.xlsx"
    rows = _rows(path)
    assert rows[0][0] == "Test Record"
    assert rows[2][0] == "Total"
    assert rows[2][5] == approx(0.0)


def test_export_uses_codec_formats(tmp_path: Path):
    exporter = RecordsExporter(tmp_path, codec=RecordCodec("%Y-%m-%d", "%H:%M:%S"))
    rows = _rows(exporter.export(RECORDS[:1], tmp_path / "iso.xlsx"))
    assert rows[0][0] == "Daily Time Record"
    assert rows[2][:5] == ("2025-01-15", "09:00:00", "12:00:00", "12:30:00", "17:00:00")


def test_export_failure_raises(exporter: RecordsExporter, tmp_path: Path):
    # A directory is in place of the target file
    target = tmp_path / "taken.xlsx"
    target.mkdir()
    with pytest.raises(StorageError):
        exporter.export(RECORDS, target)
