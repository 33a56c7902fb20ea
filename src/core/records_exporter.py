#!/usr/bin/env python3
"""
File: records_exporter.py
Description:
    Export a records table to an Excel workbook (.xlsx) for printing or
    archiving.

    The sheet starts with a title row, followed by the header row, one
    row per record and a final row with the hours total. Dates and times
    are written as text with the same formats as the stored records.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import datetime as dt
from decimal import Decimal
from pathlib import Path
from typing import Callable, Iterable, Optional

# Third-party libraries
import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

# Internal libraries
from core.record_store import RecordCodec
from core.time_record import StorageError, TimeRecord

logger = logging.getLogger(__name__)

# Columns of the records table
HEADERS = ("Date", "Time In", "Break Out", "Break In", "Time Out", "Total Hours")
# Column widths in characters
_COLUMN_WIDTHS = (14, 14, 14, 14, 14, 13)
# Text of a missing break
NO_BREAK = "-"

_HEADER_FILL = PatternFill("solid", start_color="F5F5F7", end_color="F5F5F7")
_THIN = Side(style="thin", color="C7CCD6")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


class RecordsExporter:
    """
    Writes records tables into workbooks saved under a directory.
    """

    def __init__(
        self,
        directory: str | Path,
        title: str = "Daily Time Record",
        codec: Optional[RecordCodec] = None,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
    ):
        """
        Args:
            directory (str | Path): Folder of the exported workbooks,
                created if missing.
            title (str): Title written on the first row.
            codec (Optional[RecordCodec]): Provides the date and time
                formats.
            clock (Callable[[], datetime]): Used to name the files.
        """
        self._directory = Path(directory)
        self._title = title
        self._codec = codec or RecordCodec()
        self._clock = clock

    def default_path(self) -> Path:
        return self._directory / f"dtr-{self._clock():%Y%m%d-%H%M%S}.xlsx"

    def export(
        self,
        records: Iterable[TimeRecord],
        path: Optional[str | Path] = None,
        subtitle: str = "",
    ) -> Path:
        """
        Write the records to a new workbook.

        Args:
            records (Iterable[TimeRecord]): Records in display order.
            path (Optional[str | Path]): Target file, a timestamped name
                under the export directory by default.
            subtitle (str): Optional text appended to the title, such as
                the selected period.

        Returns:
            Path: Path of the saved workbook.

        Raises:
            StorageError: The workbook cannot be saved.
        """
        target = Path(path) if path else self.default_path()

        workbook = openpyxl.Workbook()
        sheet = workbook.active
        assert sheet is not None
        sheet.title = "Records"

        title = f"{self._title} - {subtitle}" if subtitle else self._title
        sheet.append([title])
        sheet.merge_cells(
            start_row=1, start_column=1, end_row=1, end_column=len(HEADERS)
        )
        sheet["A1"].font = Font(bold=True, size=14)
        sheet["A1"].alignment = Alignment(horizontal="center")

        sheet.append(list(HEADERS))
        for cell in sheet[2]:
            cell.font = Font(bold=True)
            cell.fill = _HEADER_FILL
            cell.border = _BORDER

        total = Decimal(0)
        count = 0
        for record in records:
            sheet.append(
                [
                    self._codec.format_date(record.date),
                    self._codec.format_time(record.time_in),
                    self._codec.format_time(record.break_out) or NO_BREAK,
                    self._codec.format_time(record.break_in) or NO_BREAK,
                    self._codec.format_time(record.time_out),
                    float(record.total_hours),
                ]
            )
            for cell in sheet[sheet.max_row]:
                cell.border = _BORDER
            sheet.cell(row=sheet.max_row, column=len(HEADERS)).number_format = "0.00"
            total += Decimal(record.total_hours)
            count += 1

        sheet.append(["Total", "", "", "", "", float(total)])
        total_row = sheet[sheet.max_row]
        for cell in total_row:
            cell.font = Font(bold=True)
            cell.border = _BORDER
        total_row[-1].number_format = "0.00"

        for column, width in enumerate(_COLUMN_WIDTHS, start=1):
            sheet.column_dimensions[get_column_letter(column)].width = width
        sheet.freeze_panes = "A3"

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(target)
        except OSError as e:
            raise StorageError(f"Unable to save the export '{target}'.") from e

        logger.info(f"Exported {count} record(s) ({total} h) to '{target}'.")
        return target
