"""Spreadsheet ingestion service."""

from __future__ import annotations

import csv
import io
import logging
import zipfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..core import ParseFault, SheetData
from ..utils import detect_encoding

logger = logging.getLogger(__name__)

XLSX_ERRORS = (
    InvalidFileException,
    zipfile.BadZipFile,
    ET.ParseError,
    IndexError,
    KeyError,
    OSError,
    ValueError,
)


class SheetReader:
    """Load CSV or XLSX spreadsheets into rows of named cell values.

    Blank cells are left out of each row, so a row only carries the columns
    it actually has a value for. The header row fixes the column order.
    """

    SUPPORTED_EXTENSIONS: Sequence[str] = ("csv", "xlsx")

    def __init__(self, *, encoding: str | None = None):
        self.encoding = encoding or "auto"

    def load(self, source: Path | str | bytes, filename: str | None = None) -> SheetData:
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise ParseFault(f"Spreadsheet not found: {path}")
            raw = path.read_bytes()
            filename = filename or path.name
        else:
            raw = source
            filename = filename or ""

        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if extension not in self.SUPPORTED_EXTENSIONS:
            raise ParseFault(
                "Unsupported spreadsheet type",
                details={"filename": filename, "supported": list(self.SUPPORTED_EXTENSIONS)},
            )

        if extension == "xlsx":
            header, records = self._read_xlsx(raw, filename)
        else:
            header, records = self._read_csv(raw, filename)

        columns = _dedupe_headers(header)
        rows = [row for row in (_build_row(columns, record) for record in records) if row]
        logger.info("Loaded %s: %d rows, %d columns", filename, len(rows), len(columns))
        return SheetData(rows=rows, columns=[c for c in columns if c], source_name=filename)

    def _read_csv(self, raw: bytes, filename: str) -> tuple[list, list[list]]:
        encoding = self.encoding
        if encoding == "auto":
            encoding = detect_encoding(raw)

        try:
            # undecodable bytes become U+FFFD rather than failing the upload
            text = raw.decode(encoding, errors="replace")
            reader = csv.reader(io.StringIO(text, newline=""))
            header = next(reader, None)
            records = list(reader)
        except (LookupError, csv.Error) as exc:
            raise ParseFault(
                "Error reading spreadsheet", details={"filename": filename, "reason": str(exc)}
            ) from exc

        if not header:
            raise ParseFault("Spreadsheet must contain a header row", details={"filename": filename})
        return header, records

    def _read_xlsx(self, raw: bytes, filename: str) -> tuple[list, list[list]]:
        # read-only workbooks parse sheet XML lazily, so rows can fail too
        try:
            workbook = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
            try:
                worksheet = workbook.worksheets[0]
                values = worksheet.iter_rows(values_only=True)
                header = next(values, None)
                records = [list(record) for record in values]
            finally:
                workbook.close()
        except XLSX_ERRORS as exc:
            raise ParseFault(
                "Error reading spreadsheet", details={"filename": filename, "reason": str(exc)}
            ) from exc

        if not header or all(cell is None for cell in header):
            raise ParseFault("Spreadsheet must contain a header row", details={"filename": filename})
        return list(header), records


def _dedupe_headers(header: Sequence[object]) -> list[str]:
    """Name header cells, suffixing repeats with ``_1``, ``_2``..."""

    taken = {str(cell).strip() for cell in header if cell is not None}
    counters: dict[str, int] = {}
    used: set[str] = set()
    columns: list[str] = []
    for cell in header:
        name = "" if cell is None else str(cell).strip()
        if not name:
            columns.append("")
            continue
        if name in used:
            base = name
            while name in used or name in taken:
                counters[base] = counters.get(base, 0) + 1
                name = f"{base}_{counters[base]}"
        used.add(name)
        columns.append(name)
    return columns


def _build_row(columns: Sequence[str], record: Sequence[object]) -> dict:
    row = {}
    for column, value in zip(columns, record):
        if not column or value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        row[column] = value
    return row
