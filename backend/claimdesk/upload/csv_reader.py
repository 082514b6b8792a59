"""
CSV reading for claim imports — decode, size-check and split an uploaded file
into its header row and keyed data rows.
"""

import csv
import io
import logging
from dataclasses import dataclass, field

from claimdesk.config import settings

logger = logging.getLogger(__name__)


class CSVFormatError(ValueError):
    """The uploaded file cannot be read as a CSV at all."""


@dataclass
class ParsedCSV:
    headers: list[str]
    rows: list[dict[str, str | None]] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.rows)


def _decode(file_content: bytes) -> str:
    max_bytes = settings.max_csv_size_mb * 1024 * 1024
    if len(file_content) > max_bytes:
        raise CSVFormatError(
            f"File size ({len(file_content) / 1024 / 1024:.1f} MB) exceeds maximum "
            f"({settings.max_csv_size_mb} MB)"
        )
    try:
        return file_content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise CSVFormatError("File contains binary content and is not a valid UTF-8 CSV")


def _is_blank(row: list[str]) -> bool:
    return all(not cell.strip() for cell in row)


def _unique_headers(raw_headers: list[str]) -> list[str]:
    """Suffix repeated header text (``Paid``, ``Paid_1``) so every column keeps its data."""
    seen: set[str] = set()
    headers: list[str] = []
    for header in raw_headers:
        candidate = header
        n = 1
        while candidate in seen:
            candidate = f"{header}_{n}"
            n += 1
        seen.add(candidate)
        headers.append(candidate)
    return headers


def parse_csv(file_content: bytes) -> ParsedCSV:
    """
    Parse an uploaded CSV into headers + rows keyed by header text.

    Blank lines are skipped.  Cells beyond the header width are dropped and
    missing trailing cells come back as ``None``.  Repeated header names get a
    numeric suffix.
    """
    text = _decode(file_content)
    reader = csv.reader(io.StringIO(text))
    try:
        raw_headers = next(reader, None)
    except csv.Error as e:
        raise CSVFormatError(f"Could not read CSV header: {e}")
    if not raw_headers:
        raise CSVFormatError("CSV file is empty (no header row)")
    if len(raw_headers) > settings.max_csv_columns:
        raise CSVFormatError(
            f"CSV has {len(raw_headers)} columns, maximum is {settings.max_csv_columns}"
        )
    headers = _unique_headers(raw_headers)
    if headers != raw_headers:
        logger.warning("Renamed duplicate CSV headers: %s", headers)

    width = len(headers)
    rows: list[dict[str, str | None]] = []
    try:
        for cells in reader:
            if _is_blank(cells):
                continue
            cells = cells[:width]
            rows.append({
                header: cells[i] if i < len(cells) else None
                for i, header in enumerate(headers)
            })
            if len(rows) > settings.max_csv_rows:
                raise CSVFormatError(f"CSV has more than {settings.max_csv_rows:,} rows")
    except csv.Error as e:
        raise CSVFormatError(f"Malformed CSV near line {reader.line_num}: {e}")

    logger.debug("Parsed CSV: %d columns, %d rows", width, len(rows))
    return ParsedCSV(headers=headers, rows=rows)
