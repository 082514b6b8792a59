"""
Import inputs.  Callers state up front what they are handing over: a parsed
CSV that still needs mapping and coercion, or records already shaped like
``claims`` rows.
"""

from dataclasses import dataclass
from typing import Any, Union

from claimdesk.upload.column_maps import ColumnMapping
from claimdesk.upload.csv_reader import ParsedCSV


@dataclass(frozen=True)
class RawCsvImport:
    parsed: ParsedCSV
    mapping: ColumnMapping
    file_name: str | None = None


@dataclass(frozen=True)
class StorageRowsImport:
    records: list[dict[str, Any]]
    file_name: str | None = None


ImportSource = Union[RawCsvImport, StorageRowsImport]
