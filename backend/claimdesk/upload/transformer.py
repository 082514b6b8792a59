"""
Row transformer — turns raw CSV rows into insert-ready ``claims`` records.

Given the parsed rows and the (possibly user-corrected) column mapping, each
row becomes one flat dict keyed by claims column names.  Values are coerced by
field category, empty cells are left out so the database column defaults
apply, and the NOT NULL columns always receive a value.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any

from claimdesk.upload.coercion import parse_currency, parse_milestone_flag
from claimdesk.upload.column_maps import (
    CLAIM_SYNONYMS,
    ColumnMapping,
    ColumnMappingEntry,
    map_columns,
)

logger = logging.getLogger(__name__)

AMOUNT_FIELDS: tuple[str, ...] = (
    "total_charged_amount",
    "insurance_paid",
    "insurance_adjustment",
    "patient_responsibility",
    "patient_paid_amount",
    "account_balance",
)

MILESTONE_FLAG_FIELDS: tuple[str, ...] = (
    "statement_mailed",
    "statement_two_mailed",
    "statement_three_mailed",
    "statement_paid",
)

DATE_FIELDS: tuple[str, ...] = (
    "service_date",
    "statement_created_date",
    "statement_sent_at",
    "statement_sent_2nd_at",
    "statement_sent_3rd_at",
)

TEXT_FIELDS: tuple[str, ...] = (
    "account_number",
    "patient_name",
    "cpt_hcpcs_code",
    "pharmacy_of_service",
    "rx_number",
    "billing_status",
    "payment_status",
    "workflow",
    "notes",
)

# Every claims column an import may write to.  The synonym table only ever
# produces a subset; the milestone flags are reachable through a manual
# mapping override.
TARGET_FIELDS: frozenset[str] = frozenset(
    AMOUNT_FIELDS + MILESTONE_FLAG_FIELDS + DATE_FIELDS + TEXT_FIELDS
)

UNKNOWN_PATIENT = "Unknown Patient"


def _today() -> str:
    return date.today().isoformat()


# Values may be constants or zero-arg callables evaluated per row.
REQUIRED_DEFAULTS: Mapping[str, Any] = MappingProxyType({
    "patient_name": UNKNOWN_PATIENT,
    "service_date": _today,
    **{field: 0 for field in AMOUNT_FIELDS},
})


class FieldKind(str, Enum):
    AMOUNT = "amount"
    MILESTONE_FLAG = "milestone_flag"
    DATE = "date"
    TEXT = "text"


def field_kind(target_field: str) -> FieldKind:
    """Classify a target column by how its cells must be coerced."""
    if target_field in AMOUNT_FIELDS:
        return FieldKind.AMOUNT
    if target_field in MILESTONE_FLAG_FIELDS:
        return FieldKind.MILESTONE_FLAG
    if target_field.endswith("_date") or target_field.endswith("_at"):
        return FieldKind.DATE
    return FieldKind.TEXT


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


class _Skip:
    pass


_SKIP = _Skip()


def coerce_cell(target_field: str, value: Any) -> Any:
    """Coerce one non-empty cell for *target_field*; ``_SKIP`` drops it."""
    kind = field_kind(target_field)
    if kind is FieldKind.AMOUNT:
        return parse_currency(value)
    if kind is FieldKind.MILESTONE_FLAG:
        flag = parse_milestone_flag(value)
        if flag is None:
            logger.warning("Skipping non-boolean value %r for field %s", value, target_field)
            return _SKIP
        return flag
    if kind is FieldKind.DATE:
        return value
    return value if isinstance(value, str) else str(value)


def _validate_mapping(mapping: Iterable[ColumnMappingEntry]) -> list[ColumnMappingEntry]:
    if isinstance(mapping, (str, bytes)) or not isinstance(mapping, Iterable):
        raise TypeError(f"mapping must be a sequence of ColumnMappingEntry, got {type(mapping).__name__}")
    entries = list(mapping)
    for entry in entries:
        if not isinstance(entry, ColumnMappingEntry):
            raise TypeError(f"mapping entries must be ColumnMappingEntry, got {type(entry).__name__}")
    return entries


class ClaimRowMapper:
    """
    Column mapper + row transformer bound to one synonym table and one
    required-default policy.

    The module-level :func:`map_columns` / :func:`transform_rows` use the
    stock configuration; build an instance to swap either table.
    """

    def __init__(
        self,
        synonyms: Mapping[str, str] | None = None,
        required_defaults: Mapping[str, Any] | None = None,
    ):
        self.synonyms = MappingProxyType(dict(synonyms if synonyms is not None else CLAIM_SYNONYMS))
        self.required_defaults = MappingProxyType(
            dict(required_defaults if required_defaults is not None else REQUIRED_DEFAULTS)
        )

    def map_columns(self, headers: Iterable[str]) -> ColumnMapping:
        return map_columns(headers, self.synonyms)

    def apply_required_defaults(self, record: dict[str, Any]) -> None:
        for field, default in self.required_defaults.items():
            if record.get(field) is None:
                record[field] = default() if callable(default) else default

    def transform_row(self, row: Mapping[str, Any], mapping: list[ColumnMappingEntry]) -> dict[str, Any]:
        if not isinstance(row, Mapping):
            raise TypeError(f"rows must contain mappings, got {type(row).__name__}")

        record: dict[str, Any] = {}
        for entry in mapping:
            if not entry.is_mapped:
                continue
            value = row.get(entry.source_column)
            if _is_empty(value):
                continue
            coerced = coerce_cell(entry.target_field, value)
            if coerced is _SKIP:
                continue
            record[entry.target_field] = coerced

        self.apply_required_defaults(record)
        return record

    def iter_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        mapping: Iterable[ColumnMappingEntry],
    ) -> Iterator[dict[str, Any]]:
        """Transform rows lazily, one record per input row."""
        if isinstance(rows, (str, bytes)) or not isinstance(rows, Iterable):
            raise TypeError(f"rows must be an iterable of mappings, got {type(rows).__name__}")
        entries = _validate_mapping(mapping)
        mapped = [e for e in entries if e.is_mapped]
        logger.debug(
            "Column mappings: %s",
            {e.source_column: e.target_field for e in mapped},
        )
        for row in rows:
            yield self.transform_row(row, entries)

    def transform_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        mapping: Iterable[ColumnMappingEntry],
    ) -> list[dict[str, Any]]:
        return list(self.iter_rows(rows, mapping))


default_mapper = ClaimRowMapper()


def transform_rows(
    rows: Iterable[Mapping[str, Any]],
    mapping: Iterable[ColumnMappingEntry],
) -> list[dict[str, Any]]:
    """Transform parsed CSV rows into claims records using *mapping*."""
    return default_mapper.transform_rows(rows, mapping)


def iter_transformed_rows(
    rows: Iterable[Mapping[str, Any]],
    mapping: Iterable[ColumnMappingEntry],
) -> Iterator[dict[str, Any]]:
    return default_mapper.iter_rows(rows, mapping)
