"""
Import Service — preview a CSV's column mapping, then transform and ingest it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.config import settings
from claimdesk.models import CsvUpload
from claimdesk.services.claim_store import ClaimRecordError, ClaimStore
from claimdesk.upload.column_maps import UNMAPPED, ColumnMapping, ColumnMappingEntry
from claimdesk.upload.csv_reader import ParsedCSV, parse_csv
from claimdesk.upload.sources import ImportSource, RawCsvImport, StorageRowsImport
from claimdesk.upload.transformer import TARGET_FIELDS, ClaimRowMapper, default_mapper

logger = logging.getLogger(__name__)


class MappingOverrideError(ValueError):
    """A reviewed mapping does not line up with the uploaded file."""


@dataclass
class ImportPreview:
    file_name: str | None
    total_rows: int
    headers: list[str]
    sample_rows: list[dict]
    mapping: ColumnMapping

    @property
    def mapped_count(self) -> int:
        return sum(1 for e in self.mapping if e.is_mapped)

    def to_dict(self) -> dict:
        return {
            "file_name": self.file_name,
            "total_rows": self.total_rows,
            "headers": self.headers,
            "sample_rows": self.sample_rows,
            "mapping": [e.to_dict() for e in self.mapping],
            "mapped_count": self.mapped_count,
            "target_fields": sorted(TARGET_FIELDS),
        }


@dataclass
class ImportResult:
    upload_id: int | None
    rows_imported: int
    mapping: ColumnMapping = field(default_factory=list)
    status: str = "completed"
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "upload_id": self.upload_id,
            "status": self.status,
            "rows_imported": self.rows_imported,
            "mapping": [e.to_dict() for e in self.mapping],
            "error": self.error,
        }


def apply_mapping_override(
    headers: list[str],
    suggested: ColumnMapping,
    override: list[dict[str, str]] | None,
) -> ColumnMapping:
    """
    Merge a reviewer's corrections into the suggested mapping.

    Each override item is ``{"source_column": ..., "target_field": ...}``.
    Columns not mentioned keep their suggestion.  Naming a column absent from
    the file, or a target that is not a claims column, is rejected.
    """
    if not override:
        return list(suggested)

    corrections: dict[str, str] = {}
    for item in override:
        source = item.get("source_column")
        target = item.get("target_field") or UNMAPPED
        if not isinstance(source, str):
            raise MappingOverrideError(f"source_column must be a string, got {type(source).__name__}")
        if not isinstance(target, str):
            raise MappingOverrideError(f"target_field must be a string, got {type(target).__name__}")
        if source not in headers:
            raise MappingOverrideError(f"Column '{source}' is not in the uploaded file")
        if target != UNMAPPED and target not in TARGET_FIELDS:
            raise MappingOverrideError(f"'{target}' is not a claims field")
        corrections[source] = target

    return [
        ColumnMappingEntry(e.source_column, corrections.get(e.source_column, e.target_field))
        for e in suggested
    ]


class ImportService:
    def __init__(self, db: AsyncSession, mapper: ClaimRowMapper = default_mapper):
        self.db = db
        self.mapper = mapper
        self.store = ClaimStore(db)

    def preview_csv(self, file_content: bytes, file_name: str | None = None) -> ImportPreview:
        """Read CSV, auto-map its columns, return a preview for review."""
        parsed = parse_csv(file_content)
        mapping = self.mapper.map_columns(parsed.headers)
        logger.info(
            "Previewed %s: %d rows, %d/%d columns mapped",
            file_name or "upload", parsed.total_rows,
            sum(1 for e in mapping if e.is_mapped), len(mapping),
        )
        return ImportPreview(
            file_name=file_name,
            total_rows=parsed.total_rows,
            headers=parsed.headers,
            sample_rows=parsed.rows[:settings.preview_rows],
            mapping=mapping,
        )

    def build_csv_import(
        self,
        file_content: bytes,
        file_name: str | None = None,
        override: list[dict[str, str]] | None = None,
    ) -> RawCsvImport:
        parsed: ParsedCSV = parse_csv(file_content)
        suggested = self.mapper.map_columns(parsed.headers)
        mapping = apply_mapping_override(parsed.headers, suggested, override)
        return RawCsvImport(parsed=parsed, mapping=mapping, file_name=file_name)

    async def ingest(self, source: ImportSource, uploaded_by: str | None = None) -> ImportResult:
        """Transform (when needed) and insert one import, logging it in ``csv_uploads``."""
        if isinstance(source, RawCsvImport):
            records: list[dict[str, Any]] = self.mapper.transform_rows(source.parsed.rows, source.mapping)
            mapping = source.mapping
            kind = "csv"
        elif isinstance(source, StorageRowsImport):
            records = []
            for record in source.records:
                record = dict(record)
                self.mapper.apply_required_defaults(record)
                records.append(record)
            mapping = []
            kind = "records"
        else:
            raise TypeError(f"Unsupported import source: {type(source).__name__}")

        upload = CsvUpload(
            file_name=source.file_name or "upload.csv",
            source_kind=kind,
            uploaded_by=uploaded_by,
            status="processing",
            records_imported=0,
            column_mapping=[e.to_dict() for e in mapping] or None,
        )
        self.db.add(upload)
        await self.db.flush()
        logger.info("Import %s started: %s, %d records", upload.id, upload.file_name, len(records),
                    extra={"upload_id": upload.id})

        try:
            rows_imported = await self.store.insert_records(records, upload_id=upload.id)
        except ClaimRecordError as e:
            upload.status = "failed"
            upload.errors = str(e)
            await self.db.flush()
            logger.warning("Import %s failed: %s", upload.id, e, extra={"upload_id": upload.id})
            return ImportResult(upload_id=upload.id, rows_imported=0, mapping=mapping, status="failed", error=str(e))

        upload.status = "completed"
        upload.records_imported = rows_imported
        await self.db.flush()
        logger.info("Import %s completed: %d claims", upload.id, rows_imported,
                    extra={"upload_id": upload.id})

        return ImportResult(upload_id=upload.id, rows_imported=rows_imported, mapping=mapping)

    async def list_uploads(self, limit: int = 50) -> list[CsvUpload]:
        result = await self.db.execute(
            select(CsvUpload).order_by(CsvUpload.upload_date.desc()).limit(limit)
        )
        return list(result.scalars())
