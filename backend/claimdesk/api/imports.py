"""
Imports API — CSV column-mapping preview, ingestion, and import history.
"""

import json

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.api.deps import get_db
from claimdesk.schemas.schemas import (
    CsvUploadListResponse,
    CsvUploadSummary,
    ImportPreviewResponse,
    ImportResultResponse,
    RecordsImportRequest,
)
from claimdesk.services.import_service import ImportService, MappingOverrideError
from claimdesk.upload.csv_reader import CSVFormatError
from claimdesk.upload.sources import StorageRowsImport

router = APIRouter(prefix="/api/imports", tags=["imports"])


def _parse_mapping_form(mapping: str | None) -> list[dict[str, str]] | None:
    if not mapping:
        return None
    try:
        parsed = json.loads(mapping)
    except json.JSONDecodeError:
        raise HTTPException(status_code=422, detail="Invalid mapping JSON")
    if not isinstance(parsed, list) or not all(isinstance(item, dict) for item in parsed):
        raise HTTPException(
            status_code=422,
            detail="mapping must be a list of {source_column, target_field} objects",
        )
    return parsed


def _result_response(result) -> ImportResultResponse | JSONResponse:
    body = ImportResultResponse(**result.to_dict())
    if result.status == "failed":
        # returned rather than raised so the failed import log is still committed
        return JSONResponse(status_code=422, content=body.model_dump())
    return body


# ── POST /api/imports/preview ──

@router.post("/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
):
    """Upload a CSV file and get the suggested column mapping."""
    content = await file.read()
    service = ImportService(db)
    try:
        preview = service.preview_csv(content, file.filename)
    except CSVFormatError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ImportPreviewResponse(**preview.to_dict())


# ── POST /api/imports/ingest ──

@router.post("/ingest", response_model=ImportResultResponse)
async def ingest_import(
    file: UploadFile = File(...),
    mapping: str | None = Form(None),  # JSON list: [{source_column, target_field}]
    uploaded_by: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Ingest a CSV using the suggested mapping plus any reviewer corrections."""
    override = _parse_mapping_form(mapping)
    content = await file.read()
    service = ImportService(db)
    try:
        source = service.build_csv_import(content, file.filename, override)
    except (CSVFormatError, MappingOverrideError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = await service.ingest(source, uploaded_by=uploaded_by)
    return _result_response(result)


# ── POST /api/imports/records ──

@router.post("/records", response_model=ImportResultResponse)
async def ingest_records(body: RecordsImportRequest, db: AsyncSession = Depends(get_db)):
    """Ingest records that are already keyed by claims column names."""
    service = ImportService(db)
    result = await service.ingest(StorageRowsImport(records=body.records, file_name=body.file_name))
    return _result_response(result)


# ── GET /api/imports ──

@router.get("", response_model=CsvUploadListResponse)
async def list_imports(
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    """Most recent imports first."""
    uploads = await ImportService(db).list_uploads(limit)
    items = [CsvUploadSummary.model_validate(u) for u in uploads]
    return CsvUploadListResponse(uploads=items, total=len(items))
