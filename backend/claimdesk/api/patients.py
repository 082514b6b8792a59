"""
Patients API — list, create (with derived account number), detail and edit.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.api.deps import apply_changes, get_db, page_count
from claimdesk.models import Patient
from claimdesk.schemas.schemas import PatientCreate, PatientListResponse, PatientOut, PatientUpdate
from claimdesk.services.patient_service import calculate_account_number, get_patient_by_account

router = APIRouter(prefix="/api/patients", tags=["patients"])


@router.get("", response_model=PatientListResponse)
async def list_patients(
    search: str | None = Query(None, description="Match on name or account number"),
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> PatientListResponse:
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(or_(Patient.patient_name.ilike(pattern), Patient.account_number.ilike(pattern)))

    total = (await db.execute(
        select(func.count()).select_from(Patient).where(*filters)
    )).scalar() or 0
    result = await db.execute(
        select(Patient)
        .where(*filters)
        .order_by(Patient.patient_name.asc())
        .offset((page - 1) * size)
        .limit(size)
    )
    items = [PatientOut.model_validate(p) for p in result.scalars()]
    return PatientListResponse(
        total=total, page=page, size=size, pages=page_count(total, size), items=items,
    )


@router.post("", response_model=PatientOut, status_code=201)
async def create_patient(body: PatientCreate, db: AsyncSession = Depends(get_db)) -> PatientOut:
    patient_name = body.patient_name or " ".join(
        part for part in (body.first_name, body.last_name) if part
    )
    if not patient_name:
        raise HTTPException(status_code=422, detail="patient_name or first/last name is required")

    account_number = body.account_number or calculate_account_number(
        body.first_name, body.last_name, patient_name, body.date_of_birth,
    )
    if await get_patient_by_account(db, account_number):
        raise HTTPException(status_code=409, detail=f"Account {account_number} already exists")

    patient = Patient(
        **body.model_dump(exclude={"patient_name", "account_number"}),
        patient_name=patient_name,
        account_number=account_number,
    )
    db.add(patient)
    await db.flush()
    return PatientOut.model_validate(patient)


@router.get("/{patient_id}", response_model=PatientOut)
async def get_patient(patient_id: int, db: AsyncSession = Depends(get_db)) -> PatientOut:
    patient = await db.get(Patient, patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail=f"Patient {patient_id} not found")
    return PatientOut.model_validate(patient)


@router.patch("/{patient_id}", response_model=PatientOut)
async def update_patient(
    patient_id: int,
    body: PatientUpdate,
    db: AsyncSession = Depends(get_db),
) -> PatientOut:
    patient = await db.get(Patient, patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail=f"Patient {patient_id} not found")
    apply_changes(patient, body.model_dump(exclude_unset=True))
    await db.flush()
    return PatientOut.model_validate(patient)
