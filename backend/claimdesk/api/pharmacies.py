"""
Pharmacies API — list, create and edit.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.api.deps import apply_changes, get_db
from claimdesk.models import Pharmacy
from claimdesk.schemas.schemas import PharmacyCreate, PharmacyListResponse, PharmacyOut, PharmacyUpdate

router = APIRouter(prefix="/api/pharmacies", tags=["pharmacies"])


@router.get("", response_model=PharmacyListResponse)
async def list_pharmacies(
    status: str | None = Query(None, pattern="^(Active|Paused|Prospect)$"),
    db: AsyncSession = Depends(get_db),
) -> PharmacyListResponse:
    query = select(Pharmacy).order_by(Pharmacy.name.asc())
    if status:
        query = query.where(Pharmacy.status == status)
    result = await db.execute(query)
    items = [PharmacyOut.model_validate(p) for p in result.scalars()]
    return PharmacyListResponse(pharmacies=items, total=len(items))


@router.post("", response_model=PharmacyOut, status_code=201)
async def create_pharmacy(body: PharmacyCreate, db: AsyncSession = Depends(get_db)) -> PharmacyOut:
    pharmacy = Pharmacy(**body.model_dump())
    db.add(pharmacy)
    await db.flush()
    return PharmacyOut.model_validate(pharmacy)


@router.patch("/{pharmacy_id}", response_model=PharmacyOut)
async def update_pharmacy(
    pharmacy_id: int,
    body: PharmacyUpdate,
    db: AsyncSession = Depends(get_db),
) -> PharmacyOut:
    pharmacy = await db.get(Pharmacy, pharmacy_id)
    if pharmacy is None:
        raise HTTPException(status_code=404, detail=f"Pharmacy {pharmacy_id} not found")
    apply_changes(pharmacy, body.model_dump(exclude_unset=True))
    await db.flush()
    return PharmacyOut.model_validate(pharmacy)
