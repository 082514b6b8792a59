"""
Claims API — paginated list, totals for the dashboard, claim detail, edits
and deletion.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.api.deps import apply_changes, get_db, page_count
from claimdesk.models import Claim, Patient
from claimdesk.schemas.schemas import (
    ClaimDetail,
    ClaimListResponse,
    ClaimsTotals,
    ClaimSummary,
    ClaimUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/claims", tags=["claims"])


def _filters(
    billing_status: str | None,
    payment_status: str | None,
    workflow: str | None,
    account_number: str | None,
) -> list:
    filters = []
    if billing_status:
        filters.append(Claim.billing_status == billing_status)
    if payment_status:
        filters.append(Claim.payment_status == payment_status)
    if workflow:
        filters.append(Claim.workflow == workflow)
    if account_number:
        filters.append(Claim.account_number == account_number)
    return filters


# ---------------------------------------------------------------------------
# GET /api/claims — paginated list with filters
# ---------------------------------------------------------------------------

@router.get("", response_model=ClaimListResponse)
async def list_claims(
    billing_status: str | None = Query(None, pattern="^(Pending|Billed|Paid|Collections)$"),
    payment_status: str | None = Query(None, pattern="^(PAID|DENIED|PENDING)$"),
    workflow: str | None = Query(None),
    account_number: str | None = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> ClaimListResponse:
    filters = _filters(billing_status, payment_status, workflow, account_number)

    total = (await db.execute(
        select(func.count()).select_from(Claim).where(*filters)
    )).scalar() or 0

    result = await db.execute(
        select(Claim)
        .where(*filters)
        .order_by(Claim.service_date.desc(), Claim.id.desc())
        .offset((page - 1) * size)
        .limit(size)
    )
    items = [ClaimSummary.model_validate(c) for c in result.scalars()]

    return ClaimListResponse(
        total=total, page=page, size=size, pages=page_count(total, size), items=items,
    )


# ---------------------------------------------------------------------------
# GET /api/claims/summary — money totals
# ---------------------------------------------------------------------------

@router.get("/summary", response_model=ClaimsTotals)
async def claims_summary(
    account_number: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> ClaimsTotals:
    filters = _filters(None, None, None, account_number)

    row = (await db.execute(
        select(
            func.count(Claim.id),
            func.coalesce(func.sum(Claim.total_charged_amount), 0),
            func.coalesce(func.sum(Claim.insurance_paid), 0),
            func.coalesce(func.sum(Claim.patient_paid_amount), 0),
            func.coalesce(func.sum(Claim.account_balance), 0),
        ).where(*filters)
    )).one()

    status_rows = await db.execute(
        select(Claim.billing_status, func.count())
        .where(*filters)
        .group_by(Claim.billing_status)
    )

    return ClaimsTotals(
        claim_count=row[0],
        total_charged=float(row[1]),
        total_insurance_paid=float(row[2]),
        total_patient_paid=float(row[3]),
        total_balance=float(row[4]),
        by_billing_status={status: count for status, count in status_rows},
    )


# ---------------------------------------------------------------------------
# GET /api/claims/{id}
# ---------------------------------------------------------------------------

@router.get("/{claim_id}", response_model=ClaimDetail)
async def get_claim(claim_id: int, db: AsyncSession = Depends(get_db)) -> ClaimDetail:
    claim = await db.get(Claim, claim_id)
    if claim is None:
        raise HTTPException(status_code=404, detail=f"Claim {claim_id} not found")
    return ClaimDetail.model_validate(claim)


# ---------------------------------------------------------------------------
# PATCH /api/claims/{id} — status, workflow and statement updates
# ---------------------------------------------------------------------------

@router.patch("/{claim_id}", response_model=ClaimDetail)
async def update_claim(
    claim_id: int,
    body: ClaimUpdate,
    db: AsyncSession = Depends(get_db),
) -> ClaimDetail:
    """Only fields present in the body are changed."""
    claim = await db.get(Claim, claim_id)
    if claim is None:
        raise HTTPException(status_code=404, detail=f"Claim {claim_id} not found")

    changes = body.model_dump(exclude_unset=True)
    if changes.get("patient_id") is not None and await db.get(Patient, changes["patient_id"]) is None:
        raise HTTPException(status_code=422, detail=f"Patient {changes['patient_id']} not found")
    apply_changes(claim, changes)
    await db.flush()

    logger.info("Claim %s updated: %s", claim_id, sorted(changes))
    return ClaimDetail.model_validate(claim)


# ---------------------------------------------------------------------------
# DELETE /api/claims/{id}
# ---------------------------------------------------------------------------

@router.delete("/{claim_id}", status_code=204)
async def delete_claim(claim_id: int, db: AsyncSession = Depends(get_db)) -> None:
    claim = await db.get(Claim, claim_id)
    if claim is None:
        raise HTTPException(status_code=404, detail=f"Claim {claim_id} not found")
    await db.delete(claim)
    await db.flush()
    logger.info("Claim %s deleted", claim_id)
