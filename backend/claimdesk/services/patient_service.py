"""
Patient helpers — account-number derivation and lookups used by the
patients API.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.models import Patient


def calculate_account_number(
    first_name: str | None,
    last_name: str | None,
    patient_name: str | None = None,
    date_of_birth: date | None = None,
    today: date | None = None,
) -> str:
    """
    Derive the practice's account number for a patient.

    Format is first initial, 2-digit month, ``0``, 2-digit day, last initial,
    4-digit year of birth, e.g. Jane Doe born 1985-03-07 -> ``J03007D1985``.
    Without a date of birth the initials wrap the current ``YYMM`` instead.
    """
    name_parts = (patient_name or "").split()
    first_initial = (first_name or (name_parts[0] if name_parts else "") or "P")[0].upper()
    last_initial = (last_name or (name_parts[-1] if name_parts else "") or "N")[0].upper()

    if date_of_birth is None:
        suffix = (today or date.today()).strftime("%y%m")
        return f"{first_initial}{suffix}{last_initial}"

    return (
        f"{first_initial}{date_of_birth.month:02d}0{date_of_birth.day:02d}"
        f"{last_initial}{date_of_birth.year:04d}"
    )


async def get_patient_by_account(db: AsyncSession, account_number: str) -> Patient | None:
    result = await db.execute(select(Patient).where(Patient.account_number == account_number))
    return result.scalar_one_or_none()
