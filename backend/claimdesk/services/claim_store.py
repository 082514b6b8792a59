"""
Claim store — batch-insert transformed import records into ``claims``.

Records arrive as flat dicts keyed by claims column names with floats for
money and raw strings for dates.  This is where those values meet the column
types: amounts become ``Decimal`` cents, date strings are parsed, and values
that cannot be parsed become NULL (or today, for the NOT NULL service date).
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.config import settings
from claimdesk.models import Claim
from claimdesk.upload.coercion import parse_currency
from claimdesk.upload.transformer import AMOUNT_FIELDS, MILESTONE_FLAG_FIELDS, TARGET_FIELDS

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m-%d-%Y", "%m/%d/%y", "%Y/%m/%d")
_DATETIME_FORMATS = ("%m/%d/%Y %H:%M", "%m/%d/%Y %H:%M:%S", "%m/%d/%Y %I:%M %p")
_CENTS = Decimal("0.01")

_amount_type = Claim.__table__.c.total_charged_amount.type
# Numeric(12, 2) holds at most 10 integer digits
_AMOUNT_LIMIT = Decimal(10) ** (_amount_type.precision - _amount_type.scale)


class ClaimRecordError(ValueError):
    """A record cannot be stored in ``claims``: unknown columns, or values
    that do not fit their column."""


def parse_date(val: Any) -> date | None:
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if not isinstance(val, str) or not val.strip():
        return None
    text = val.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    parsed = parse_timestamp(text)
    return parsed.date() if parsed else None


def parse_timestamp(val: Any) -> datetime | None:
    if isinstance(val, datetime):
        return val
    if isinstance(val, date):
        return datetime(val.year, val.month, val.day)
    if not isinstance(val, str) or not val.strip():
        return None
    text = val.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        # columns are naive UTC
        return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed
    except ValueError:
        pass
    for fmt in _DATETIME_FORMATS + _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def to_amount(val: Any) -> Decimal:
    """Convert an amount to ``Decimal`` cents.

    Plain numbers and numeric strings convert directly; anything else (such
    as ``"$1,234.56"`` in pre-mapped records) goes through ``parse_currency``.
    Raises ``ClaimRecordError`` when the value does not fit the amount columns.
    """
    try:
        amount = Decimal(val.strip() if isinstance(val, str) else str(val))
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        parsed = parse_currency(val)
        logger.warning("Amount %r is not a plain number, read as %s", val, parsed)
        amount = Decimal(str(parsed))

    if abs(amount) < _AMOUNT_LIMIT:
        amount = amount.quantize(_CENTS)
    if abs(amount) >= _AMOUNT_LIMIT:
        raise ClaimRecordError(f"Amount {val!r} is outside the storable range")
    return amount


def _text_limit(field_name: str) -> int | None:
    return getattr(Claim.__table__.c[field_name].type, "length", None)


def _to_flag(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    if isinstance(val, str):
        return val.strip().lower() in ("true", "1", "yes", "t")
    return val == 1


def record_to_claim(record: dict[str, Any], upload_id: int | None = None) -> Claim:
    """Build a ``Claim`` row from one transformed record."""
    unknown = set(record) - TARGET_FIELDS
    if unknown:
        raise ClaimRecordError(f"Unknown claims columns: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    for field_name, value in record.items():
        if value is None:
            continue
        if field_name in AMOUNT_FIELDS:
            values[field_name] = to_amount(value)
        elif field_name in MILESTONE_FLAG_FIELDS:
            values[field_name] = _to_flag(value)
        elif field_name in ("service_date", "statement_created_date"):
            parsed = parse_date(value)
            if parsed is None:
                logger.warning("Unparseable %s %r", field_name, value)
                continue
            values[field_name] = parsed
        elif field_name.endswith("_at"):
            parsed = parse_timestamp(value)
            if parsed is None:
                logger.warning("Unparseable %s %r", field_name, value)
                continue
            values[field_name] = parsed
        else:
            text = str(value)
            limit = _text_limit(field_name)
            if limit is not None and len(text) > limit:
                raise ClaimRecordError(
                    f"{field_name} is longer than {limit} characters: {text[:40]!r}"
                )
            values[field_name] = text

    if "service_date" not in values:
        values["service_date"] = date.today()

    return Claim(upload_id=upload_id, **values)


class ClaimStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_records(
        self,
        records: Iterable[dict[str, Any]],
        upload_id: int | None = None,
    ) -> int:
        """Add one ``Claim`` per record, flushing every ``insert_batch_size`` rows.

        Every record is converted before anything is added, so a
        ``ClaimRecordError`` leaves the session untouched.
        """
        claims = []
        for number, record in enumerate(records, start=1):
            try:
                claims.append(record_to_claim(record, upload_id))
            except ClaimRecordError as e:
                raise ClaimRecordError(f"Record {number}: {e}") from e
        size = settings.insert_batch_size
        for start in range(0, len(claims), size):
            self.db.add_all(claims[start:start + size])
            await self.db.flush()
        return len(claims)
