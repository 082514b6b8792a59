from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import String, Date, Boolean, DateTime, Text, Numeric, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from claimdesk.database import Base


class Claim(Base):
    __tablename__ = "claims"

    id: Mapped[int] = mapped_column(primary_key=True)
    patient_id: Mapped[int | None] = mapped_column(ForeignKey("patients.id"), nullable=True, index=True)

    # Patient & account
    account_number: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    patient_name: Mapped[str] = mapped_column(String(200))

    # Service
    service_date: Mapped[date] = mapped_column(Date, index=True)
    cpt_hcpcs_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    pharmacy_of_service: Mapped[str | None] = mapped_column(String(200), nullable=True)
    rx_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Financial
    total_charged_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    insurance_adjustment: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    insurance_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    patient_responsibility: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    patient_paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    account_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    # Status & workflow
    billing_status: Mapped[str] = mapped_column(String(20), default="Pending")  # Pending | Billed | Paid | Collections
    payment_status: Mapped[str] = mapped_column(String(20), default="PENDING")  # PAID | DENIED | PENDING
    workflow: Mapped[str] = mapped_column(String(30), default="New")  # New | Pending | Complete | Sent to Collections

    # Statements
    statement_created_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    statement_mailed: Mapped[bool] = mapped_column(Boolean, default=False)
    statement_two_mailed: Mapped[bool] = mapped_column(Boolean, default=False)
    statement_three_mailed: Mapped[bool] = mapped_column(Boolean, default=False)
    statement_sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    statement_sent_2nd_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    statement_sent_3rd_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    statement_paid: Mapped[bool] = mapped_column(Boolean, default=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    upload_id: Mapped[int | None] = mapped_column(ForeignKey("csv_uploads.id"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    patient: Mapped["Patient | None"] = relationship(foreign_keys=[patient_id])


# Needed for relationship resolution
from claimdesk.models.patient import Patient  # noqa: E402, F811
