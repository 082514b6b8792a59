"""
Pydantic schemas for API request/response models.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


# ── Pagination ──

class PaginatedResponse(BaseModel):
    total: int
    page: int
    size: int
    pages: int


# ── Imports ──

class MappingEntry(BaseModel):
    source_column: str
    target_field: str


class ImportPreviewResponse(BaseModel):
    file_name: str | None
    total_rows: int
    headers: list[str]
    sample_rows: list[dict]
    mapping: list[MappingEntry]
    mapped_count: int
    target_fields: list[str]


class ImportResultResponse(BaseModel):
    upload_id: int | None
    status: str
    rows_imported: int
    mapping: list[MappingEntry] = []
    error: str | None = None


class RecordsImportRequest(BaseModel):
    file_name: str | None = None
    records: list[dict] = Field(..., min_length=1)


class CsvUploadSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    source_kind: str
    uploaded_by: str | None = None
    upload_date: datetime | None = None
    status: str
    records_imported: int
    errors: str | None = None


class CsvUploadListResponse(BaseModel):
    uploads: list[CsvUploadSummary]
    total: int


# ── Claims ──

class ClaimSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_number: str | None = None
    patient_name: str
    service_date: date
    cpt_hcpcs_code: str | None = None
    pharmacy_of_service: str | None = None
    total_charged_amount: float
    account_balance: float
    billing_status: str
    payment_status: str
    workflow: str


class ClaimListResponse(PaginatedResponse):
    items: list[ClaimSummary]


class ClaimDetail(ClaimSummary):
    patient_id: int | None = None
    rx_number: str | None = None
    insurance_adjustment: float
    insurance_paid: float
    patient_responsibility: float
    patient_paid_amount: float
    statement_created_date: date | None = None
    statement_mailed: bool
    statement_two_mailed: bool
    statement_three_mailed: bool
    statement_sent_at: datetime | None = None
    statement_sent_2nd_at: datetime | None = None
    statement_sent_3rd_at: datetime | None = None
    statement_paid: bool
    notes: str | None = None
    upload_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ClaimUpdate(BaseModel):
    """Fields a reviewer may change on a claim; unset fields are left alone."""

    billing_status: str | None = Field(None, pattern="^(Pending|Billed|Paid|Collections)$")
    payment_status: str | None = Field(None, pattern="^(PAID|DENIED|PENDING)$")
    workflow: str | None = Field(None, pattern="^(New|Pending|Complete|Sent to Collections)$")
    patient_id: int | None = None
    statement_created_date: date | None = None
    statement_mailed: bool | None = None
    statement_two_mailed: bool | None = None
    statement_three_mailed: bool | None = None
    statement_paid: bool | None = None
    statement_sent_at: datetime | None = None
    statement_sent_2nd_at: datetime | None = None
    statement_sent_3rd_at: datetime | None = None
    notes: str | None = None


class ClaimsTotals(BaseModel):
    claim_count: int
    total_charged: float
    total_insurance_paid: float
    total_patient_paid: float
    total_balance: float
    by_billing_status: dict[str, int]


# ── Patients ──

class PatientCreate(BaseModel):
    patient_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    account_number: str | None = None
    date_of_birth: date | None = None
    email: str | None = None
    phone: str | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = Field(None, max_length=2)
    address_zip: str | None = None
    status: str = Field("Active", pattern="^(Active|Inactive|Collections)$")


class PatientUpdate(BaseModel):
    patient_name: str | None = Field(None, min_length=1)
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: date | None = None
    email: str | None = None
    phone: str | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = Field(None, max_length=2)
    address_zip: str | None = None
    status: str | None = Field(None, pattern="^(Active|Inactive|Collections)$")


class PatientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_number: str
    patient_name: str
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: date | None = None
    email: str | None = None
    phone: str | None = None
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = None
    address_zip: str | None = None
    status: str


class PatientListResponse(PaginatedResponse):
    items: list[PatientOut]


# ── Pharmacies ──

class PharmacyCreate(BaseModel):
    name: str = Field(..., min_length=1)
    npi: str | None = Field(None, max_length=10)
    contact_name: str | None = None
    phone: str | None = None
    email: str | None = None
    status: str = Field("Active", pattern="^(Active|Paused|Prospect)$")
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = Field(None, max_length=2)
    address_zip: str | None = None
    notes: str | None = None


class PharmacyUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    npi: str | None = Field(None, max_length=10)
    contact_name: str | None = None
    phone: str | None = None
    email: str | None = None
    status: str | None = Field(None, pattern="^(Active|Paused|Prospect)$")
    address_street: str | None = None
    address_city: str | None = None
    address_state: str | None = Field(None, max_length=2)
    address_zip: str | None = None
    notes: str | None = None


class PharmacyOut(PharmacyCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    last_sync_at: datetime | None = None


class PharmacyListResponse(BaseModel):
    pharmacies: list[PharmacyOut]
    total: int
