"""
Column mapping aliases for CSV import auto-detection.

Each key is a normalized CSV header (lowercased, trimmed, inner whitespace
collapsed to underscores); the value is the claims column it feeds.  Only
columns that exist on the ``claims`` table appear as targets.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

UNMAPPED = "unmapped"

_WHITESPACE_RUN = re.compile(r"\s+")

CLAIM_SYNONYMS: Mapping[str, str] = MappingProxyType({
    # Account / patient
    "account_number": "account_number",
    "accountnumber": "account_number",
    "account": "account_number",
    "acct": "account_number",
    "patient_name": "patient_name",
    "patientname": "patient_name",
    "name": "patient_name",
    "patient": "patient_name",

    # Service
    "service_date": "service_date",
    "servicedate": "service_date",
    "date_of_service": "service_date",
    "dos": "service_date",
    "cpt_hcpcs_code": "cpt_hcpcs_code",
    "cpt": "cpt_hcpcs_code",
    "hcpcs": "cpt_hcpcs_code",
    "code": "cpt_hcpcs_code",
    "procedure_code": "cpt_hcpcs_code",
    "pharmacy_of_service": "pharmacy_of_service",
    "pharmacy": "pharmacy_of_service",
    "location": "pharmacy_of_service",
    "rx_number": "rx_number",
    "rx": "rx_number",
    "prescription_number": "rx_number",

    # Financial
    "total_charged_amount": "total_charged_amount",
    "charged_amount": "total_charged_amount",
    "billed": "total_charged_amount",
    "charge": "total_charged_amount",
    "amount": "total_charged_amount",
    "total_charge": "total_charged_amount",
    "insurance_adjustment": "insurance_adjustment",
    "adjustment": "insurance_adjustment",
    "ins_adjustment": "insurance_adjustment",
    "insurance_paid": "insurance_paid",
    "ins_paid": "insurance_paid",
    "paid": "insurance_paid",
    "insurance_payment": "insurance_paid",
    "patient_responsibility": "patient_responsibility",
    "patient_resp": "patient_responsibility",
    "patient_pay": "patient_responsibility",
    "patient_portion": "patient_responsibility",
    "patient_paid_amount": "patient_paid_amount",
    "paid_amount": "patient_paid_amount",
    "amount_paid": "patient_paid_amount",
    "account_balance": "account_balance",
    "balance_due": "account_balance",
    "balance": "account_balance",

    # Status
    "billing_status": "billing_status",
    "status": "billing_status",
    "payment_status": "payment_status",
    "workflow": "workflow",

    # Statement milestones land on the *_at timestamps, not the boolean flags
    "statement_mailed": "statement_sent_at",
    "statement_sent": "statement_sent_at",
    "statement_1_date": "statement_sent_at",
    "statement_two_mailed": "statement_sent_2nd_at",
    "statement_2_date": "statement_sent_2nd_at",
    "statement_three_mailed": "statement_sent_3rd_at",
    "statement_3_date": "statement_sent_3rd_at",
    "statement_created_date": "statement_created_date",
    "statement_date": "statement_created_date",
    "statement_paid": "statement_created_date",

    "notes": "notes",
    "note": "notes",
    "comment": "notes",
    "comments": "notes",
})


@dataclass(frozen=True)
class ColumnMappingEntry:
    source_column: str
    target_field: str

    @property
    def is_mapped(self) -> bool:
        return self.target_field != UNMAPPED

    def to_dict(self) -> dict:
        return {"source_column": self.source_column, "target_field": self.target_field}


ColumnMapping = list[ColumnMappingEntry]


def normalize_header(header: str) -> str:
    """Lowercase, trim and collapse inner whitespace runs to ``_``."""
    return _WHITESPACE_RUN.sub("_", header.strip().lower())


def map_columns(
    headers: Iterable[str],
    synonyms: Mapping[str, str] = CLAIM_SYNONYMS,
) -> ColumnMapping:
    """
    Resolve each CSV header against the synonym table.

    Returns one entry per header in input order.  Headers that match nothing
    (including empty strings) resolve to ``"unmapped"``.  Two headers may
    resolve to the same target; both entries are kept.
    """
    return [
        ColumnMappingEntry(
            source_column=header,
            target_field=synonyms.get(normalize_header(header), UNMAPPED),
        )
        for header in headers
    ]


def mapped_targets(mapping: ColumnMapping) -> list[str]:
    return [entry.target_field for entry in mapping if entry.is_mapped]
