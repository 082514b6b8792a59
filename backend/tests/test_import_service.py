"""Tests for the import service: mapping review and ingestion."""

from decimal import Decimal

import pytest

from claimdesk.models import Claim, CsvUpload
from claimdesk.services.import_service import (
    ImportService,
    MappingOverrideError,
    apply_mapping_override,
)
from claimdesk.upload.column_maps import UNMAPPED, map_columns
from claimdesk.upload.sources import StorageRowsImport


class TestApplyMappingOverride:
    headers = ["Account", "Foo", "Paid"]

    def test_no_override_keeps_suggestion(self):
        suggested = map_columns(self.headers)
        assert apply_mapping_override(self.headers, suggested, None) == suggested

    def test_corrections_replace_suggestions(self):
        suggested = map_columns(self.headers)
        mapping = apply_mapping_override(self.headers, suggested, [
            {"source_column": "Foo", "target_field": "statement_mailed"},
            {"source_column": "Paid", "target_field": "patient_paid_amount"},
        ])
        assert [e.target_field for e in mapping] == ["account_number", "statement_mailed", "patient_paid_amount"]

    def test_blank_target_unmaps(self):
        suggested = map_columns(self.headers)
        mapping = apply_mapping_override(self.headers, suggested, [{"source_column": "Account", "target_field": ""}])
        assert mapping[0].target_field == UNMAPPED

    def test_unknown_column(self):
        with pytest.raises(MappingOverrideError, match="not in the uploaded file"):
            apply_mapping_override(self.headers, map_columns(self.headers), [
                {"source_column": "Nope", "target_field": "notes"},
            ])

    @pytest.mark.parametrize("item", [
        {"source_column": "Foo", "target_field": {"a": 1}},
        {"source_column": "Foo", "target_field": ["notes"]},
        {"source_column": ["Foo"], "target_field": "notes"},
        {"target_field": "notes"},
    ])
    def test_non_string_values(self, item):
        with pytest.raises(MappingOverrideError, match="must be a string"):
            apply_mapping_override(self.headers, map_columns(self.headers), [item])

    def test_unknown_target(self):
        with pytest.raises(MappingOverrideError, match="not a claims field"):
            apply_mapping_override(self.headers, map_columns(self.headers), [
                {"source_column": "Foo", "target_field": "favorite_color"},
            ])


class TestPreview:
    def test_preview(self, fake_session, sample_csv):
        preview = ImportService(fake_session).preview_csv(sample_csv, "billing.csv")
        assert preview.total_rows == 2
        assert preview.mapped_count == 6
        data = preview.to_dict()
        assert data["file_name"] == "billing.csv"
        assert data["mapping"][2] == {"source_column": "DOS", "target_field": "service_date"}
        assert "statement_mailed" in data["target_fields"]


@pytest.mark.asyncio
class TestIngest:
    async def test_csv_import(self, fake_session, sample_csv):
        service = ImportService(fake_session)
        source = service.build_csv_import(sample_csv, "billing.csv")

        result = await service.ingest(source, uploaded_by="front-desk")

        assert result.status == "completed"
        assert result.rows_imported == 2
        [upload] = fake_session.of_type(CsvUpload)
        assert upload.status == "completed"
        assert upload.records_imported == 2
        assert upload.uploaded_by == "front-desk"
        assert upload.column_mapping[0] == {"source_column": "Account", "target_field": "account_number"}

        claims = fake_session.of_type(Claim)
        assert [c.account_number for c in claims] == ["A1", "A2"]
        assert claims[1].total_charged_amount == Decimal("-42.10")
        assert claims[0].notes is None
        assert claims[1].notes == "refund issued"
        assert all(c.upload_id == upload.id for c in claims)

    async def test_storage_rows_get_required_defaults(self, fake_session):
        service = ImportService(fake_session)
        result = await service.ingest(StorageRowsImport(
            records=[{"account_number": "A9", "insurance_paid": 12.5}],
            file_name="sync.json",
        ))

        assert result.status == "completed"
        [claim] = fake_session.of_type(Claim)
        assert claim.patient_name == "Unknown Patient"
        assert claim.insurance_paid == Decimal("12.50")
        assert claim.account_balance == Decimal("0.00")
        [upload] = fake_session.of_type(CsvUpload)
        assert upload.source_kind == "records"
        assert upload.column_mapping is None

    async def test_storage_rows_with_currency_text(self, fake_session):
        service = ImportService(fake_session)
        await service.ingest(StorageRowsImport(records=[
            {"patient_name": "Jane", "total_charged_amount": "$1,234.56", "account_balance": "($5.00)"},
        ]))
        [claim] = fake_session.of_type(Claim)
        assert claim.total_charged_amount == Decimal("1234.56")
        assert claim.account_balance == Decimal("-5.00")

    async def test_oversized_values_fail_the_import(self, fake_session):
        service = ImportService(fake_session)
        source = service.build_csv_import(
            b"Account,Code,Billed\nA1,99213,$10.00\nA2,Office visit established patient,\"$12,345,678,901\"\n",
            "billing.csv",
        )

        result = await service.ingest(source)

        assert result.status == "failed"
        assert "Record 2" in result.error
        assert fake_session.of_type(Claim) == []
        [upload] = fake_session.of_type(CsvUpload)
        assert upload.status == "failed"

    async def test_unknown_columns_fail_the_import(self, fake_session):
        service = ImportService(fake_session)
        result = await service.ingest(StorageRowsImport(records=[{"patient_name": "Jane", "shoe_size": 9}]))

        assert result.status == "failed"
        assert "shoe_size" in result.error
        assert fake_session.of_type(Claim) == []
        [upload] = fake_session.of_type(CsvUpload)
        assert upload.status == "failed"
        assert "shoe_size" in upload.errors

    async def test_rejects_unknown_source(self, fake_session):
        with pytest.raises(TypeError):
            await ImportService(fake_session).ingest({"records": []})  # type: ignore[arg-type]
