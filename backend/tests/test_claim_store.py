"""Tests for turning transformed records into Claim rows."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from claimdesk.config import settings
from claimdesk.models import Claim
from claimdesk.services.claim_store import (
    ClaimRecordError,
    ClaimStore,
    parse_date,
    parse_timestamp,
    record_to_claim,
    to_amount,
)


class TestParsing:
    @pytest.mark.parametrize("raw, expected", [
        ("2024-01-15", date(2024, 1, 15)),
        ("01/15/2024", date(2024, 1, 15)),
        ("1/5/24", date(2024, 1, 5)),
        ("2024-01-15T10:30:00Z", date(2024, 1, 15)),
        (date(2024, 1, 15), date(2024, 1, 15)),
        (datetime(2024, 1, 15, 8, 0), date(2024, 1, 15)),
    ])
    def test_parse_date(self, raw, expected):
        assert parse_date(raw) == expected

    @pytest.mark.parametrize("raw", ["", "garbage", None, 42])
    def test_parse_date_failures(self, raw):
        assert parse_date(raw) is None

    def test_parse_timestamp_drops_timezone(self):
        assert parse_timestamp("2024-02-01T09:15:00+00:00") == datetime(2024, 2, 1, 9, 15)
        assert parse_timestamp("02/01/2024 09:15") == datetime(2024, 2, 1, 9, 15)
        assert parse_timestamp("2024-02-01") == datetime(2024, 2, 1)
        assert parse_timestamp("soon") is None

    def test_to_amount(self):
        assert to_amount(150.0) == Decimal("150.00")
        assert to_amount(-42.1) == Decimal("-42.10")
        assert to_amount(" 12.5 ") == Decimal("12.50")
        assert to_amount("not a number") == Decimal("0.00")

    @pytest.mark.parametrize("raw, expected", [
        ("$1,234.56", Decimal("1234.56")),
        ("($42.10)", Decimal("-42.10")),
        ("-$7", Decimal("-7.00")),
    ])
    def test_to_amount_reads_currency_text(self, raw, expected, caplog):
        with caplog.at_level(logging.WARNING, logger="claimdesk.services.claim_store"):
            assert to_amount(raw) == expected
        assert "not a plain number" in caplog.text

    @pytest.mark.parametrize("raw", [10_000_000_000, "$12,345,678,901", -1e12, 9_999_999_999.999])
    def test_to_amount_out_of_range(self, raw):
        with pytest.raises(ClaimRecordError, match="storable range"):
            to_amount(raw)

    def test_to_amount_largest_storable(self):
        assert to_amount("9999999999.99") == Decimal("9999999999.99")


class TestRecordToClaim:
    def test_converts_columns(self):
        claim = record_to_claim({
            "account_number": "A1",
            "patient_name": "Jane Doe",
            "service_date": "2024-01-15",
            "total_charged_amount": 150.0,
            "insurance_paid": 125.5,
            "statement_mailed": True,
            "statement_sent_at": "01/20/2024",
            "statement_created_date": "nope",
        }, upload_id=7)

        assert isinstance(claim, Claim)
        assert claim.upload_id == 7
        assert claim.service_date == date(2024, 1, 15)
        assert claim.total_charged_amount == Decimal("150.00")
        assert claim.insurance_paid == Decimal("125.50")
        assert claim.statement_mailed is True
        assert claim.statement_sent_at == datetime(2024, 1, 20)
        assert claim.statement_created_date is None

    def test_unparseable_service_date_becomes_today(self):
        claim = record_to_claim({"patient_name": "X", "service_date": "someday"})
        assert claim.service_date == date.today()

    def test_text_longer_than_column_is_rejected(self):
        with pytest.raises(ClaimRecordError, match="cpt_hcpcs_code is longer than 20"):
            record_to_claim({"patient_name": "X", "cpt_hcpcs_code": "Office visit, established patient"})

    def test_text_at_column_length_is_kept(self):
        claim = record_to_claim({"patient_name": "X", "billing_status": "B" * 20, "notes": "n" * 5000})
        assert claim.billing_status == "B" * 20
        assert len(claim.notes) == 5000

    def test_unknown_columns_are_rejected(self):
        with pytest.raises(ClaimRecordError, match="favorite_color"):
            record_to_claim({"patient_name": "X", "favorite_color": "blue"})


@pytest.mark.asyncio
class TestClaimStore:
    async def test_inserts_in_batches(self, fake_session, monkeypatch):
        monkeypatch.setattr(settings, "insert_batch_size", 2)
        records = [{"patient_name": f"P{i}", "service_date": "2024-01-15"} for i in range(5)]

        count = await ClaimStore(fake_session).insert_records(records, upload_id=3)

        assert count == 5
        assert fake_session.flushes == 3
        claims = fake_session.of_type(Claim)
        assert [c.patient_name for c in claims] == ["P0", "P1", "P2", "P3", "P4"]
        assert all(c.upload_id == 3 for c in claims)

    async def test_error_names_the_record(self, fake_session):
        records = [{"patient_name": "ok"}, {"patient_name": "ok"}, {"patient_name": "x" * 201}]
        with pytest.raises(ClaimRecordError, match="Record 3: patient_name"):
            await ClaimStore(fake_session).insert_records(records)
        assert fake_session.added == []

    async def test_bad_record_adds_nothing(self, fake_session):
        records = [{"patient_name": "ok"}, {"patient_name": "bad", "bogus": 1}]
        with pytest.raises(ClaimRecordError):
            await ClaimStore(fake_session).insert_records(records)
        assert fake_session.added == []
