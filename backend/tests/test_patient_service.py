from datetime import date

from claimdesk.services.patient_service import calculate_account_number


class TestCalculateAccountNumber:
    def test_with_date_of_birth(self):
        assert calculate_account_number("Jane", "Doe", date_of_birth=date(1985, 3, 7)) == "J03007D1985"

    def test_initials_from_patient_name(self):
        number = calculate_account_number(None, None, "mary ann smith", date(2001, 12, 25))
        assert number == "M12025S2001"

    def test_without_date_of_birth_uses_current_month(self):
        assert calculate_account_number("Jane", "Doe", today=date(2024, 6, 3)) == "J2406D"

    def test_placeholder_initials(self):
        assert calculate_account_number(None, None, today=date(2024, 6, 3)) == "P2406N"
