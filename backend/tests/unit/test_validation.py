from datetime import date, datetime, time
from decimal import Decimal

import pytest

from clinica.core.exceptions import ValidationError
from clinica.core.validation import (
    parse_amount,
    parse_date,
    parse_non_negative_int,
    parse_time,
    require_text,
    validate_email,
)


@pytest.mark.unit
class TestValidationHelpers:
    def test_require_text_strips(self):
        assert require_text("  Ana ", "name") == "Ana"

    def test_require_text_blank_names_field(self):
        with pytest.raises(ValidationError) as exc:
            require_text("   ", "name")
        assert exc.value.field == "name"

    def test_validate_email_lowercases(self):
        assert validate_email("Ana@X.COM") == "ana@x.com"

    @pytest.mark.parametrize("value", ["ana", "@x.com", "ana@"])
    def test_validate_email_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            validate_email(value)

    @pytest.mark.parametrize(
        "value", ["02/12/2024", "2024-12-02", date(2024, 12, 2), datetime(2024, 12, 2, 8, 0)]
    )
    def test_parse_date_formats(self, value):
        assert parse_date(value) == date(2024, 12, 2)

    @pytest.mark.parametrize("value", ["09:30", "09:30:00", time(9, 30)])
    def test_parse_time_formats(self, value):
        assert parse_time(value) == time(9, 30)

    def test_parse_time_rejects_garbage(self):
        with pytest.raises(ValidationError):
            parse_time("half past nine")

    @pytest.mark.parametrize(
        "value, expected",
        [("1234,56", Decimal("1234.56")), ("1,234.56", Decimal("1234.56")), (3, Decimal("3"))],
    )
    def test_parse_amount(self, value, expected):
        assert parse_amount(value) == expected

    def test_parse_amount_rejects_negative(self):
        with pytest.raises(ValidationError):
            parse_amount("-1")

    def test_parse_non_negative_int(self):
        assert parse_non_negative_int("7", "stock") == 7
        with pytest.raises(ValidationError):
            parse_non_negative_int("-2", "stock")
        with pytest.raises(ValidationError):
            parse_non_negative_int("seven", "stock")
