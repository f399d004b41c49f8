from datetime import date

import pytest

from clinica.services.holiday_calendar import (
    HOLIDAY_MESSAGE,
    SUNDAY_MESSAGE,
    holidays_for_year,
    is_holiday,
    is_sunday,
    non_bookable_reason,
)


@pytest.mark.unit
@pytest.mark.appointment
class TestHolidayCalendar:
    def test_year_expansion_contains_all_fixed_dates(self):
        holidays = holidays_for_year(2024)

        assert len(holidays) == 9
        assert date(2024, 7, 28) in holidays
        assert date(2024, 12, 25) in holidays

    def test_expansion_is_cached_per_year(self):
        assert holidays_for_year(2025) is holidays_for_year(2025)

    def test_holiday_applies_to_any_year(self):
        assert is_holiday(date(2031, 5, 1))
        assert not is_holiday(date(2031, 5, 2))

    def test_sunday_detection(self):
        assert is_sunday(date(2024, 12, 1))
        assert not is_sunday(date(2024, 12, 2))

    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2024, 12, 1), SUNDAY_MESSAGE),
            (date(2024, 12, 25), HOLIDAY_MESSAGE),
            (date(2024, 12, 2), None),
        ],
    )
    def test_non_bookable_reason(self, day, expected):
        assert non_bookable_reason(day) == expected
