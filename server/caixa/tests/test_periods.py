from datetime import date, datetime

import pytest

from caixa.reports.errors import ValidationError
from caixa.reports.periods import DateRange, DREPeriod, parse_date


def test_parse_date_drops_time_of_day():
    assert parse_date("2024-06-15T23:59:00Z") == date(2024, 6, 15)
    assert parse_date(datetime(2024, 6, 15, 8, 30)) == date(2024, 6, 15)


@pytest.mark.parametrize("value", [None, "", "15/06/2024", "2024-02-30", 20240615])
def test_parse_date_rejects_malformed_values(value):
    with pytest.raises(ValidationError):
        parse_date(value)


def test_previous_range_has_equal_length():
    june = DateRange(date(2024, 6, 1), date(2024, 6, 30))

    assert june.previous() == DateRange(date(2024, 5, 2), date(2024, 5, 31))
    assert DateRange(date(2024, 3, 1), date(2024, 3, 1)).previous() == DateRange(date(2024, 2, 29), date(2024, 2, 29))


def test_range_at_start_of_calendar_has_no_previous_range():
    first_days = DateRange(date(1, 1, 1), date(1, 1, 10))
    second_week = DateRange(date(1, 1, 8), date(1, 1, 14))

    with pytest.raises(ValidationError):
        first_days.previous()
    assert second_week.previous() == DateRange(date(1, 1, 1), date(1, 1, 7))


def test_previous_month_rolls_back_the_year():
    assert DREPeriod(2024, 1).previous() == DREPeriod(2023, 12)
    assert DREPeriod(2024, 3).previous() == DREPeriod(2024, 2)


def test_first_month_of_calendar_has_no_previous_month():
    with pytest.raises(ValidationError):
        DREPeriod(1, 1).previous()
    assert DREPeriod(1, 2).previous() == DREPeriod(1, 1)
