from datetime import date, datetime

import pytest

from schoolpay.payroll.proration import calculate_prorated_base, count_working_days, parse_period


@pytest.mark.parametrize(
    "period, expected",
    [
        ("July 2024", (date(2024, 7, 1), date(2024, 7, 31))),
        ("Jan 2025", (date(2025, 1, 1), date(2025, 1, 31))),
        ("february 2024", (date(2024, 2, 1), date(2024, 2, 29))),
        ("2024-11", (date(2024, 11, 1), date(2024, 11, 30))),
    ],
)
def test_parse_period(period, expected):
    assert parse_period(period) == expected


def test_unparseable_period_falls_back_to_current_month():
    assert parse_period("next payday", today=date(2025, 3, 14)) == (date(2025, 3, 1), date(2025, 3, 31))


def test_count_working_days_skips_weekends():
    # 2024-07-01 is a Monday
    assert count_working_days(date(2024, 7, 1), date(2024, 7, 7)) == 5
    assert count_working_days(date(2024, 7, 1), date(2024, 7, 31)) == 23


def test_no_hire_date_pays_full_month():
    result = calculate_prorated_base(10000, None, "Jan 2025")
    assert result.prorated_base == 10000
    assert not result.is_partial


def test_hired_before_period_pays_full_month():
    result = calculate_prorated_base(10000, datetime(2020, 9, 1), "July 2024")
    assert result.prorated_base == 10000
    assert result.days_worked == result.total_days == 23


def test_mid_period_hire_is_prorated_on_working_days():
    result = calculate_prorated_base(10000, date(2024, 7, 15), "July 2024")
    assert (result.days_worked, result.total_days) == (13, 23)
    assert result.prorated_base == pytest.approx(5652.17)


def test_hire_after_period_earns_nothing():
    result = calculate_prorated_base(10000, date(2024, 8, 1), "July 2024")
    assert result.prorated_base == 0
    assert result.days_worked == 0
