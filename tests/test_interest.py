"""Interest accrual tests"""
from datetime import date
from decimal import Decimal

import pytest

from core.exceptions import InputError
from core.interest import calc_interest, calc_interest_till_date


class TestCalcInterest:
    def test_simple_daily_interest(self):
        assert calc_interest(10000, 0.001, 15) == Decimal(150)

    def test_float_rate_is_exact(self):
        # 0.001 must not pick up binary float noise
        assert calc_interest(Decimal("123456"), 0.001, 30) == Decimal(3704)

    def test_rounding(self):
        assert calc_interest(1000, "0.0015", 1) == Decimal(2)  # 1.5 -> 2
        assert calc_interest(333, "0.0015", 1) == Decimal(0)  # 0.4995 -> 0

    def test_zero_days(self):
        assert calc_interest(10000, "0.001", 0) == Decimal(0)

    def test_negative_days(self):
        with pytest.raises(InputError):
            calc_interest(10000, "0.001", -1)


class TestInterestTillDate:
    def test_same_day_counts_one_day(self):
        d = date(2025, 1, 10)
        accrued = calc_interest_till_date(10000, "0.001", d, d)
        assert accrued.exhausted_days == 1
        assert accrued.amount == Decimal(10)

    def test_inclusive_range(self):
        accrued = calc_interest_till_date(10000, "0.001", date(2025, 1, 10), date(2025, 1, 19))
        assert accrued.exhausted_days == 10
        assert accrued.amount == Decimal(100)

    def test_as_of_before_start(self):
        with pytest.raises(InputError):
            calc_interest_till_date(10000, "0.001", date(2025, 1, 10), date(2025, 1, 9))
