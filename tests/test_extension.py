"""Loan extension tests"""
from datetime import date
from decimal import Decimal

import pytest

from config.constants import ApplicationMethod, CalculationMethod, InstallmentFrequency, PlanType
from core.calculator import calculate_loan
from core.exceptions import InputError
from core.extension import (
    calc_extension_charges,
    calculate_extension,
    check_extension_eligibility,
    shift_due_dates,
)
from loan_data.schema import FeeDefinition, LoanPlan, LoanRequest


def _monthly(align=False):
    return LoanPlan(
        plan_id="emi", plan_type=PlanType.MULTI_INSTALLMENT, daily_interest_rate="0.001",
        installment_frequency=InstallmentFrequency.MONTHLY, installment_count=3,
        align_to_salary_date=align,
    )


class TestEligibility:
    def test_window_around_due_date(self):
        due = date(2025, 1, 25)
        first = check_extension_eligibility(due, date(2025, 1, 20))
        last = check_extension_eligibility(due, date(2025, 2, 9))
        assert first.eligible and last.eligible
        assert first.window_start == date(2025, 1, 20)
        assert first.window_end == date(2025, 2, 9)

    def test_too_early(self):
        result = check_extension_eligibility(date(2025, 1, 25), date(2025, 1, 19))
        assert not result.eligible
        assert result.reason == "Extension window opens on 2025-01-20"

    def test_expired(self):
        result = check_extension_eligibility(date(2025, 1, 25), date(2025, 2, 10))
        assert not result.eligible
        assert result.reason == "Extension window expired on 2025-02-09"

    def test_extension_cap(self):
        assert not check_extension_eligibility(date(2025, 1, 25), date(2025, 1, 25), extension_count=4).eligible
        assert check_extension_eligibility(date(2025, 1, 25), date(2025, 1, 25), extension_count=3).eligible

    def test_pending_request(self):
        assert not check_extension_eligibility(date(2025, 1, 25), date(2025, 1, 25), pending=True).eligible

    def test_only_first_installment(self):
        due = date(2025, 1, 25)
        assert check_extension_eligibility(due, due, installment_index=0).eligible
        assert not check_extension_eligibility(due, due, installment_index=1).eligible


class TestShiftDueDates:
    def test_fixed_single(self, single_plan):
        schedule = shift_due_dates(single_plan, [date(2025, 1, 25)])
        assert schedule.due_dates == [date(2025, 2, 9)]
        assert schedule.extension_period_days == 15
        assert schedule.calculation_method == CalculationMethod.FIXED

    def test_salary_aligned_single(self):
        plan = LoanPlan(
            plan_id="salary", plan_type=PlanType.SINGLE, daily_interest_rate="0.001",
            repayment_days=15, align_to_salary_date=True,
        )
        schedule = shift_due_dates(plan, [date(2025, 1, 31)], salary_day=31)
        assert schedule.due_dates == [date(2025, 2, 28)]
        assert schedule.extension_period_days == 28
        assert schedule.calculation_method == CalculationMethod.SALARY_DATE

    def test_aligned_plan_without_salary_day_is_fixed(self):
        plan = _monthly(align=True)
        schedule = shift_due_dates(plan, [date(2025, 2, 10), date(2025, 3, 10)])
        assert schedule.due_dates == [date(2025, 2, 25), date(2025, 3, 25)]

    def test_salary_aligned_installments(self):
        dates = [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31)]
        schedule = shift_due_dates(_monthly(align=True), dates, salary_day=31)
        assert schedule.due_dates == [date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30)]
        assert schedule.extension_period_days == 31
        assert schedule.repayment_date == date(2025, 4, 30)

    def test_fixed_installments(self):
        dates = [date(2025, 1, 17), date(2025, 1, 24)]
        schedule = shift_due_dates(_monthly(), dates)
        assert schedule.due_dates == [date(2025, 2, 1), date(2025, 2, 8)]
        assert schedule.extension_period_days == 15

    def test_no_due_dates(self, single_plan):
        with pytest.raises(InputError):
            shift_due_dates(single_plan, [])


class TestExtensionCharges:
    def test_fee_gst_and_interest(self):
        charges = calc_extension_charges(10000, "0.001", date(2025, 1, 10), date(2025, 1, 24))
        assert charges.fee.amount == Decimal(2100)
        assert charges.fee.gst == Decimal(378)
        assert charges.interest.exhausted_days == 15
        assert charges.interest.amount == Decimal(150)
        assert charges.total == Decimal(2628)


class TestCalculateExtension:
    def test_single_payment_loan(self, single_plan, processing_fee, today):
        convenience = FeeDefinition(
            name="Convenience fee", percent=2, application_method=ApplicationMethod.ADD_TO_TOTAL,
        )
        request = LoanRequest(principal=10000, plan=single_plan, fees=[processing_fee, convenience])
        result = calculate_loan(request, today=today)

        quote = calculate_extension(request, result, as_of="2025-01-24")
        assert quote.schedule.due_dates == [date(2025, 2, 9)]
        assert quote.charges.total == Decimal(2628)
        assert quote.outstanding_balance == Decimal(10236)

        data = quote.to_dict()
        assert data["repayment_date"] == "2025-02-09"
        assert data["total_extension_amount"] == 2628.0

    def test_installment_loan_uses_first_due_date(self, monthly_plan, today):
        request = LoanRequest(principal=9000, plan=monthly_plan)
        result = calculate_loan(request, today=today)

        quote = calculate_extension(request, result, as_of=date(2025, 2, 10))
        assert quote.schedule.due_dates == [date(2025, 2, 25), date(2025, 3, 25), date(2025, 4, 25)]
        assert quote.charges.interest.exhausted_days == 32

    def test_not_eligible(self, single_plan, today):
        request = LoanRequest(principal=10000, plan=single_plan)
        result = calculate_loan(request, today=today)
        with pytest.raises(InputError):
            calculate_extension(request, result, as_of=date(2025, 1, 15))
        with pytest.raises(InputError):
            calculate_extension(request, result, as_of=date(2025, 1, 24), extension_count=4)
