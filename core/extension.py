"""Loan extension: request window, shifted due dates and extension charges.

An extension pushes every outstanding due date out by one period and is paid
for with a percentage fee on principal (plus GST) and the interest accrued so
far on the running loan.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from config.constants import ApplicationMethod, CalculationMethod, InstallmentFrequency
from config.settings import (
    EXTENSION_FEE_PERCENT, EXTENSION_FIXED_DAYS, EXTENSION_WINDOW_AFTER_DAYS,
    EXTENSION_WINDOW_BEFORE_DAYS, MAX_EXTENSIONS,
)
from core.calculator import CalculationResult
from core.exceptions import InputError
from core.fees import FeeLine, calc_fee
from core.interest import AccruedInterest, calc_interest_till_date
from loan_data.schema import FeeDefinition, LoanPlan, LoanRequest
from utils.date_utils import (
    DateLike, add_days, days_between, parse_date, salary_date_for_month_offset,
)
from utils.money import Number, to_decimal

log = logging.getLogger(__name__)

EXTENSION_FEE = FeeDefinition(
    name="Extension fee",
    percent=EXTENSION_FEE_PERCENT,
    application_method=ApplicationMethod.ADD_TO_TOTAL,
)


@dataclass
class ExtensionEligibility:
    eligible: bool
    reason: str = ""
    window_start: Optional[date] = None
    window_end: Optional[date] = None


def check_extension_eligibility(
    due_date: date,
    as_of: date,
    extension_count: int = 0,
    pending: bool = False,
    installment_index: Optional[int] = None,
) -> ExtensionEligibility:
    """Whether the loan due on ``due_date`` can be extended on ``as_of``.

    Requests open 5 days before the due date and close 15 days after it. A
    loan can be extended at most MAX_EXTENSIONS times, one request at a time,
    and on installment loans only the first installment qualifies.
    """
    if extension_count >= MAX_EXTENSIONS:
        return ExtensionEligibility(False, f"Maximum {MAX_EXTENSIONS} extensions already availed")
    if pending:
        return ExtensionEligibility(False, "A pending extension request already exists")
    if installment_index not in (None, 0):
        return ExtensionEligibility(False, "Only the first installment can be extended")

    window_start = add_days(due_date, -EXTENSION_WINDOW_BEFORE_DAYS)
    window_end = add_days(due_date, EXTENSION_WINDOW_AFTER_DAYS)
    if as_of < window_start:
        reason = f"Extension window opens on {window_start.isoformat()}"
    elif as_of > window_end:
        reason = f"Extension window expired on {window_end.isoformat()}"
    else:
        return ExtensionEligibility(True, "", window_start, window_end)
    return ExtensionEligibility(False, reason, window_start, window_end)


@dataclass
class ExtendedSchedule:
    due_dates: List[date]
    extension_period_days: int
    calculation_method: CalculationMethod

    @property
    def repayment_date(self) -> date:
        return self.due_dates[-1]


def _extends_to_payday(plan: LoanPlan, salary_day: Optional[int]) -> bool:
    if not plan.align_to_salary_date or salary_day is None:
        return False
    if plan.is_multi_installment:
        return plan.installment_frequency == InstallmentFrequency.MONTHLY
    return True


def shift_due_dates(
    plan: LoanPlan,
    due_dates: Sequence[date],
    salary_day: Optional[int] = None,
) -> ExtendedSchedule:
    """Move every due date out by one extension period.

    Salary-aligned plans move each date to the next month's payday. The period
    is then the gap between the first two new dates, or how far a lone due
    date moved. Other plans add a fixed 15 days to each date.
    """
    if not due_dates:
        raise InputError("No due dates to extend")

    if _extends_to_payday(plan, salary_day):
        new_dates = [salary_date_for_month_offset(d, salary_day, 1) for d in due_dates]
        if len(new_dates) > 1:
            period = days_between(new_dates[0], new_dates[1])
        else:
            period = days_between(due_dates[0], new_dates[0])
        return ExtendedSchedule(new_dates, period, CalculationMethod.SALARY_DATE)

    new_dates = [add_days(d, EXTENSION_FIXED_DAYS) for d in due_dates]
    return ExtendedSchedule(new_dates, EXTENSION_FIXED_DAYS, CalculationMethod.FIXED)


@dataclass
class ExtensionCharges:
    fee: FeeLine
    interest: AccruedInterest

    @property
    def total(self) -> Decimal:
        return self.fee.total_with_gst + self.interest.amount


def calc_extension_charges(
    principal: Number,
    daily_rate: Number,
    start_date: date,
    as_of: date,
) -> ExtensionCharges:
    """Extension fee with GST plus interest accrued from ``start_date`` to ``as_of``."""
    return ExtensionCharges(
        fee=calc_fee(to_decimal(principal), EXTENSION_FEE),
        interest=calc_interest_till_date(principal, daily_rate, start_date, as_of),
    )


def calc_outstanding_balance(result: CalculationResult) -> Decimal:
    """Principal plus the fees and GST added to the repayable total."""
    return result.principal + result.total_repayable_addition


@dataclass
class ExtensionQuote:
    eligibility: ExtensionEligibility
    schedule: ExtendedSchedule
    charges: ExtensionCharges
    outstanding_balance: Decimal

    def to_dict(self) -> dict:
        return {
            "window_start": self.eligibility.window_start.isoformat(),
            "window_end": self.eligibility.window_end.isoformat(),
            "due_dates": [d.isoformat() for d in self.schedule.due_dates],
            "repayment_date": self.schedule.repayment_date.isoformat(),
            "extension_period_days": self.schedule.extension_period_days,
            "calculation_method": self.schedule.calculation_method.value,
            "extension_fee": float(self.charges.fee.amount),
            "extension_fee_gst": float(self.charges.fee.gst),
            "interest_days": self.charges.interest.exhausted_days,
            "interest_till_date": float(self.charges.interest.amount),
            "total_extension_amount": float(self.charges.total),
            "outstanding_balance": float(self.outstanding_balance),
        }


def calculate_extension(
    request: LoanRequest,
    result: CalculationResult,
    as_of: Optional[DateLike] = None,
    extension_count: int = 0,
    pending: bool = False,
) -> ExtensionQuote:
    """Quote an extension of a booked loan.

    ``result`` is the calculation the loan was disbursed on; its calculation
    date is where interest accrual starts. Raises InputError with the reason
    when the loan is not eligible on ``as_of``.
    """
    as_of = parse_date(as_of) or date.today()
    due_dates = [item.due_date for item in result.installments] or [result.repayment_date]

    eligibility = check_extension_eligibility(due_dates[0], as_of, extension_count, pending)
    if not eligibility.eligible:
        raise InputError(
            eligibility.reason,
            {"plan_id": result.plan_id, "due_date": due_dates[0].isoformat(), "as_of": as_of.isoformat()},
        )

    quote = ExtensionQuote(
        eligibility=eligibility,
        schedule=shift_due_dates(request.plan, due_dates, request.salary_day_of_month),
        charges=calc_extension_charges(
            result.principal, result.daily_interest_rate, result.calculation_date, as_of,
        ),
        outstanding_balance=calc_outstanding_balance(result),
    )
    log.debug(
        "Extension quote for plan %s on %s: period=%s fee=%s gst=%s interest=%s",
        result.plan_id, as_of, quote.schedule.extension_period_days,
        quote.charges.fee.amount, quote.charges.fee.gst, quote.charges.interest.amount,
    )
    return quote
