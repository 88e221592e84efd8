"""Loan calculation: disbursal, interest, total repayable, schedule and late fee table.

The single entry point used by loan preview, disbursal and servicing. Results
are rebuilt on every call from the plan and fee data passed in; callers that
book a loan should persist ``CalculationResult.to_dict()`` as the snapshot.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

import pandas as pd

from config.constants import CalculationMethod, PlanType
from core.apr import calc_apr, calc_effective_annual_rate
from core.exceptions import ArithmeticInvariantError, InputError
from core.fees import FeeBreakdown, calc_fees, fees_to_frame
from core.interest import calc_interest
from core.late_fees import LateFeeRow, build_late_fee_table, late_fee_table_to_frame
from core.schedule import (
    Installment, build_installment_schedule, resolve_repayment_window, schedule_to_frame,
)
from loan_data.schema import LoanRequest
from loan_data.validator import validate_loan_request
from utils.date_utils import DateLike, parse_date
from utils.formatters import fmt_amount

log = logging.getLogger(__name__)


@dataclass
class CalculationResult:
    plan_id: str
    plan_type: PlanType
    principal: Decimal
    fees: FeeBreakdown
    interest: Decimal
    interest_days: int
    daily_interest_rate: Decimal
    calculation_method: CalculationMethod
    calculation_date: date
    repayment_date: date
    disbursal_amount: Decimal
    total_repayable: Decimal
    installments: List[Installment] = field(default_factory=list)
    late_fee_table: List[LateFeeRow] = field(default_factory=list)
    apr: Optional[Decimal] = None
    effective_annual_rate: Optional[float] = None

    @property
    def total_disbursal_deduction(self) -> Decimal:
        return self.fees.deduct_from_disbursal.total

    @property
    def total_repayable_addition(self) -> Decimal:
        return self.fees.add_to_total.total

    @property
    def disbursal_calculation(self) -> str:
        return (
            f"Principal ({fmt_amount(self.principal)}) - "
            f"Deduct Fees ({fmt_amount(self.total_disbursal_deduction)}) = "
            f"{fmt_amount(self.disbursal_amount)}"
        )

    @property
    def total_breakdown(self) -> str:
        return (
            f"Principal ({fmt_amount(self.principal)}) + "
            f"Interest ({fmt_amount(self.interest)}) + "
            f"Repayable Fees ({fmt_amount(self.total_repayable_addition)}) = "
            f"{fmt_amount(self.total_repayable)}"
        )

    def schedule_frame(self) -> pd.DataFrame:
        return schedule_to_frame(self.installments)

    def fees_frame(self) -> pd.DataFrame:
        return fees_to_frame(self.fees)

    def late_fee_frame(self) -> pd.DataFrame:
        return late_fee_table_to_frame(self.late_fee_table)

    def to_dict(self) -> dict:
        """JSON-ready rendering for quote responses and disbursal snapshots."""
        deduct = self.fees.deduct_from_disbursal
        add = self.fees.add_to_total
        return {
            "plan_id": self.plan_id,
            "plan_type": self.plan_type.value,
            "principal": float(self.principal),
            "fees": {
                "deduct_from_disbursal": [line.to_dict() for line in deduct.lines],
                "add_to_total": [line.to_dict() for line in add.lines],
            },
            "totals": {
                "disbursal_fee": float(deduct.fee_sum),
                "disbursal_fee_gst": float(deduct.gst_sum),
                "repayable_fee": float(add.fee_sum),
                "repayable_fee_gst": float(add.gst_sum),
                "total_disbursal_deduction": float(self.total_disbursal_deduction),
                "total_repayable_addition": float(self.total_repayable_addition),
            },
            "disbursal": {
                "amount": float(self.disbursal_amount),
                "calculation": self.disbursal_calculation,
            },
            "interest": {
                "amount": float(self.interest),
                "days": self.interest_days,
                "rate_per_day": float(self.daily_interest_rate),
                "calculation_method": self.calculation_method.value,
                "calculation_date": self.calculation_date.isoformat(),
                "repayment_date": self.repayment_date.isoformat(),
            },
            "total": {
                "repayable": float(self.total_repayable),
                "breakdown": self.total_breakdown,
            },
            "installments": [item.to_dict() for item in self.installments],
            "late_fee_table": [row.to_dict() for row in self.late_fee_table],
            "apr": float(self.apr) if self.apr is not None else None,
            "effective_annual_rate": self.effective_annual_rate,
        }


def calculate_loan(
    request: LoanRequest,
    today: Optional[DateLike] = None,
    custom_days: Optional[int] = None,
) -> CalculationResult:
    """Compute disbursal, interest, total repayable, schedule and late fee table.

    ``today`` pins the calculation date (previews, replays); it defaults to the
    current date. ``custom_days`` replaces the plan's interest day count while
    due dates still follow the plan.
    """
    validate_loan_request(request)
    plan = request.plan
    principal = request.principal
    calculation_date = parse_date(today) or date.today()

    window = resolve_repayment_window(plan, request.salary_day_of_month, calculation_date)
    days = window.days
    method = window.calculation_method
    if custom_days is not None:
        if custom_days < 0:
            raise InputError("Custom days cannot be negative", {"custom_days": custom_days})
        days = custom_days
        method = CalculationMethod.CUSTOM

    interest = calc_interest(principal, plan.daily_interest_rate, days)
    fees = calc_fees(principal, request.fees)

    deduct = fees.deduct_from_disbursal
    disbursal_amount = principal - deduct.fee_sum - deduct.gst_sum
    if disbursal_amount < 0:
        log.error(
            "Disbursal fees %s exceed principal %s on plan %s",
            deduct.total, principal, plan.plan_id,
        )
        raise ArithmeticInvariantError(
            "Disbursal amount would be negative",
            {
                "principal": str(principal),
                "deduct_fee_sum": str(deduct.fee_sum),
                "deduct_gst_sum": str(deduct.gst_sum),
            },
        )

    add = fees.add_to_total
    total_repayable = principal + interest + add.fee_sum + add.gst_sum

    installments = []
    if plan.plan_type == PlanType.MULTI_INSTALLMENT:
        installments = build_installment_schedule(total_repayable, window.due_dates)

    total_charges = deduct.total + add.total + interest
    apr = calc_apr(total_charges, principal, days) if days > 0 else None
    if installments:
        repayments = [(item.due_date, item.amount) for item in installments]
    else:
        repayments = [(window.repayment_date, total_repayable)]

    result = CalculationResult(
        plan_id=plan.plan_id,
        plan_type=plan.plan_type,
        principal=principal,
        fees=fees,
        interest=interest,
        interest_days=days,
        daily_interest_rate=plan.daily_interest_rate,
        calculation_method=method,
        calculation_date=calculation_date,
        repayment_date=window.repayment_date,
        disbursal_amount=disbursal_amount,
        total_repayable=total_repayable,
        installments=installments,
        late_fee_table=build_late_fee_table(plan.late_fee_tiers),
        apr=apr,
        effective_annual_rate=calc_effective_annual_rate(
            disbursal_amount, calculation_date, repayments,
        ),
    )
    log.debug(
        "Calculated plan %s (%s): principal=%s days=%s interest=%s disbursal=%s total=%s",
        plan.plan_id, plan.plan_type.value, principal, days, interest,
        disbursal_amount, total_repayable,
    )
    return result
