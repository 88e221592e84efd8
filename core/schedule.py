"""
Repayment window and installment schedule.

Single payment plans resolve to one repayment date. Multi-installment plans
accrue interest over the plan's total duration and expand into dated
installments whose amounts sum exactly to the total repayable.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

import pandas as pd

from config.constants import (
    CalculationMethod, InstallmentFrequency, PlanType, INSTALLMENT_SCHEDULE_COLUMNS,
)
from config.settings import DEFAULT_MIN_FIRST_INSTALLMENT_DAYS
from core.exceptions import ArithmeticInvariantError, ConfigurationError
from loan_data.schema import LoanPlan
from loan_data.validator import calc_total_duration_days
from utils.date_utils import (
    add_days, add_months, days_between, next_salary_date, salary_date_for_month_offset,
)
from utils.money import round_amount

log = logging.getLogger(__name__)


@dataclass
class RepaymentWindow:
    days: int  # interest days
    calculation_method: CalculationMethod
    repayment_date: date  # final due date
    due_dates: List[date] = field(default_factory=list)

    @property
    def first_due_date(self) -> date:
        return self.due_dates[0]


@dataclass
class Installment:
    number: int
    due_date: date
    amount: Decimal

    def to_dict(self) -> dict:
        return {
            "installment_number": self.number,
            "due_date": self.due_date.isoformat(),
            "amount": float(self.amount),
        }


def extend_to_minimum_term(
    today: date,
    salary_date: date,
    salary_day: int,
    minimum_days: int,
) -> date:
    """Move a salary-aligned due date to later paydays until the term is long enough.

    A due date ``minimum_days`` or more after ``today`` is kept as is; a shorter
    one rolls to the following month's salary date (repeatedly, for minimums
    longer than a month). The term is never shortened.
    """
    due = salary_date
    while days_between(today, due) < minimum_days:
        due = next_salary_date(due, salary_day)
    return due


def _uses_salary_date(plan: LoanPlan, salary_day: Optional[int]) -> bool:
    return bool(plan.align_to_salary_date) and salary_day is not None


def single_payment_window(
    plan: LoanPlan,
    salary_day: Optional[int],
    today: date,
) -> RepaymentWindow:
    if plan.repayment_days is None:
        raise ConfigurationError(
            "repayment_days is required for single payment plans",
            {"plan_id": plan.plan_id},
        )

    if _uses_salary_date(plan, salary_day):
        first_payday = next_salary_date(today, salary_day)
        repayment_date = extend_to_minimum_term(
            today, first_payday, salary_day, plan.repayment_days,
        )
        method = CalculationMethod.SALARY_DATE
    else:
        repayment_date = add_days(today, plan.repayment_days)
        method = CalculationMethod.FIXED

    return RepaymentWindow(
        days=days_between(today, repayment_date),
        calculation_method=method,
        repayment_date=repayment_date,
        due_dates=[repayment_date],
    )


def installment_due_dates(
    plan: LoanPlan,
    salary_day: Optional[int],
    today: date,
) -> List[date]:
    """Due date of every installment, in order."""
    frequency = plan.installment_frequency
    count = plan.installment_count
    if frequency is None or count is None:
        raise ConfigurationError(
            "installment_frequency and installment_count are required for multi-installment plans",
            {"plan_id": plan.plan_id},
        )
    if count < 1:
        raise ConfigurationError(
            "installment_count must be at least 1",
            {"plan_id": plan.plan_id, "installment_count": count},
        )

    if frequency == InstallmentFrequency.MONTHLY:
        if _uses_salary_date(plan, salary_day):
            minimum_days = plan.repayment_days or DEFAULT_MIN_FIRST_INSTALLMENT_DAYS
            anchor = extend_to_minimum_term(
                today, next_salary_date(today, salary_day), salary_day, minimum_days,
            )
            return [
                salary_date_for_month_offset(anchor, salary_day, step)
                for step in range(count)
            ]
        return [add_months(today, step) for step in range(1, count + 1)]

    return [add_days(today, frequency.days * step) for step in range(1, count + 1)]


def multi_installment_window(
    plan: LoanPlan,
    salary_day: Optional[int],
    today: date,
) -> RepaymentWindow:
    due_dates = installment_due_dates(plan, salary_day, today)
    salary_aligned = (
        plan.installment_frequency == InstallmentFrequency.MONTHLY
        and _uses_salary_date(plan, salary_day)
    )
    return RepaymentWindow(
        days=calc_total_duration_days(plan),
        calculation_method=(
            CalculationMethod.SALARY_DATE if salary_aligned else CalculationMethod.FIXED
        ),
        repayment_date=due_dates[-1],
        due_dates=due_dates,
    )


def resolve_repayment_window(
    plan: LoanPlan,
    salary_day: Optional[int],
    today: date,
) -> RepaymentWindow:
    if plan.plan_type == PlanType.SINGLE:
        return single_payment_window(plan, salary_day, today)
    return multi_installment_window(plan, salary_day, today)


def split_installments(total: Decimal, count: int) -> List[Decimal]:
    """Equal rounded installments; the last one absorbs the rounding remainder."""
    if count < 1:
        raise ConfigurationError("installment_count must be at least 1", {"count": count})
    amount = round_amount(total / count)
    last = total - amount * (count - 1)
    if last < 0:
        raise ArithmeticInvariantError(
            "Final installment would be negative",
            {"total": str(total), "count": count, "installment": str(amount)},
        )
    amounts = [amount] * (count - 1) + [last]
    if sum(amounts, Decimal(0)) != total:
        raise ArithmeticInvariantError(
            "Installments do not reconcile to total repayable",
            {"total": str(total), "installments": [str(a) for a in amounts]},
        )
    return amounts


def build_installment_schedule(total: Decimal, due_dates: List[date]) -> List[Installment]:
    amounts = split_installments(total, len(due_dates))
    schedule = [
        Installment(number=i + 1, due_date=due, amount=amount)
        for i, (due, amount) in enumerate(zip(due_dates, amounts))
    ]
    log.debug(
        "Built %d installments totalling %s, first due %s",
        len(schedule), total, schedule[0].due_date,
    )
    return schedule


def schedule_to_frame(schedule: List[Installment]) -> pd.DataFrame:
    """Installment table with a running total, for CSV / spreadsheet export."""
    records = []
    cumulative = Decimal(0)
    for item in schedule:
        cumulative += item.amount
        records.append({
            "installment_number": item.number,
            "due_date": item.due_date.strftime("%Y-%m-%d"),
            "amount": float(item.amount),
            "cumulative_amount": float(cumulative),
        })
    return pd.DataFrame(records, columns=INSTALLMENT_SCHEDULE_COLUMNS)
