from typing import Iterable, List, Optional

from config.constants import PlanType
from core.exceptions import ConfigurationError, InputError
from loan_data.schema import FeeDefinition, LateFeeTier, LoanPlan, LoanRequest
from utils.date_utils import validate_salary_day


def calc_total_duration_days(plan: LoanPlan) -> int:
    """Plan duration: repayment_days, or frequency days x installment count."""
    if plan.plan_type == PlanType.SINGLE:
        if plan.repayment_days is None:
            raise ConfigurationError(
                "repayment_days is required for single payment plans",
                {"plan_id": plan.plan_id},
            )
        return plan.repayment_days
    if plan.installment_frequency is None or plan.installment_count is None:
        raise ConfigurationError(
            "installment_frequency and installment_count are required for multi-installment plans",
            {"plan_id": plan.plan_id},
        )
    return plan.installment_frequency.days * plan.installment_count


def validate_loan_plan(plan: LoanPlan) -> None:
    """Reject a plan whose fields contradict its declared type."""
    duration = calc_total_duration_days(plan)

    if plan.plan_type == PlanType.SINGLE:
        if plan.repayment_days <= 0:
            raise ConfigurationError(
                "repayment_days must be greater than 0",
                {"plan_id": plan.plan_id, "repayment_days": plan.repayment_days},
            )
    else:
        if plan.installment_count < 1:
            raise ConfigurationError(
                "installment_count must be at least 1",
                {"plan_id": plan.plan_id, "installment_count": plan.installment_count},
            )
        if plan.repayment_days is not None and plan.repayment_days <= 0:
            raise ConfigurationError(
                "repayment_days must be greater than 0 when set",
                {"plan_id": plan.plan_id, "repayment_days": plan.repayment_days},
            )

    if plan.total_duration_days is not None and plan.total_duration_days != duration:
        raise ConfigurationError(
            "total_duration_days does not match the plan definition",
            {
                "plan_id": plan.plan_id,
                "total_duration_days": plan.total_duration_days,
                "expected": duration,
            },
        )

    if plan.daily_interest_rate < 0:
        raise ConfigurationError(
            "daily_interest_rate cannot be negative",
            {"plan_id": plan.plan_id},
        )

    validate_late_fee_tiers(plan.late_fee_tiers)


def validate_fee(fee: FeeDefinition) -> None:
    if fee.percent < 0:
        raise ConfigurationError(
            f"Fee percent cannot be negative: {fee.name}",
            {"fee_name": fee.name, "percent": str(fee.percent)},
        )


def validate_late_fee_tiers(tiers: Iterable[LateFeeTier]) -> List[LateFeeTier]:
    """Check tier ranges and return them in tier_order.

    Ranges start at day 1 or later, never run backwards, and are contiguous.
    Only the last tier may be open-ended.
    """
    ordered = sorted(tiers, key=lambda t: t.tier_order)
    orders = [t.tier_order for t in ordered]
    if len(set(orders)) != len(orders):
        raise ConfigurationError("Duplicate late fee tier_order", {"tier_orders": orders})

    previous_end: Optional[int] = None
    for index, tier in enumerate(ordered):
        details = {
            "tier_order": tier.tier_order,
            "days_overdue_start": tier.days_overdue_start,
            "days_overdue_end": tier.days_overdue_end,
        }
        if tier.days_overdue_start < 1:
            raise ConfigurationError("Late fee tier must start on day 1 or later", details)
        if tier.days_overdue_end is not None and tier.days_overdue_end < tier.days_overdue_start:
            raise ConfigurationError("Late fee tier ends before it starts", details)
        if tier.penalty_percent < 0:
            raise ConfigurationError("Late fee tier percent cannot be negative", details)
        if index > 0:
            if previous_end is None:
                raise ConfigurationError("Only the last late fee tier may be open-ended", details)
            if tier.days_overdue_start != previous_end + 1:
                raise ConfigurationError(
                    "Late fee tiers must be contiguous",
                    dict(details, previous_end=previous_end),
                )
        previous_end = tier.days_overdue_end

    return ordered


def validate_loan_request(request: LoanRequest) -> None:
    """Input checks first (principal, salary day), then plan and fee configuration."""
    if request.principal <= 0:
        raise InputError(
            "Principal must be greater than 0",
            {"principal": str(request.principal)},
        )
    if request.salary_day_of_month is not None:
        validate_salary_day(request.salary_day_of_month)

    validate_loan_plan(request.plan)
    for fee in request.fees:
        validate_fee(fee)
