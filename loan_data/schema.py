"""Input records consumed by the calculation engine.

Enum and numeric fields are coerced in ``__post_init__``; an unknown plan
type, frequency or application method, or a value that is not a number,
fails at construction time with ConfigurationError. The ``from_record``
adapters also reject rows missing a required column.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Type

from config.constants import (
    ApplicationMethod, InstallmentFrequency, PlanType, PLAN_TYPE_ALIASES,
)
from core.exceptions import ConfigurationError, InputError
from utils.money import to_decimal


def _coerce_enum(enum_cls: Type[Enum], value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = [e.value for e in enum_cls]
        raise ConfigurationError(
            f"Unknown {field_name}: {value!r}",
            {"field": field_name, "allowed": allowed},
        )


def _coerce_number(value, field_name: str) -> Decimal:
    try:
        return to_decimal(value)
    except InputError:
        raise ConfigurationError(f"{field_name} is not a number: {value!r}")


def _coerce_int(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} is not a whole number: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{field_name} is not a whole number: {value!r}")


def _optional_int(value, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return _coerce_int(value, field_name)


def _required(record: Mapping[str, Any], column: str):
    value = record.get(column)
    if value is None or value == "":
        raise ConfigurationError(f"Missing column {column!r}", {"column": column})
    return value


@dataclass
class FeeDefinition:
    name: str
    percent: Decimal  # of principal
    application_method: ApplicationMethod

    def __post_init__(self):
        self.percent = _coerce_number(self.percent, "fee percent")
        self.application_method = _coerce_enum(
            ApplicationMethod, self.application_method, "application method",
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "FeeDefinition":
        return cls(
            name=record.get("fee_name") or "Unknown Fee",
            percent=_required(record, "fee_percent"),
            application_method=record.get("application_method"),
        )


@dataclass
class LateFeeTier:
    days_overdue_start: int
    days_overdue_end: Optional[int]  # None = open-ended
    penalty_percent: Decimal
    tier_order: int
    name: str = ""

    def __post_init__(self):
        self.days_overdue_start = _coerce_int(self.days_overdue_start, "days_overdue_start")
        self.days_overdue_end = _optional_int(self.days_overdue_end, "days_overdue_end")
        self.tier_order = _coerce_int(self.tier_order, "tier_order")
        self.penalty_percent = _coerce_number(self.penalty_percent, "penalty percent")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "LateFeeTier":
        fee_type = record.get("fee_type", "percentage")
        if fee_type != "percentage":
            raise ConfigurationError(
                f"Unsupported late fee type: {fee_type!r}",
                {"tier_name": record.get("tier_name")},
            )
        return cls(
            days_overdue_start=_required(record, "days_overdue_start"),
            days_overdue_end=record.get("days_overdue_end"),
            penalty_percent=_required(record, "fee_value"),
            tier_order=record.get("tier_order", 1),
            name=record.get("tier_name") or "",
        )


@dataclass
class LoanPlan:
    plan_id: str
    plan_type: PlanType
    daily_interest_rate: Decimal  # fraction: 0.001 = 0.1% per day
    repayment_days: Optional[int] = None
    installment_frequency: Optional[InstallmentFrequency] = None
    installment_count: Optional[int] = None
    total_duration_days: Optional[int] = None
    align_to_salary_date: bool = False
    late_fee_tiers: Tuple[LateFeeTier, ...] = field(default_factory=tuple)
    plan_name: str = ""

    def __post_init__(self):
        self.plan_type = _coerce_enum(PlanType, self.plan_type, "plan type")
        if self.installment_frequency is not None:
            self.installment_frequency = _coerce_enum(
                InstallmentFrequency, self.installment_frequency, "installment frequency",
            )
        self.daily_interest_rate = _coerce_number(self.daily_interest_rate, "daily interest rate")
        self.repayment_days = _optional_int(self.repayment_days, "repayment_days")
        self.installment_count = _optional_int(self.installment_count, "installment_count")
        self.total_duration_days = _optional_int(self.total_duration_days, "total_duration_days")
        self.late_fee_tiers = tuple(self.late_fee_tiers)

    @property
    def is_multi_installment(self) -> bool:
        return self.plan_type == PlanType.MULTI_INSTALLMENT

    @classmethod
    def from_record(cls, record: Mapping[str, Any], late_fee_tiers=()) -> "LoanPlan":
        """Build a plan from a ``loan_plans`` row."""
        plan_type = record.get("plan_type")
        plan_type = PLAN_TYPE_ALIASES.get(plan_type, plan_type)
        return cls(
            plan_id=str(record.get("id", record.get("plan_id", ""))),
            plan_name=record.get("plan_name") or "",
            plan_type=plan_type,
            daily_interest_rate=_required(record, "interest_percent_per_day"),
            repayment_days=record.get("repayment_days"),
            installment_frequency=record.get("emi_frequency") or None,
            installment_count=record.get("emi_count"),
            total_duration_days=record.get("total_duration_days"),
            align_to_salary_date=bool(record.get("calculate_by_salary_date")),
            late_fee_tiers=tuple(
                t if isinstance(t, LateFeeTier) else LateFeeTier.from_record(t)
                for t in late_fee_tiers
            ),
        )


@dataclass
class LoanRequest:
    principal: Decimal
    plan: LoanPlan
    fees: Tuple[FeeDefinition, ...] = field(default_factory=tuple)
    salary_day_of_month: Optional[int] = None

    def __post_init__(self):
        self.principal = to_decimal(self.principal)
        self.fees = tuple(self.fees)
