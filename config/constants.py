from enum import Enum


class PlanType(str, Enum):
    SINGLE = "single"
    MULTI_INSTALLMENT = "multi_installment"

    @property
    def label(self) -> str:
        return {
            "single": "Single payment",
            "multi_installment": "Multi-installment (EMI)",
        }[self.value]


# Legacy values found in stored plan rows
PLAN_TYPE_ALIASES = {
    "multi_emi": PlanType.MULTI_INSTALLMENT.value,
}


class InstallmentFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    @property
    def days(self) -> int:
        """Nominal days per installment, used for plan duration and day-stepped due dates."""
        return {
            "daily": 1,
            "weekly": 7,
            "biweekly": 14,
            "monthly": 30,
        }[self.value]

    @property
    def label(self) -> str:
        return {
            "daily": "Daily",
            "weekly": "Weekly",
            "biweekly": "Every two weeks",
            "monthly": "Monthly",
        }[self.value]


class ApplicationMethod(str, Enum):
    DEDUCT_FROM_DISBURSAL = "deduct_from_disbursal"
    ADD_TO_TOTAL = "add_to_total"

    @property
    def label(self) -> str:
        return {
            "deduct_from_disbursal": "Deducted from disbursal",
            "add_to_total": "Added to total repayable",
        }[self.value]


class CalculationMethod(str, Enum):
    FIXED = "fixed"
    SALARY_DATE = "salary_date"
    CUSTOM = "custom"


# Export columns
INSTALLMENT_SCHEDULE_COLUMNS = [
    "installment_number", "due_date", "amount", "cumulative_amount",
]

FEE_BREAKDOWN_COLUMNS = [
    "fee_name", "application_method", "fee_percent",
    "fee_amount", "gst_amount", "total_with_gst",
]

LATE_FEE_TABLE_COLUMNS = [
    "tier_order", "label", "days_overdue_start", "days_overdue_end",
    "penalty_percent", "gst_percent", "total_percent_with_gst",
]
