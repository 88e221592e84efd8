import sys
import pytest
from pathlib import Path
from datetime import date

# Make the project root importable
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from config.constants import ApplicationMethod, InstallmentFrequency, PlanType
from loan_data.schema import FeeDefinition, LateFeeTier, LoanPlan


@pytest.fixture
def today():
    return date(2025, 1, 10)


@pytest.fixture
def single_plan():
    """15-day single payment plan, 0.1% per day"""
    return LoanPlan(
        plan_id="single-15",
        plan_type=PlanType.SINGLE,
        daily_interest_rate="0.001",
        repayment_days=15,
    )


@pytest.fixture
def monthly_plan():
    return LoanPlan(
        plan_id="emi-3m",
        plan_type=PlanType.MULTI_INSTALLMENT,
        daily_interest_rate="0.001",
        installment_frequency=InstallmentFrequency.MONTHLY,
        installment_count=3,
    )


@pytest.fixture
def processing_fee():
    return FeeDefinition(
        name="Processing fee",
        percent=10,
        application_method=ApplicationMethod.DEDUCT_FROM_DISBURSAL,
    )


@pytest.fixture
def late_fee_tiers():
    # Deliberately out of order; tier_order decides display order
    return [
        LateFeeTier(days_overdue_start=8, days_overdue_end=30, penalty_percent=1, tier_order=3),
        LateFeeTier(days_overdue_start=1, days_overdue_end=1, penalty_percent=4, tier_order=1),
        LateFeeTier(days_overdue_start=31, days_overdue_end=None, penalty_percent=2, tier_order=4),
        LateFeeTier(days_overdue_start=2, days_overdue_end=7, penalty_percent="0.5", tier_order=2),
    ]
