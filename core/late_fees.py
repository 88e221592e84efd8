"""Late penalty tiers: display table and overdue-day lookup."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

import pandas as pd

from config.constants import LATE_FEE_TABLE_COLUMNS
from config.settings import GST_RATE
from core.exceptions import InputError
from loan_data.schema import LateFeeTier
from loan_data.validator import validate_late_fee_tiers
from utils.formatters import fmt_overdue_range
from utils.money import Number, round_amount, to_decimal


@dataclass
class LateFeeRow:
    tier_order: int
    label: str
    days_overdue_start: int
    days_overdue_end: Optional[int]
    penalty_percent: Decimal
    gst_percent: Decimal
    total_percent_with_gst: Decimal

    def to_dict(self) -> dict:
        return {
            "tier_order": self.tier_order,
            "label": self.label,
            "days_overdue_start": self.days_overdue_start,
            "days_overdue_end": self.days_overdue_end,
            "penalty_percent": float(self.penalty_percent),
            "gst_percent": float(self.gst_percent),
            "total_percent_with_gst": float(self.total_percent_with_gst),
        }


def build_late_fee_table(tiers: Iterable[LateFeeTier]) -> List[LateFeeRow]:
    rows = []
    for tier in validate_late_fee_tiers(tiers):
        gst_percent = tier.penalty_percent * GST_RATE
        rows.append(LateFeeRow(
            tier_order=tier.tier_order,
            label=fmt_overdue_range(tier.days_overdue_start, tier.days_overdue_end),
            days_overdue_start=tier.days_overdue_start,
            days_overdue_end=tier.days_overdue_end,
            penalty_percent=tier.penalty_percent,
            gst_percent=gst_percent,
            total_percent_with_gst=tier.penalty_percent + gst_percent,
        ))
    return rows


def find_late_fee_tier(tiers: Iterable[LateFeeTier], days_overdue: int) -> Optional[LateFeeTier]:
    """Tier covering ``days_overdue``; None when not overdue or no tier applies."""
    if days_overdue < 1:
        return None
    for tier in validate_late_fee_tiers(tiers):
        if days_overdue < tier.days_overdue_start:
            continue
        if tier.days_overdue_end is None or days_overdue <= tier.days_overdue_end:
            return tier
    return None


@dataclass
class LatePenalty:
    tier: LateFeeTier
    days_overdue: int
    amount: Decimal
    gst: Decimal

    @property
    def total_with_gst(self) -> Decimal:
        return self.amount + self.gst


def calc_late_penalty(
    outstanding: Number,
    tiers: Iterable[LateFeeTier],
    days_overdue: int,
) -> Optional[LatePenalty]:
    """Penalty of the applicable tier on an outstanding amount, with GST.

    Penalty and GST are rounded separately, like any other fee line.
    """
    outstanding = to_decimal(outstanding)
    if outstanding < 0:
        raise InputError("Outstanding amount cannot be negative", {"outstanding": str(outstanding)})
    tier = find_late_fee_tier(tiers, days_overdue)
    if tier is None:
        return None
    amount = round_amount(outstanding * tier.penalty_percent / 100)
    return LatePenalty(
        tier=tier,
        days_overdue=days_overdue,
        amount=amount,
        gst=round_amount(amount * GST_RATE),
    )


def late_fee_table_to_frame(rows: List[LateFeeRow]) -> pd.DataFrame:
    return pd.DataFrame([row.to_dict() for row in rows], columns=LATE_FEE_TABLE_COLUMNS)
