"""Percentage fees with GST, split into disbursal-time and repayment-time buckets."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List

import pandas as pd

from config.constants import ApplicationMethod, FEE_BREAKDOWN_COLUMNS
from config.settings import GST_RATE
from loan_data.schema import FeeDefinition
from utils.money import round_amount


@dataclass
class FeeLine:
    name: str
    percent: Decimal
    application_method: ApplicationMethod
    amount: Decimal
    gst: Decimal

    @property
    def total_with_gst(self) -> Decimal:
        return self.amount + self.gst

    def to_dict(self) -> dict:
        return {
            "fee_name": self.name,
            "application_method": self.application_method.value,
            "fee_percent": float(self.percent),
            "fee_amount": float(self.amount),
            "gst_amount": float(self.gst),
            "total_with_gst": float(self.total_with_gst),
        }


@dataclass
class FeeBucket:
    lines: List[FeeLine] = field(default_factory=list)

    @property
    def fee_sum(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal(0))

    @property
    def gst_sum(self) -> Decimal:
        return sum((line.gst for line in self.lines), Decimal(0))

    @property
    def total(self) -> Decimal:
        return self.fee_sum + self.gst_sum


@dataclass
class FeeBreakdown:
    deduct_from_disbursal: FeeBucket = field(default_factory=FeeBucket)
    add_to_total: FeeBucket = field(default_factory=FeeBucket)

    @property
    def lines(self) -> List[FeeLine]:
        return self.deduct_from_disbursal.lines + self.add_to_total.lines

    def bucket(self, method: ApplicationMethod) -> FeeBucket:
        if method == ApplicationMethod.DEDUCT_FROM_DISBURSAL:
            return self.deduct_from_disbursal
        return self.add_to_total


def calc_fee(principal: Decimal, fee: FeeDefinition) -> FeeLine:
    """Fee = round(principal x percent / 100); GST = round(fee x GST rate)"""
    amount = round_amount(principal * fee.percent / 100)
    gst = round_amount(amount * GST_RATE)
    return FeeLine(
        name=fee.name,
        percent=fee.percent,
        application_method=fee.application_method,
        amount=amount,
        gst=gst,
    )


def calc_fees(principal: Decimal, fees: Iterable[FeeDefinition]) -> FeeBreakdown:
    """Each fee and its GST is rounded on its own; bucket sums add rounded lines."""
    breakdown = FeeBreakdown()
    for fee in fees:
        line = calc_fee(principal, fee)
        breakdown.bucket(line.application_method).lines.append(line)
    return breakdown


def fees_to_frame(breakdown: FeeBreakdown) -> pd.DataFrame:
    records = [line.to_dict() for line in breakdown.lines]
    return pd.DataFrame(records, columns=FEE_BREAKDOWN_COLUMNS)
