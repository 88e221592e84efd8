"""Simple daily interest."""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from core.exceptions import InputError
from utils.date_utils import inclusive_days
from utils.money import Number, round_amount, to_decimal


def calc_interest(principal: Number, daily_rate: Number, days: int) -> Decimal:
    """Interest = round(principal x daily rate x days), no compounding"""
    if days < 0:
        raise InputError("Interest days cannot be negative", {"days": days})
    return round_amount(to_decimal(principal) * to_decimal(daily_rate) * days)


@dataclass
class AccruedInterest:
    start_date: date
    as_of: date
    exhausted_days: int
    amount: Decimal


def calc_interest_till_date(
    principal: Number,
    daily_rate: Number,
    start_date: date,
    as_of: date,
) -> AccruedInterest:
    """Interest accrued on a running loan from ``start_date`` up to ``as_of``.

    Both ends count, so a loan processed today has accrued one day.
    """
    if as_of < start_date:
        raise InputError(
            "Accrual date is before the loan start date",
            {"start_date": start_date.isoformat(), "as_of": as_of.isoformat()},
        )
    days = inclusive_days(start_date, as_of)
    return AccruedInterest(
        start_date=start_date,
        as_of=as_of,
        exhausted_days=days,
        amount=calc_interest(principal, daily_rate, days),
    )
