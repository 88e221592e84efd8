"""APR (key fact statement formula) and IRR-based effective annual rate."""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

import numpy as np
from scipy import optimize

from config.settings import (
    APR_DAYS_BASIS, APR_PRECISION, CURRENCY_ROUNDING,
    IRR_LOWER_BOUND, IRR_UPPER_BOUND, IRR_PRECISION,
)
from core.exceptions import InputError
from utils.date_utils import days_between
from utils.money import Number, to_decimal

log = logging.getLogger(__name__)

_APR_QUANT = Decimal(1).scaleb(-APR_PRECISION)


def calc_apr(total_charges: Number, principal: Number, days: int) -> Decimal:
    """APR (%) = charges / principal / days x 36500"""
    principal = to_decimal(principal)
    if principal <= 0:
        raise InputError("Principal must be greater than 0", {"principal": str(principal)})
    if days <= 0:
        raise InputError("APR needs a positive day count", {"days": days})
    apr = to_decimal(total_charges) / principal / days * APR_DAYS_BASIS
    return apr.quantize(_APR_QUANT, rounding=CURRENCY_ROUNDING)


def calc_effective_annual_rate(
    disbursal_amount: Number,
    disbursal_date: date,
    repayments: List[Tuple[date, Decimal]],
) -> Optional[float]:
    """Effective annual rate (%) by IRR.

    Cash flows are the disbursal (outflow) and each dated repayment (inflow),
    discounted on an actual/365 basis. Returns a percentage, or None when the
    bracket holds no root.
    """
    outflow = float(to_decimal(disbursal_amount))
    if outflow <= 0 or not repayments:
        return None

    offsets = np.array(
        [days_between(disbursal_date, due) for due, _ in repayments], dtype=float,
    ) / 365.0
    amounts = np.array([float(amount) for _, amount in repayments], dtype=float)

    def npv(rate):
        return -outflow + np.sum(amounts / (1.0 + rate) ** offsets)

    try:
        annual = optimize.brentq(npv, IRR_LOWER_BOUND, IRR_UPPER_BOUND)
    except (ValueError, RuntimeError) as exc:
        log.warning("Effective annual rate not solvable: %s", exc)
        return None
    return round(annual * 100, IRR_PRECISION)
