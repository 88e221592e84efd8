from decimal import Decimal, InvalidOperation
from typing import Union

from config.settings import CURRENCY_PRECISION, CURRENCY_ROUNDING
from core.exceptions import InputError

Number = Union[Decimal, int, float, str]

_CURRENCY_QUANT = Decimal(1).scaleb(-CURRENCY_PRECISION)


def to_decimal(value: Number) -> Decimal:
    """Exact Decimal from user/storage input (floats go through ``str``)."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InputError(f"Not a number: {value!r}")
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise InputError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise InputError(f"Not a finite number: {value!r}")
    return result


def round_amount(value: Number) -> Decimal:
    """Round to the nearest currency unit, half up."""
    return to_decimal(value).quantize(_CURRENCY_QUANT, rounding=CURRENCY_ROUNDING)
