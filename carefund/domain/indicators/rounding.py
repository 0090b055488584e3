from decimal import Decimal, ROUND_HALF_UP
from typing import Union


def round_half_up(value: float, digits: int = 0) -> Union[int, float]:
    """
    Round half away from zero for positive values (2.5 -> 3, 0.25 -> 0.3).

    Python's round() uses banker's rounding, which would shift scores and
    rates at exact .5 boundaries.

    Returns:
        int when digits == 0, otherwise float
    """
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if digits == 0:
        return int(rounded)
    return float(rounded)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
