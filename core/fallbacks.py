"""
Fallback cascade primitives for dashboard metrics.

Fact collections do not always carry the field a KPI is defined on, so
every metric resolves through an ordered cascade:

    1. the aggregated primary value, when positive
    2. a value derived from a secondary aggregate (usually ``Pace Pct``)
    3. a placeholder constant

All helpers are pure: the same aggregation row always resolves to the same
numbers, and resolving an already-resolved value returns it unchanged.
"""
import math
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

Number = Union[int, float]
Candidate = Union[Any, Callable[[], Any]]

# Placeholder constants (step 3 of the cascade)
FEATURE_EXECUTION_DEFAULT = 82.5
EXPECTED_LOCATION_DEFAULT = 78.3
DAY_ONE_READY_DEFAULT = 89.7
PERFORMANCE_SCORE_DEFAULT = 8.2
OVERALL_OSA_DEFAULT = 85.5
ON_TIME_DELIVERY_DEFAULT = 92.5
ORDER_FULFILLMENT_DEFAULT = 94.8
WALLET_SHARE_DEFAULT = 23.5
CUSTOMER_PENETRATION_DEFAULT = 67.8
PACE_DEFAULT = 75.0

# Values no collection carries yet
REPLENISHMENT_SPEED_HOURS = 24
INVENTORY_ACCURACY = 95.5
SUPPLIER_PERFORMANCE = 89.2
WALLET_GROWTH = 12.5


def to_number(value: Any) -> float:
    """
    Coerce an aggregation output to a float.

    ``None``, booleans, strings and NaN become 0.0. BSON ``Decimal128``
    values are unwrapped.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if hasattr(value, "to_decimal"):
        value = value.to_decimal()
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return 0.0 if math.isnan(number) or math.isinf(number) else number
    return 0.0


def is_positive(value: Any) -> bool:
    return to_number(value) > 0


def ratio_pct(numerator: Any, denominator: Any) -> float:
    """``numerator / denominator * 100``; 0.0 when the denominator is not positive."""
    den = to_number(denominator)
    if den <= 0:
        return 0.0
    return to_number(numerator) / den * 100


def capped(value: Any, cap: Number = 100) -> float:
    """Clamp a derived percentage (or score) to ``cap``."""
    return min(float(cap), to_number(value))


def _evaluate(candidate: Candidate) -> float:
    return to_number(candidate() if callable(candidate) else candidate)


def cascade(*candidates: Candidate) -> float:
    """
    Return the first positive candidate, 0.0 if there is none.

    Callables are evaluated lazily, only when every earlier candidate
    failed.
    """
    for candidate in candidates:
        value = _evaluate(candidate)
        if value > 0:
            return value
    return 0.0


def resolve(primary: Any, derived: Candidate = None, default: Optional[Number] = None) -> float:
    """
    Standard three-step cascade: primary → derived → default.

    Examples:
        >>> round_to(resolve(0, lambda: capped(80 * 1.1), 85.5), 2)
        88.0
        >>> resolve(None, 0, 85.5)
        85.5
    """
    candidates = [primary]
    if derived is not None:
        candidates.append(derived)
    if default is not None:
        candidates.append(default)
    return cascade(*candidates)


def round_to(value: Any, places: int = 2) -> Number:
    """Round to ``places`` decimals; ``places=0`` yields an int."""
    number = to_number(value)
    if places == 0:
        return int(round(number))
    return round(number, places)


def round_half_up(value: Any, places: int = 2) -> float:
    """
    Round halves upwards (towards +inf), the way KPI cards display values.

    Examples:
        >>> round_half_up(82.125)
        82.13
        >>> round_to(82.125, 2)
        82.12
    """
    scale = 10 ** places
    return math.floor(to_number(value) * scale + 0.5) / scale


def distinct_count(values: Optional[Iterable]) -> int:
    """Size of an ``$addToSet`` result (None-safe)."""
    return len(values) if values else 0


def _sort_key(value: Any) -> tuple:
    """
    Type-ranked key so mixed group labels sort the way MongoDB orders BSON
    types: numbers, then strings, then everything else.
    """
    if hasattr(value, "to_decimal"):
        value = value.to_decimal()
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return (0, value)
    if isinstance(value, str):
        return (1, value)
    return (2, str(value))


def top_n(
    rows: List[Dict[str, Any]],
    key: str,
    limit: int,
    descending: bool = True
) -> List[Dict[str, Any]]:
    """
    Sort rows by ``key`` and cap the result to ``limit``.

    Rows whose key is ``None`` go last regardless of direction. Mixed value
    types never fail to compare. Ties keep their input order.
    """
    present = [row for row in rows if row.get(key) is not None]
    missing = [row for row in rows if row.get(key) is None]
    present.sort(key=lambda row: _sort_key(row[key]), reverse=descending)
    return (present + missing)[:limit]
