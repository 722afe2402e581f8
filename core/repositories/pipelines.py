"""
Aggregation expression builders shared by the metric repositories.

Only the ``$group`` side of a metric runs in MongoDB; everything after the
group (fallbacks, rounding, ordering) is done in Python.
"""
from typing import Any, Dict

Expr = Dict[str, Any]


def ref(field: str) -> str:
    """Field path for a (possibly space-containing) field name."""
    return f"${field}"


def if_null(field: str, default: Any = 0) -> Expr:
    return {"$ifNull": [ref(field), default]}


def avg_of(field: str, default: Any = 0) -> Expr:
    """Average treating a missing field as ``default``."""
    return {"$avg": if_null(field, default)}


def sum_of(field: str) -> Expr:
    return {"$sum": if_null(field, 0)}


def instock_pct() -> Expr:
    """Daily in-stock value; the field name varies between loads."""
    return {"$ifNull": [ref("Daily Instock POD"), if_null("Daily Instock POD *", 0)]}


def flag_pct(field: str, value: str = "Y") -> Expr:
    """100 when ``field == value`` else 0 (to be averaged)."""
    return {"$cond": [{"$eq": [ref(field), value]}, 100, 0]}


def flag_count(field: str, value: str = "Y") -> Expr:
    return {"$sum": {"$cond": [{"$eq": [ref(field), value]}, 1, 0]}}


def positive_count(field: str) -> Expr:
    return {"$sum": {"$cond": [{"$gt": [ref(field), 0]}, 1, 0]}}


def ratio_pct(numerator: str, denominator: str) -> Expr:
    """Per-document percentage; null (ignored by ``$avg``) when the denominator is not positive."""
    return {
        "$cond": [
            {"$gt": [ref(denominator), 0]},
            {"$multiply": [{"$divide": [ref(numerator), ref(denominator)]}, 100]},
            None,
        ]
    }


def count() -> Expr:
    return {"$sum": 1}


def distinct(field: str) -> Expr:
    return {"$addToSet": ref(field)}
