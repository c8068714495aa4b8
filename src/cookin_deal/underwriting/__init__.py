"""Valuation engine for fix-and-flip deal analysis."""

from .engine import (
    analyze,
    evaluate,
    evaluate_many,
    ltv,
    monthly_payment,
    monthly_roi,
    total_rehab_cost,
    within_seventy_percent_rule,
)
from .signals import classify_grade, classify_signal, describe_signal

__all__ = [
    "analyze",
    "evaluate",
    "evaluate_many",
    "ltv",
    "monthly_payment",
    "monthly_roi",
    "total_rehab_cost",
    "within_seventy_percent_rule",
    "classify_grade",
    "classify_signal",
    "describe_signal",
]
