"""
Invoice interval arithmetic

A job of ``duration`` hours is billed in intervals of ``invoice_interval``
hours. The last interval is partial when the duration is not a multiple of
the interval.
"""
from typing import Optional


def max_intervals(duration: int, invoice_interval: int) -> int:
    """Number of billable intervals: ceil(duration / invoice_interval)."""
    if invoice_interval <= 0:
        raise ValueError("invoice_interval must be positive")
    full, remainder = divmod(duration, invoice_interval)
    return full + 1 if remainder else full


def hours_for_interval(interval_number: int, duration: int, invoice_interval: int) -> int:
    """Billable hours in the given 1-based interval."""
    last = max_intervals(duration, invoice_interval)
    if not 1 <= interval_number <= last:
        raise ValueError(f"interval {interval_number} outside 1..{last}")

    remainder = duration % invoice_interval
    if interval_number == last and remainder:
        return remainder
    return invoice_interval


def invoice_value(rate: float, hours: int, adjustment: Optional[float] = None) -> float:
    """rate * hours plus any adjustment, never below zero."""
    value = rate * hours + (adjustment or 0)
    return max(value, 0.0)
