"""
Currency helpers: conversion between Decimal amounts and integer minor units.

The settlement engine only ever adds and compares integers, so equality
checks like "shares sum to the expense amount" are exact. Decimals appear
at the API and database boundary only.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from tripsettle.core.config import settings


def _scale(decimals: Optional[int]) -> int:
    if decimals is None:
        decimals = settings.CURRENCY_DECIMALS
    return 10 ** decimals


def to_minor(amount, decimals: Optional[int] = None) -> int:
    """Convert a decimal amount to integer minor units (half-up rounding)."""
    scaled = Decimal(str(amount)) * _scale(decimals)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_minor(minor: int, decimals: Optional[int] = None) -> Decimal:
    """Convert integer minor units back to a Decimal with fixed exponent."""
    if decimals is None:
        decimals = settings.CURRENCY_DECIMALS
    return Decimal(minor).scaleb(-decimals).quantize(Decimal(1).scaleb(-decimals))


def is_minor_precise(amount, decimals: Optional[int] = None) -> bool:
    """True if the amount has no digits below the smallest currency unit."""
    scaled = Decimal(str(amount)) * _scale(decimals)
    return scaled == scaled.to_integral_value()


def allocate_evenly(total: int, count: int) -> List[int]:
    """
    Split an integer total into `count` parts that differ by at most one.

    The leftover units go one each to the first parts, so the result is
    deterministic and always sums to `total`.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    base, remainder = divmod(total, count)
    return [base + 1 if i < remainder else base for i in range(count)]
