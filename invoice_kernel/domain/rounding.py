"""
Module: invoice_kernel.domain.rounding
Responsibility: Invoice total arithmetic. Centralizes the VAT calculation and
    the currency's whole-unit rounding rule so that the assembler, the
    reporter and the tests all use identical definitions.
Architecture position: Kernel > Domain. Pure functions, zero I/O.

Invariants enforced:
    - subtotal is the exact sum of imported line totals (never recomputed
      from quantity x unit price).
    - vat_amount = subtotal * vat_percentage / 100 quantized to 2 places.
    - total_amount = domain_round(subtotal + vat_amount).
    CRITICAL: No floats. Every amount is a Decimal.

Notes:
    domain_round() is NOT a quantize() call. It is the explicit floor-based
    half-up rule used for the rupiah grand total: a fractional part below
    0.50 is dropped, anything at or above 0.50 adds one whole unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_EVEN, Decimal
from typing import Iterable

# 2-place rounding mode for the VAT amount. Midpoints go to the even digit.
VAT_ROUNDING = ROUND_HALF_EVEN
VAT_DECIMAL_PLACES = 2

_HALF = Decimal("0.50")
_ONE = Decimal("1")


def _floor(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_FLOOR)


def domain_round(value: Decimal) -> Decimal:
    """
    Round to the nearest whole currency unit, halves going up.

    domain_round(x) = floor(x)      if x - floor(x) < 0.50
                    = floor(x) + 1  otherwise

    Examples:
        domain_round(Decimal("17999.49"))  -> Decimal("17999")
        domain_round(Decimal("17999.50"))  -> Decimal("18000")
        domain_round(Decimal("17999.999")) -> Decimal("18000")
    """
    value = Decimal(value)
    floored = _floor(value)
    if value - floored < _HALF:
        return floored
    return floored + _ONE


def round_vat(value: Decimal) -> Decimal:
    """Quantize a VAT amount to 2 decimal places using VAT_ROUNDING."""
    quantum = Decimal(1).scaleb(-VAT_DECIMAL_PLACES)
    return Decimal(value).quantize(quantum, rounding=VAT_ROUNDING)


def compute_vat(subtotal: Decimal, vat_percentage: Decimal) -> Decimal:
    """VAT amount for a subtotal at the given percentage."""
    return round_vat(Decimal(subtotal) * Decimal(vat_percentage) / Decimal(100))


@dataclass(frozen=True)
class InvoiceTotals:
    """Computed invoice amounts."""

    subtotal: Decimal
    vat_percentage: Decimal
    vat_amount: Decimal
    total_before_rounding: Decimal
    total_amount: Decimal


def compute_invoice_totals(
    line_totals: Iterable[Decimal],
    vat_percentage: Decimal,
) -> InvoiceTotals:
    """Subtotal, VAT and the domain-rounded grand total for a set of line totals."""
    subtotal = sum((Decimal(t) for t in line_totals), Decimal(0))
    vat_amount = compute_vat(subtotal, vat_percentage)
    before = subtotal + vat_amount
    return InvoiceTotals(
        subtotal=subtotal,
        vat_percentage=Decimal(vat_percentage),
        vat_amount=vat_amount,
        total_before_rounding=before,
        total_amount=domain_round(before),
    )
