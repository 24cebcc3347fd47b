"""
invoice_kernel.domain -- Pure domain primitives (clock, rounding).

ZERO I/O except SystemClock.
"""

from invoice_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from invoice_kernel.domain.rounding import (
    InvoiceTotals,
    compute_invoice_totals,
    compute_vat,
    domain_round,
    round_vat,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "InvoiceTotals",
    "compute_invoice_totals",
    "compute_vat",
    "domain_round",
    "round_vat",
]
