"""
Invoice Kernel

Persistence and domain primitives shared by the invoice import engine:
- Master entities (company, worker, job description) and invoice aggregates
- Deterministic currency rounding for invoice totals
- Typed exceptions with machine-readable codes
- Structured JSON logging with request-scoped context
"""

__version__ = "0.1.0"
