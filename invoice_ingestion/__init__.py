"""
invoice_ingestion -- Batch import of invoices from XLSX and CSV files.

Parses header and line records, resolves companies, workers and job
descriptions (find-or-create), assembles invoices with VAT and rounded
totals, and reports a per-record outcome plus one audit log entry.

Architecture:
    invoice_ingestion/ is a top-level package. Nothing in invoice_kernel/
    or invoice_config/ imports from ingestion.
"""
