"""
invoice_config -- import option schema and YAML loader.

Architecture position:
    Configuration layer. Sits above ``invoice_kernel`` and below
    ``invoice_ingestion``. The kernel MUST NEVER import from this package.
"""

from invoice_config.loader import load_import_options, parse_import_options
from invoice_config.schema import CsvOptions, ImportOptions

__all__ = [
    "CsvOptions",
    "ImportOptions",
    "load_import_options",
    "parse_import_options",
]
