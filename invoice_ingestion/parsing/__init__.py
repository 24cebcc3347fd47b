"""Record parsing: adapter sections -> header and line records."""

from invoice_ingestion.parsing.parser import (
    ParsedSource,
    parse_extracted,
    parse_flat_rows,
    parse_headers,
    parse_lines,
)

__all__ = [
    "ParsedSource",
    "parse_extracted",
    "parse_flat_rows",
    "parse_headers",
    "parse_lines",
]
