"""
Import option schema.

Frozen dataclasses describing how a batch import behaves. Instances are
built in code (defaults) or parsed from YAML by ``invoice_config.loader``
and handed unchanged to ``ImportService.import_invoices``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Delimited text
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CsvOptions:
    """Parsing options for delimited-text sources."""

    delimiter: str = ","
    has_header: bool = True
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ValueError(
                f"CSV delimiter must be a single character, got {self.delimiter!r}"
            )


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportOptions:
    """Behavior switches for one import batch.

    create_missing_entities: create companies, workers and job descriptions
        that are not found; when False an unknown key fails the invoice.
    import_as_draft: imported invoices get DRAFT status, else FINALIZED.
    allow_duplicates: accept invoice numbers already present in storage.
    """

    create_missing_entities: bool = True
    import_as_draft: bool = True
    allow_duplicates: bool = False
    csv: CsvOptions = field(default_factory=CsvOptions)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
