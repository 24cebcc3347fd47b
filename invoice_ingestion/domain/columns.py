"""
Column layouts of the import file formats.

Spreadsheets carry two sheets with fixed column orders. Delimited text
carries one row per invoice line with the header fields repeated; its
trailing optional columns (DueDate onwards) are not part of the template.
"""

HEADERS_SHEET = "Headers"
LINES_SHEET = "Lines"

HEADER_COLUMNS: tuple[str, ...] = (
    "InvoiceNumber",
    "CompanyName",
    "CompanyNPWP",
    "InvoiceDate",
    "DueDate",
    "Notes",
    "VATPercentage",
)

LINE_COLUMNS: tuple[str, ...] = (
    "InvoiceNumber",
    "Baris",
    "TKAName",
    "TKAPassport",
    "JobName",
    "JobDescription",
    "Quantity",
    "UnitPrice",
    "LineTotal",
)

FLAT_COLUMNS: tuple[str, ...] = (
    "InvoiceNumber",
    "CompanyName",
    "CompanyNPWP",
    "InvoiceDate",
    "TKAName",
    "TKAPassport",
    "JobName",
    "JobDescription",
    "Quantity",
    "UnitPrice",
    "LineTotal",
    "DueDate",
    "Notes",
    "VATPercentage",
    "Baris",
)

CSV_TEMPLATE_COLUMNS: tuple[str, ...] = FLAT_COLUMNS[:11]

# Labels the Headers sheet must carry in row 1.
REQUIRED_HEADER_COLUMNS: tuple[str, ...] = HEADER_COLUMNS[:4]

# Columns a labelled CSV must contain to be readable at all.
REQUIRED_FLAT_COLUMNS: tuple[str, ...] = ("InvoiceNumber",)


def fixed_positions(columns: tuple[str, ...]) -> dict[str, int]:
    """Label -> 0-based position for a fixed column order."""
    return {label: i for i, label in enumerate(columns)}


def positions_from_labels(
    labels: list[str] | tuple[str, ...],
    columns: tuple[str, ...],
) -> dict[str, int]:
    """Label -> position located by case-insensitive match against a label row.

    Labels not in ``columns`` are ignored; when a label repeats, the first
    occurrence wins.
    """
    wanted = {label.lower(): label for label in columns}
    positions: dict[str, int] = {}
    for i, raw in enumerate(labels):
        key = (raw or "").strip().lower()
        canonical = wanted.get(key)
        if canonical is not None and canonical not in positions:
            positions[canonical] = i
    return positions
