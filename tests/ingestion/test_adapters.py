"""Tests for source adapters: structure checks, extraction and probing."""

import pytest

from invoice_config.schema import CsvOptions
from invoice_kernel.exceptions import SourceStructureError

from invoice_ingestion.adapters import (
    CsvSourceAdapter,
    InvoiceSource,
    XlsxSourceAdapter,
    open_source,
    probe_source,
    source_kind_for,
)
from invoice_ingestion.adapters.csv_adapter import CSV_EMPTY
from invoice_ingestion.adapters.xlsx_adapter import (
    HEADERS_EMPTY,
    LINES_NOT_FOUND,
    MISSING_COLUMNS,
)
from invoice_ingestion.domain.types import SourceKind

HEADER_ROW = ("INV-1", "PT. Alpha", "01.234.567.8-901.000", "2024-01-15", None, None, 11)
LINE_ROW = ("INV-1", 1, "John Doe", "A1234567", "Consulting", "Monthly", 1, 5000000, 5000000)

CSV_TEXT = (
    "InvoiceNumber,CompanyName,CompanyNPWP,InvoiceDate,TKAName,TKAPassport,"
    "JobName,JobDescription,Quantity,UnitPrice,LineTotal\n"
    "INV-1,PT. Alpha,01.234.567.8-901.000,2024-01-15,John Doe,A1234567,Consulting,Monthly,1,5000000,5000000\n"
    "INV-1,PT. Alpha,01.234.567.8-901.000,2024-01-15,Jane Roe,B7654321,Audit,,2,100,200\n"
    "INV-2,PT. Beta,02.000.000.0-000.000,2024-01-16,John Doe,A1234567,Consulting,,1,10,10\n"
)


class TestSourceKind:

    @pytest.mark.parametrize(
        "name, kind",
        [
            ("a.xlsx", SourceKind.SPREADSHEET),
            ("a.XLSX", SourceKind.SPREADSHEET),
            ("a.csv", SourceKind.DELIMITED_TEXT),
            ("a.txt", SourceKind.DELIMITED_TEXT),
        ],
    )
    def test_kind_from_suffix(self, name, kind):
        assert source_kind_for(name) == kind

    def test_unsupported_suffix(self):
        with pytest.raises(ValueError, match="Unsupported"):
            source_kind_for("invoices.pdf")


class TestXlsxSourceAdapter:

    def test_extract_reads_both_sheets(self, workbook_factory):
        wb = workbook_factory([HEADER_ROW], [LINE_ROW])
        source = InvoiceSource.from_workbook("x.xlsx", wb)
        adapter = XlsxSourceAdapter()

        adapter.check_structure(source, CsvOptions())
        extracted = adapter.extract(source, CsvOptions())

        assert len(extracted.headers.rows) == 1
        assert extracted.headers.rows[0].row_number == 2
        assert extracted.headers.value(extracted.headers.rows[0], "CompanyName") == "PT. Alpha"
        assert extracted.lines.value(extracted.lines.rows[0], "TKAPassport") == "A1234567"

    def test_blank_rows_skipped_later_rows_kept(self, workbook_factory):
        wb = workbook_factory(
            [HEADER_ROW, (None,) * 7, ("INV-2", "PT. Beta", "02", "2024-01-16")],
            [LINE_ROW],
        )
        source = InvoiceSource.from_workbook("x.xlsx", wb)

        rows = XlsxSourceAdapter().extract(source, CsvOptions()).headers.rows
        assert [r.row_number for r in rows] == [2, 4]

    def test_sheets_found_by_position_when_renamed(self, workbook_factory):
        wb = workbook_factory([HEADER_ROW], [LINE_ROW], sheet_names=("Invoices", "Items"))
        source = InvoiceSource.from_workbook("x.xlsx", wb)
        adapter = XlsxSourceAdapter()

        adapter.check_structure(source, CsvOptions())
        assert len(adapter.extract(source, CsvOptions()).lines.rows) == 1

    def test_headers_sheet_empty(self):
        from openpyxl import Workbook

        wb = Workbook()
        wb.create_sheet("Lines")
        source = InvoiceSource.from_workbook("x.xlsx", wb)

        with pytest.raises(SourceStructureError) as exc_info:
            XlsxSourceAdapter().check_structure(source, CsvOptions())
        assert exc_info.value.reason == HEADERS_EMPTY

    def test_label_row_without_data_is_empty(self, workbook_factory):
        source = InvoiceSource.from_workbook("x.xlsx", workbook_factory([], []))

        with pytest.raises(SourceStructureError) as exc_info:
            XlsxSourceAdapter().check_structure(source, CsvOptions())
        assert exc_info.value.reason == HEADERS_EMPTY

    def test_label_row_missing_required_columns(self):
        from openpyxl import Workbook

        wb = Workbook()
        wb.active.title = "Headers"
        wb.active.append(["Foo", "Bar", "companynpwp"])
        wb.active.append(list(HEADER_ROW))
        wb.create_sheet("Lines").append(list(LINE_ROW))
        source = InvoiceSource.from_workbook("x.xlsx", wb)

        with pytest.raises(SourceStructureError) as exc_info:
            XlsxSourceAdapter().check_structure(source, CsvOptions())
        assert exc_info.value.reason == (
            f"{MISSING_COLUMNS}: InvoiceNumber, CompanyName, InvoiceDate"
        )

    def test_lines_sheet_missing(self, workbook_factory):
        wb = workbook_factory([HEADER_ROW], [], sheet_names=("Headers",))
        source = InvoiceSource.from_workbook("x.xlsx", wb)

        with pytest.raises(SourceStructureError) as exc_info:
            XlsxSourceAdapter().check_structure(source, CsvOptions())
        assert exc_info.value.reason == LINES_NOT_FOUND

    def test_estimate_counts_header_rows(self, workbook_factory):
        wb = workbook_factory([HEADER_ROW, ("INV-2",)], [LINE_ROW])
        source = InvoiceSource.from_workbook("x.xlsx", wb)
        assert XlsxSourceAdapter().estimate_records(source, CsvOptions()) == 2


class TestCsvSourceAdapter:

    def test_extract_with_label_row(self):
        source = InvoiceSource.from_text("x.csv", CSV_TEXT)
        section = CsvSourceAdapter().extract(source, CsvOptions()).flat

        assert [r.row_number for r in section.rows] == [2, 3, 4]
        assert section.value(section.rows[1], "TKAName") == "Jane Roe"
        assert section.value(section.rows[1], "JobDescription") is None

    def test_labels_matched_case_insensitively_in_any_order(self):
        text = "linetotal,INVOICENUMBER\n500,INV-9\n"
        source = InvoiceSource.from_text("x.csv", text)
        section = CsvSourceAdapter().extract(source, CsvOptions()).flat

        assert section.value(section.rows[0], "InvoiceNumber") == "INV-9"
        assert section.value(section.rows[0], "LineTotal") == "500"
        assert section.value(section.rows[0], "CompanyName") is None

    def test_without_label_row_uses_fixed_order(self):
        body = CSV_TEXT.split("\n", 1)[1].replace(",", ";")
        source = InvoiceSource.from_text("x.csv", body)
        options = CsvOptions(delimiter=";", has_header=False)

        section = CsvSourceAdapter().extract(source, options).flat
        assert section.rows[0].row_number == 1
        assert section.value(section.rows[0], "InvoiceNumber") == "INV-1"
        assert section.value(section.rows[0], "LineTotal") == "5000000"

    def test_bom_is_ignored(self):
        source = InvoiceSource.from_text("x.csv", "\ufeff" + CSV_TEXT)
        adapter = CsvSourceAdapter()

        adapter.check_structure(source, CsvOptions())
        section = adapter.extract(source, CsvOptions()).flat
        assert section.value(section.rows[0], "InvoiceNumber") == "INV-1"

    def test_empty_text_is_fatal(self):
        source = InvoiceSource.from_text("x.csv", "  \n")
        with pytest.raises(SourceStructureError) as exc_info:
            CsvSourceAdapter().check_structure(source, CsvOptions())
        assert exc_info.value.reason == CSV_EMPTY

    def test_label_row_without_invoice_number_is_fatal(self):
        source = InvoiceSource.from_text("x.csv", "Foo,Bar\n1,2\n")
        with pytest.raises(SourceStructureError, match="InvoiceNumber"):
            CsvSourceAdapter().check_structure(source, CsvOptions())

    def test_estimate_counts_distinct_invoice_numbers(self):
        source = InvoiceSource.from_text("x.csv", CSV_TEXT)
        assert CsvSourceAdapter().estimate_records(source, CsvOptions()) == 2


class TestOpenAndProbe:

    def test_open_csv_file(self, tmp_path):
        path = tmp_path / "invoices.csv"
        path.write_text(CSV_TEXT, encoding="utf-8-sig")

        source = open_source(path)
        try:
            assert source.kind == SourceKind.DELIMITED_TEXT
            assert source.file_name == "invoices.csv"
            assert source.text.startswith("InvoiceNumber")
        finally:
            source.close()

    def test_open_xlsx_file(self, tmp_path, workbook_factory):
        path = tmp_path / "invoices.xlsx"
        workbook_factory([HEADER_ROW], [LINE_ROW]).save(path)

        source = open_source(path)
        try:
            probe = probe_source(source)
        finally:
            source.close()
        assert probe.is_valid
        assert probe.file_kind == SourceKind.SPREADSHEET
        assert probe.estimated_records == 1

    def test_probe_reports_structure_error(self):
        probe = probe_source(InvoiceSource.from_text("x.csv", ""))
        assert probe.is_valid is False
        assert probe.errors == (CSV_EMPTY,)
        assert probe.to_dict()["estimated_records"] == 0
