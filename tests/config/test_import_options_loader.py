"""Tests for import option YAML loading (invoice_config)."""

import pytest
import yaml

from invoice_config import CsvOptions, ImportOptions, load_import_options, parse_import_options


class TestImportOptionsDefaults:

    def test_defaults(self):
        options = ImportOptions()
        assert options.create_missing_entities is True
        assert options.import_as_draft is True
        assert options.allow_duplicates is False
        assert options.csv == CsvOptions(delimiter=",", has_header=True, encoding="utf-8")

    def test_to_dict_is_json_friendly(self):
        d = ImportOptions().to_dict()
        assert d["csv"]["delimiter"] == ","
        assert d["create_missing_entities"] is True

    def test_multi_character_delimiter_rejected(self):
        with pytest.raises(ValueError, match="single character"):
            CsvOptions(delimiter=";;")


class TestParseImportOptions:

    def test_empty_mapping_gives_defaults(self):
        assert parse_import_options(None) == ImportOptions()
        assert parse_import_options({}) == ImportOptions()

    def test_switches_and_csv_section(self):
        options = parse_import_options(
            {
                "create_missing_entities": False,
                "import_as_draft": False,
                "csv": {"delimiter": ";", "has_header": False},
            }
        )
        assert options.create_missing_entities is False
        assert options.import_as_draft is False
        assert options.allow_duplicates is False
        assert options.csv.delimiter == ";"
        assert options.csv.has_header is False
        assert options.csv.encoding == "utf-8"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="create_missing"):
            parse_import_options({"create_missing": True})

    def test_unknown_csv_key_rejected(self):
        with pytest.raises(ValueError, match="quotechar"):
            parse_import_options({"csv": {"quotechar": "'"}})

    def test_non_boolean_switch_rejected(self):
        with pytest.raises(ValueError, match="import_as_draft"):
            parse_import_options({"import_as_draft": "yes please"})


class TestLoadImportOptions:

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text(
            yaml.safe_dump(
                {"import_options": {"allow_duplicates": True, "csv": {"delimiter": "|"}}}
            ),
            encoding="utf-8",
        )

        options = load_import_options(path)
        assert options.allow_duplicates is True
        assert options.csv.delimiter == "|"

    def test_missing_root_key(self, tmp_path):
        path = tmp_path / "import.yaml"
        path.write_text("something_else: {}\n", encoding="utf-8")

        with pytest.raises(ValueError, match="import_options"):
            load_import_options(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_import_options(tmp_path / "absent.yaml")
