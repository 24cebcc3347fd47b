"""
Configuration Loader (``invoice_config.loader``).

Responsibility
--------------
Loads import option YAML files and parses them into the frozen
``invoice_config.schema`` dataclasses.

Expected layout::

    import_options:
      create_missing_entities: true
      import_as_draft: false
      allow_duplicates: false
      csv:
        delimiter: ";"
        has_header: true
        encoding: utf-8

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Keys absent from the YAML take the dataclass defaults.
* Unknown keys are rejected with ``ValueError`` so typos do not silently
  fall back to defaults.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key or wrongly typed value  -> ``ValueError``.
"""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from invoice_config.schema import CsvOptions, ImportOptions

ROOT_KEY = "import_options"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _check_keys(data: dict[str, Any], cls: type, section: str) -> None:
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"Unknown keys in {section}: {', '.join(unknown)}")


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"{key} must be true or false, got {value!r}")


def parse_csv_options(data: dict[str, Any] | None) -> CsvOptions:
    """
    Parse the ``csv`` section.

    Postconditions:
        - Returns a ``CsvOptions``; an absent section yields the defaults.
    Raises:
        ValueError: on unknown keys or an invalid delimiter.
    """
    if not data:
        return CsvOptions()
    _check_keys(data, CsvOptions, "import_options.csv")

    kwargs: dict[str, Any] = {}
    if "delimiter" in data:
        kwargs["delimiter"] = str(data["delimiter"])
    if "has_header" in data:
        kwargs["has_header"] = _parse_bool(data["has_header"], "csv.has_header")
    if "encoding" in data:
        kwargs["encoding"] = str(data["encoding"])
    return CsvOptions(**kwargs)


def parse_import_options(data: dict[str, Any] | None) -> ImportOptions:
    """
    Parse the ``import_options`` mapping into ``ImportOptions``.

    Postconditions:
        - Returns an ``ImportOptions``; missing keys keep their defaults.
    Raises:
        ValueError: on unknown keys or non-boolean switches.
    """
    if not data:
        return ImportOptions()
    _check_keys(data, ImportOptions, ROOT_KEY)

    kwargs: dict[str, Any] = {}
    for key in ("create_missing_entities", "import_as_draft", "allow_duplicates"):
        if key in data:
            kwargs[key] = _parse_bool(data[key], key)
    kwargs["csv"] = parse_csv_options(data.get("csv"))
    return ImportOptions(**kwargs)


def load_import_options(path: Path | str) -> ImportOptions:
    """
    Load ``ImportOptions`` from a YAML file with an ``import_options`` root key.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the root key is missing or the content is invalid.
    """
    raw = load_yaml_file(Path(path))
    if ROOT_KEY not in raw:
        raise ValueError(f"{path}: missing '{ROOT_KEY}' root key")
    return parse_import_options(raw[ROOT_KEY])
