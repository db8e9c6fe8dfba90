"""Dataset readers.

Two plain-text formats are understood:

* CSV with a header row. A column whose every non-missing value parses as a
  number is numeric, otherwise nominal with labels in order of appearance.
* ARFF (``@relation`` / ``@attribute`` / ``@data``), numeric and nominal
  attributes only.

``?`` and empty cells are read as missing values (``None``).
"""

from __future__ import annotations

import csv
from pathlib import Path

from benchsweep.errors import DatasetFormatError
from benchsweep.models import Attribute, Dataset, Row

MISSING = ("?", "")
NUMERIC_TYPES = ("numeric", "real", "integer")


def _to_number(token: str) -> float | None:
    try:
        return float(token)
    except ValueError:
        return None


def parse_csv(path: str | Path) -> Dataset:
    path = Path(path)
    with open(path, "r", newline="", encoding="utf-8") as f:
        lines = [row for row in csv.reader(f) if any(cell.strip() for cell in row)]
    if not lines:
        raise DatasetFormatError(f"{path}: empty CSV file")
    header = [h.strip() for h in lines[0]]
    body = [[cell.strip() for cell in row] for row in lines[1:]]
    for lineno, row in enumerate(body, start=2):
        if len(row) != len(header):
            raise DatasetFormatError(
                f"{path}:{lineno}: expected {len(header)} values, got {len(row)}"
            )

    attributes: list[Attribute] = []
    for col, name in enumerate(header):
        present = [row[col] for row in body if row[col] not in MISSING]
        if all(_to_number(v) is not None for v in present):
            attributes.append(Attribute(name))
        else:
            labels = list(dict.fromkeys(present))
            attributes.append(Attribute(name, tuple(labels)))

    rows: list[Row] = []
    for row in body:
        rows.append(
            [
                None if cell in MISSING else (cell if attr.is_nominal else float(cell))
                for cell, attr in zip(row, attributes)
            ]
        )
    return Dataset(path.stem, attributes, rows)


def _parse_attribute(path: Path, lineno: int, line: str) -> Attribute:
    rest = line[len("@attribute"):].strip()
    if rest.startswith(("'", '"')):
        quote = rest[0]
        end = rest.find(quote, 1)
        if end < 0:
            raise DatasetFormatError(f"{path}:{lineno}: unterminated attribute name")
        name, kind = rest[1:end], rest[end + 1:].strip()
    else:
        parts = rest.split(None, 1)
        if len(parts) != 2:
            raise DatasetFormatError(f"{path}:{lineno}: malformed @attribute line")
        name, kind = parts
    if kind.startswith("{"):
        if not kind.endswith("}"):
            raise DatasetFormatError(f"{path}:{lineno}: unterminated nominal specification")
        labels = tuple(v.strip().strip("'\"") for v in kind[1:-1].split(",") if v.strip())
        return Attribute(name, labels)
    if kind.lower() in NUMERIC_TYPES:
        return Attribute(name)
    raise DatasetFormatError(f"{path}:{lineno}: unsupported attribute type {kind!r}")


def parse_arff(path: str | Path) -> Dataset:
    path = Path(path)
    relation = path.stem
    attributes: list[Attribute] = []
    rows: list[Row] = []
    in_data = False
    with open(path, "r", encoding="utf-8") as f:
        for lineno, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line or line.startswith("%"):
                continue
            lower = line.lower()
            if not in_data:
                if lower.startswith("@relation"):
                    parts = line.split(None, 1)
                    if len(parts) == 2:
                        relation = parts[1].strip("'\"")
                elif lower.startswith("@attribute"):
                    attributes.append(_parse_attribute(path, lineno, line))
                elif lower.startswith("@data"):
                    in_data = True
                else:
                    raise DatasetFormatError(f"{path}:{lineno}: unexpected header line")
                continue
            cells = [c.strip().strip("'\"") for c in next(csv.reader([line]))]
            if len(cells) != len(attributes):
                raise DatasetFormatError(
                    f"{path}:{lineno}: expected {len(attributes)} values, got {len(cells)}"
                )
            row: Row = []
            for cell, attr in zip(cells, attributes):
                if cell in MISSING:
                    row.append(None)
                elif attr.is_nominal:
                    if cell not in attr.values:  # type: ignore[operator]
                        raise DatasetFormatError(
                            f"{path}:{lineno}: {cell!r} is not a label of {attr.name!r}"
                        )
                    row.append(cell)
                else:
                    number = _to_number(cell)
                    if number is None:
                        raise DatasetFormatError(
                            f"{path}:{lineno}: {cell!r} is not numeric ({attr.name!r})"
                        )
                    row.append(number)
            rows.append(row)
    if not attributes:
        raise DatasetFormatError(f"{path}: no @attribute declarations")
    if not in_data:
        raise DatasetFormatError(f"{path}: missing @data section")
    return Dataset(relation, attributes, rows)


def load_dataset(reference: str | Path) -> Dataset:
    """Load a dataset file, dispatching on its extension (``.arff`` or CSV)."""
    path = Path(reference)
    if not path.is_file():
        raise FileNotFoundError(f"Dataset file not found: {path}")
    if path.suffix.lower() == ".arff":
        return parse_arff(path)
    return parse_csv(path)
