"""Core data structures for datasets consumed by result producers.

This module defines:
    Attribute -- one column: name plus nominal labels (None for numeric).
    Dataset   -- rows of values with an optional class (target) index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

Row = list[Any]  # one instance; numeric values as float, nominal as str, missing as None


@dataclass(frozen=True)
class Attribute:
    """Single dataset column.

    Attributes:
        name: Column name.
        values: Allowed labels for a nominal attribute, ``None`` when numeric.
    """

    name: str
    values: tuple[str, ...] | None = None

    @property
    def is_nominal(self) -> bool:
        return self.values is not None


@dataclass
class Dataset:
    """Loaded dataset.

    ``class_index`` is left as ``None`` by the parser; the experiment assigns
    the last attribute when nobody designated a target.
    """

    name: str
    attributes: list[Attribute]
    rows: list[Row] = field(default_factory=list)
    class_index: int | None = None

    @property
    def num_attributes(self) -> int:
        return len(self.attributes)

    @property
    def num_instances(self) -> int:
        return len(self.rows)

    @property
    def class_attribute(self) -> Attribute:
        if self.class_index is None:
            raise ValueError(f"dataset {self.name!r} has no class attribute set")
        return self.attributes[self.class_index]

    def subset(self, rows: list[Row]) -> "Dataset":
        """Return a dataset sharing header and class index with ``rows`` as data."""
        return Dataset(self.name, self.attributes, rows, self.class_index)
