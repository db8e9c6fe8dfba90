"""Common structures for classifiers evaluated by result producers."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from benchsweep.accessors import Configurable, FieldRegistry
from benchsweep.components import component_kind, snapshot_component
from benchsweep.models import Dataset, Row


class Classifier(Configurable):
    """Abstract classifier.

    ``build_classifier`` must reset all learned state so that repeated builds
    on the same data give the same model. It must not modify the dataset.
    """

    @abstractmethod
    def build_classifier(self, data: Dataset) -> None:
        """Learn from ``data`` (class index must be set)."""

    @abstractmethod
    def classify_instance(self, row: Row) -> Any:
        """Predicted label for nominal classes, predicted value for numeric ones."""

    def fields(self) -> FieldRegistry:
        return FieldRegistry(component_kind(self))

    def describe(self) -> str:
        return str(snapshot_component(self))


def class_values(data: Dataset) -> list[Any]:
    """Non-missing class values of ``data`` in row order."""
    idx = data.class_index
    if idx is None:
        raise ValueError(f"dataset {data.name!r} has no class attribute set")
    return [row[idx] for row in data.rows if row[idx] is not None]
