"""ZeroR: predicts the majority label (nominal class) or the mean (numeric class)."""

from __future__ import annotations

from collections import Counter
from typing import Any

from benchsweep.classifiers.base import Classifier, class_values
from benchsweep.components import register_component
from benchsweep.models import Dataset, Row


@register_component("zero_r")
class ZeroR(Classifier):
    def __init__(self) -> None:
        self._prediction: Any = None

    def build_classifier(self, data: Dataset) -> None:
        values = class_values(data)
        if not values:
            self._prediction = None
        elif data.class_attribute.is_nominal:
            counts = Counter(values)
            # ties go to the label declared first
            order = {label: i for i, label in enumerate(data.class_attribute.values or ())}
            self._prediction = min(counts, key=lambda v: (-counts[v], order.get(v, len(order))))
        else:
            self._prediction = sum(values) / len(values)

    def classify_instance(self, row: Row) -> Any:
        return self._prediction
