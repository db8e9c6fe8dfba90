"""k-nearest-neighbours classifier over range-normalised Euclidean distance."""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Any

from benchsweep.accessors import FieldRegistry
from benchsweep.classifiers.base import Classifier
from benchsweep.components import register_component
from benchsweep.models import Attribute, Dataset, Row

DISTANCE_WEIGHTING = ("none", "inverse", "similarity")


def _check_k(value: int) -> None:
    if value < 1:
        raise ValueError(f"k must be >= 1, got {value}")


def _check_weighting(value: str) -> None:
    if value not in DISTANCE_WEIGHTING:
        raise ValueError(f"expected one of {DISTANCE_WEIGHTING}, got {value!r}")


@register_component("knn")
class NearestNeighbours(Classifier):
    """Instance based learner.

    Fields:
        k: Number of neighbours voting (>= 1).
        distance_weighting: ``none``, ``inverse`` (1/d) or ``similarity`` (1-d).
    """

    def __init__(self, k: int = 1, distance_weighting: str = "none") -> None:
        self.k = k
        self.distance_weighting = distance_weighting
        self._data: Dataset | None = None
        self._ranges: list[tuple[float, float] | None] = []

    def fields(self) -> FieldRegistry:
        registry = FieldRegistry("knn")
        registry.register(
            "k", int, lambda: self.k, self._set_k, check=_check_k, doc="neighbours voting"
        )
        registry.register(
            "distance_weighting",
            str,
            lambda: self.distance_weighting,
            self._set_weighting,
            check=_check_weighting,
            doc="one of " + ", ".join(DISTANCE_WEIGHTING),
        )
        return registry

    def _set_k(self, value: int) -> None:
        self.k = value

    def _set_weighting(self, value: str) -> None:
        self.distance_weighting = value

    def build_classifier(self, data: Dataset) -> None:
        if data.class_index is None:
            raise ValueError(f"dataset {data.name!r} has no class attribute set")
        cls = data.class_index
        self._data = data.subset([row for row in data.rows if row[cls] is not None])
        self._ranges = []
        for i, attr in enumerate(data.attributes):
            nums = [row[i] for row in self._data.rows if row[i] is not None]
            if i == cls or attr.is_nominal or not nums:
                self._ranges.append(None)
            else:
                self._ranges.append((min(nums), max(nums)))

    def _difference(self, i: int, attr: Attribute, a: Any, b: Any) -> float:
        if a is None or b is None:
            return 1.0
        if attr.is_nominal:
            return 0.0 if a == b else 1.0
        bounds = self._ranges[i]
        if bounds is None or bounds[1] == bounds[0]:
            return 0.0
        lo, hi = bounds
        return (a - b) / (hi - lo)

    def distance(self, first: Row, second: Row) -> float:
        assert self._data is not None
        total = 0.0
        used = 0
        for i, attr in enumerate(self._data.attributes):
            if i == self._data.class_index:
                continue
            total += self._difference(i, attr, first[i], second[i]) ** 2
            used += 1
        return math.sqrt(total / used) if used else 0.0

    def _weight(self, d: float) -> float:
        if self.distance_weighting == "inverse":
            return 1.0 / (d + 1e-3)
        if self.distance_weighting == "similarity":
            return 1.0 - d
        return 1.0

    def classify_instance(self, row: Row) -> Any:
        if self._data is None:
            raise RuntimeError("classifier has not been built")
        if not self._data.rows:
            return None
        cls = self._data.class_index
        assert cls is not None
        scored = sorted(
            ((self.distance(row, train), n) for n, train in enumerate(self._data.rows)),
        )[: self.k]
        if self._data.class_attribute.is_nominal:
            votes: dict[Any, float] = defaultdict(float)
            for d, n in scored:
                votes[self._data.rows[n][cls]] += self._weight(d)
            order = {v: i for i, v in enumerate(self._data.class_attribute.values or ())}
            return min(votes, key=lambda v: (-votes[v], order.get(v, len(order))))
        weights = [self._weight(d) for d, _ in scored]
        total = sum(weights)
        if total <= 0:
            return sum(self._data.rows[n][cls] for _, n in scored) / len(scored)
        return sum(w * self._data.rows[n][cls] for w, (_, n) in zip(weights, scored)) / total
