"""Result producers shipped with benchsweep.

``random_split`` evaluates a classifier on a random train/test split of the
current dataset. The run number seeds the shuffle, so the same run number
always sees the same split regardless of the classifier being evaluated.
"""

from __future__ import annotations

import math
import random
import time
from typing import Any, Dict, List

from benchsweep.accessors import FieldRegistry
from benchsweep.classifiers import Classifier, ZeroR
from benchsweep.components import register_component
from benchsweep.experiments.protocol import IterationContext, ResultProducer
from benchsweep.models import Dataset

RESULT_COLUMNS = (
    "dataset",
    "run",
    "classifier",
    "train_percent",
    "num_train",
    "num_test",
    "num_correct",
    "num_incorrect",
    "percent_correct",
    "mean_absolute_error",
    "root_mean_squared_error",
    "train_time_ms",
    "test_time_ms",
)


def _check_percent(value: float) -> None:
    if not 0.0 < value < 100.0:
        raise ValueError(f"train_percent must be in (0, 100), got {value}")


@register_component("random_split")
class RandomSplitResultProducer(ResultProducer):
    """Train on ``train_percent`` of the (shuffled) rows, test on the rest.

    Fields:
        train_percent: Share of instances used for training.
        randomize: Shuffle before splitting (seeded by the run number).
        classifier: Classifier under evaluation.
    """

    def __init__(self) -> None:
        super().__init__()
        self.train_percent = 66.0
        self.randomize = True
        self.classifier: Classifier = ZeroR()

    def fields(self) -> FieldRegistry:
        registry = FieldRegistry("random_split")
        registry.register(
            "train_percent",
            float,
            lambda: self.train_percent,
            lambda v: setattr(self, "train_percent", v),
            check=_check_percent,
        )
        registry.register(
            "randomize", bool, lambda: self.randomize, lambda v: setattr(self, "randomize", v)
        )
        registry.register(
            "classifier",
            Classifier,
            lambda: self.classifier,
            lambda v: setattr(self, "classifier", v),
        )
        return registry

    def run_iteration(self, run: int, context: IterationContext) -> None:
        if self.dataset is None:
            raise RuntimeError("no dataset set before run_iteration()")
        if self.listener is None:
            raise RuntimeError("no result listener set before run_iteration()")
        data = self.dataset
        rows = list(data.rows)
        if self.randomize:
            random.Random(run).shuffle(rows)
        n_train = int(round(len(rows) * self.train_percent / 100.0))
        if n_train == 0 or n_train >= len(rows):
            raise ValueError(
                f"dataset {data.name!r} with {len(rows)} instances is too small "
                f"for a {self.train_percent}% split"
            )
        train, test = data.subset(rows[:n_train]), data.subset(rows[n_train:])

        context.check()
        t0 = time.perf_counter()
        self.classifier.build_classifier(train)
        train_ms = (time.perf_counter() - t0) * 1000.0
        context.check()

        t0 = time.perf_counter()
        row = self._evaluate(test)
        test_ms = (time.perf_counter() - t0) * 1000.0
        row.update(
            {
                "dataset": data.name,
                "run": run,
                "classifier": self.classifier.describe(),
                "train_percent": self.train_percent,
                "num_train": train.num_instances,
                "num_test": test.num_instances,
                "train_time_ms": round(train_ms, 3),
                "test_time_ms": round(test_ms, 3),
            }
        )
        self.listener.accept_result_row({col: row.get(col) for col in RESULT_COLUMNS})

    def _evaluate(self, test: Dataset) -> Dict[str, Any]:
        cls = test.class_index
        nominal = test.class_attribute.is_nominal
        correct = incorrect = 0
        errors: List[float] = []
        for inst in test.rows:
            actual = inst[cls]
            if actual is None:
                continue
            predicted = self.classifier.classify_instance(inst)
            if nominal:
                if predicted == actual:
                    correct += 1
                else:
                    incorrect += 1
            elif predicted is not None:
                errors.append(float(predicted) - float(actual))
        if nominal:
            total = correct + incorrect
            return {
                "num_correct": correct,
                "num_incorrect": incorrect,
                "percent_correct": (100.0 * correct / total) if total else None,
            }
        if not errors:
            return {}
        return {
            "mean_absolute_error": sum(abs(e) for e in errors) / len(errors),
            "root_mean_squared_error": math.sqrt(sum(e * e for e in errors) / len(errors)),
        }
