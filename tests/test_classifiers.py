from __future__ import annotations

import pytest

from benchsweep.classifiers import NearestNeighbours, ZeroR
from benchsweep.models import Attribute, Dataset


def _nominal() -> Dataset:
    return Dataset(
        "toy",
        [Attribute("x"), Attribute("colour", ("red", "blue")), Attribute("cls", ("a", "b"))],
        [
            [0.0, "red", "a"],
            [0.1, "red", "a"],
            [0.2, "blue", "a"],
            [1.0, "blue", "b"],
            [0.9, "blue", "b"],
        ],
        class_index=2,
    )


def _numeric() -> Dataset:
    return Dataset(
        "line",
        [Attribute("x"), Attribute("y")],
        [[0.0, 0.0], [1.0, 2.0], [2.0, 4.0], [3.0, 6.0]],
        class_index=1,
    )


def test_zero_r_majority_and_mean() -> None:
    clf = ZeroR()
    clf.build_classifier(_nominal())
    assert clf.classify_instance([0.5, "red", None]) == "a"
    clf.build_classifier(_numeric())
    assert clf.classify_instance([10.0, None]) == pytest.approx(3.0)


def test_zero_r_tie_prefers_first_declared_label() -> None:
    ds = _nominal().subset([[0.0, "red", "b"], [0.0, "red", "a"]])
    clf = ZeroR()
    clf.build_classifier(ds)
    assert clf.classify_instance([0.0, "red", None]) == "a"


def test_knn_nearest_label() -> None:
    clf = NearestNeighbours(k=1)
    clf.build_classifier(_nominal())
    assert clf.classify_instance([0.95, "blue", None]) == "b"
    assert clf.classify_instance([0.05, "red", None]) == "a"


def test_knn_vote_with_larger_k() -> None:
    clf = NearestNeighbours(k=5)
    clf.build_classifier(_nominal())
    # majority of all five training rows
    assert clf.classify_instance([0.95, "blue", None]) == "a"


def test_knn_numeric_prediction_and_weighting() -> None:
    clf = NearestNeighbours(k=2, distance_weighting="inverse")
    clf.build_classifier(_numeric())
    assert clf.classify_instance([1.0, None]) == pytest.approx(2.0, abs=0.01)
    clf.distance_weighting = "none"
    assert clf.classify_instance([1.4, None]) == pytest.approx(3.0)


def test_knn_requires_build() -> None:
    with pytest.raises(RuntimeError):
        NearestNeighbours().classify_instance([0.0])


def test_describe_includes_options() -> None:
    assert NearestNeighbours(k=3).describe() == "knn(k=3 distance_weighting=none)"
    assert ZeroR().describe() == "zero_r"
