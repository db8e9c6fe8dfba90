from __future__ import annotations

import csv
from pathlib import Path

import pytest
from fakes import CollectingListener

from benchsweep.classifiers import NearestNeighbours
from benchsweep.components import ComponentSpec, create_component
from benchsweep.experiments.config import ExperimentConfig
from benchsweep.experiments.listeners import CSVResultListener, InMemoryResultListener
from benchsweep.experiments.producers import RESULT_COLUMNS, RandomSplitResultProducer
from benchsweep.experiments.protocol import IterationContext
from benchsweep.experiments.runner import Experiment
from benchsweep.parser import load_dataset
from benchsweep.property_path import PropertyPath


def _producer(dataset_path: Path, **options) -> tuple[RandomSplitResultProducer, CollectingListener]:
    producer = create_component(ComponentSpec("random_split", options))
    assert isinstance(producer, RandomSplitResultProducer)
    ds = load_dataset(dataset_path)
    ds.class_index = ds.num_attributes - 1
    listener = CollectingListener()
    producer.set_result_listener(listener)
    producer.set_dataset(ds)
    producer.pre_process()
    return producer, listener


def test_random_split_nominal_row(fixtures_dir: Path) -> None:
    producer, listener = _producer(fixtures_dir / "iris_small.csv")
    producer.run_iteration(1, IterationContext(1, 0, 0))
    (row,) = listener.rows
    assert tuple(row) == RESULT_COLUMNS
    assert row["dataset"] == "iris_small"
    assert row["run"] == 1
    assert row["classifier"] == "zero_r"
    assert row["num_train"] + row["num_test"] == 18
    assert row["num_train"] == 12
    assert row["num_correct"] + row["num_incorrect"] == row["num_test"]
    assert 0.0 <= row["percent_correct"] <= 100.0
    assert row["root_mean_squared_error"] is None


def test_random_split_numeric_row(fixtures_dir: Path) -> None:
    producer, listener = _producer(
        fixtures_dir / "cpu_small.csv", classifier=ComponentSpec("knn", {"k": 2})
    )
    producer.run_iteration(3, IterationContext(3, 0, 0))
    (row,) = listener.rows
    assert row["classifier"] == "knn(k=2 distance_weighting=none)"
    assert row["percent_correct"] is None
    assert row["mean_absolute_error"] >= 0.0
    assert row["root_mean_squared_error"] >= row["mean_absolute_error"]


def test_same_run_gives_same_split(fixtures_dir: Path) -> None:
    producer, listener = _producer(fixtures_dir / "iris_small.csv", classifier=ComponentSpec("knn"))
    producer.run_iteration(4, IterationContext(4, 0, 0))
    producer.run_iteration(4, IterationContext(4, 0, 0))
    first, second = listener.rows
    assert first["num_correct"] == second["num_correct"]


def test_split_too_small_fails(fixtures_dir: Path) -> None:
    producer, _ = _producer(fixtures_dir / "iris_small.csv", train_percent=1.0)
    with pytest.raises(ValueError):
        producer.run_iteration(1, IterationContext(1, 0, 0))


def test_csv_listener_writes_header_once(tmp_path: Path) -> None:
    out = tmp_path / "sub" / "results.csv"
    listener = CSVResultListener(str(out))
    producer = RandomSplitResultProducer()
    listener.pre_process(producer)
    listener.accept_result_row({"run": 1, "score": 0.5})
    listener.accept_result_row({"run": 2, "score": None})
    listener.post_process(producer)
    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows == [["run", "score"], ["1", "0.5"], ["2", "?"]]
    assert listener.rows_written == 2


def test_csv_listener_requires_pre_process() -> None:
    with pytest.raises(RuntimeError):
        CSVResultListener("x.csv").accept_result_row({"a": 1})


def test_knn_k_sweep_end_to_end(fixtures_dir: Path, tmp_path: Path) -> None:
    out = tmp_path / "results.csv"
    config = ExperimentConfig(
        run_lower=1,
        run_upper=2,
        datasets=[str(fixtures_dir / "weather.arff"), str(fixtures_dir / "iris_small.csv")],
        use_property_iterator=True,
        property_path=PropertyPath.parse("classifier.k"),
        property_values=[1, 3],
        producer=ComponentSpec("random_split", {"classifier": ComponentSpec("knn")}),
        listener=ComponentSpec("csv", {"output_file": str(out)}),
    )
    exp = Experiment(config)
    exp.initialize()
    assert exp.run_experiment() == []
    exp.post_process()
    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 8
    assert [r["classifier"] for r in rows] == (
        ["knn(k=1 distance_weighting=none)"] * 4 + ["knn(k=3 distance_weighting=none)"] * 4
    )
    assert [r["dataset"] for r in rows[:4]] == ["weather", "weather", "iris_small", "iris_small"]
    assert isinstance(exp.producer.classifier, NearestNeighbours)  # type: ignore[union-attr]


def test_memory_listener_resets_on_pre_process() -> None:
    listener = InMemoryResultListener()
    listener.accept_result_row({"a": 1})
    listener.pre_process(RandomSplitResultProducer())
    assert listener.rows == []
