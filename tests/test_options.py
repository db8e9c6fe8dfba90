from __future__ import annotations

import pytest

from benchsweep.components import ComponentSpec
from benchsweep.errors import ConfigurationError
from benchsweep.experiments.config import ExperimentConfig
from benchsweep.experiments.options import config_to_options, parse_assignments, parse_options
from benchsweep.property_path import PropertyPath


def test_parse_options_defaults() -> None:
    cfg = parse_options(["-T", "a.csv"])
    assert (cfg.run_lower, cfg.run_upper) == (1, 10)
    assert cfg.datasets == ["a.csv"]
    assert cfg.producer == ComponentSpec("random_split")
    assert cfg.listener == ComponentSpec("csv")


def test_parse_options_full() -> None:
    cfg = parse_options(
        [
            "-L", "2", "-U", "4",
            "-T", "a.csv", "-T", "b.arff",
            "-P", "random_split", "-D", "memory",
            "-N", "first try",
            "-O", "train_percent=80",
            "-O", "classifier={kind: knn, options: {k: 3}}",
        ]
    )
    assert (cfg.run_lower, cfg.run_upper) == (2, 4)
    assert cfg.datasets == ["a.csv", "b.arff"]
    assert cfg.notes == "first try"
    assert cfg.listener == ComponentSpec("memory")
    assert cfg.producer == ComponentSpec(
        "random_split",
        {"train_percent": 80, "classifier": ComponentSpec("knn", {"k": 3})},
    )


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["-T", "a.csv", "-L", "5", "-U", "2"],
        ["-T", "a.csv", "-L", "one"],
        ["-T", "a.csv", "--bogus"],
        ["-T", "a.csv", "-O", "novalue"],
    ],
)
def test_parse_options_errors(argv: list[str]) -> None:
    with pytest.raises(ConfigurationError):
        parse_options(argv)


def test_parse_assignments_keeps_types() -> None:
    assert parse_assignments(["k=3", "flag=true", "name=abc", "x=1.5", "empty="]) == {
        "k": 3,
        "flag": True,
        "name": "abc",
        "x": 1.5,
        "empty": "",
    }


def test_options_roundtrip() -> None:
    cfg = ExperimentConfig(
        run_lower=1,
        run_upper=5,
        datasets=["x.csv", "y.csv"],
        notes="n",
        producer=ComponentSpec(
            "random_split",
            {"train_percent": 50.0, "classifier": ComponentSpec("knn", {"k": 2})},
        ),
        listener=ComponentSpec("csv", {"output_file": "123"}),
    )
    assert parse_options(config_to_options(cfg)) == cfg


def test_property_iterator_not_expressed_as_options() -> None:
    cfg = ExperimentConfig(
        datasets=["x.csv"],
        use_property_iterator=True,
        property_path=PropertyPath.parse("classifier.k"),
        property_values=[1, 2],
    )
    options = config_to_options(cfg)
    assert cfg.use_property_iterator  # not cleared as a side effect
    assert parse_options(options).use_property_iterator is False
