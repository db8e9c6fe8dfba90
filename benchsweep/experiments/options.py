"""Command-line option surface of an experiment.

    -L <num>          lower run number (default 1)
    -U <num>          upper run number, inclusive (default 10)
    -T <file>         dataset, may be repeated (required)
    -P <kind>         result producer kind (default random_split)
    -D <kind>         result listener kind (default csv)
    -N <text>         notes
    -O <key=value>    producer option, may be repeated
    -W <key=value>    listener option, may be repeated

Option values are read with ``yaml.safe_load`` so ``k=3`` stays an int and
nested components can be written inline, e.g.
``-O "classifier={kind: knn, options: {k: 3}}"``. The custom property
iterator cannot be expressed as options; use a configuration file.
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Sequence

import yaml

from benchsweep.components import ComponentSpec, value_from_data, value_to_data
from benchsweep.errors import ConfigurationError
from benchsweep.experiments.config import (
    DEFAULT_LISTENER,
    DEFAULT_PRODUCER,
    DEFAULT_RUN_LOWER,
    DEFAULT_RUN_UPPER,
    ExperimentConfig,
)


class _OptionParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise ConfigurationError(message)


def add_experiment_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument("-L", dest="run_lower", type=int, default=DEFAULT_RUN_LOWER,
                        help="lower run number to start the experiment from (default 1)")
    parser.add_argument("-U", dest="run_upper", type=int, default=DEFAULT_RUN_UPPER,
                        help="upper run number to end the experiment at, inclusive (default 10)")
    parser.add_argument("-T", dest="datasets", action="append", default=[], metavar="FILE",
                        help="dataset to run the experiment on (repeatable)")
    parser.add_argument("-P", dest="producer", default=DEFAULT_PRODUCER, metavar="KIND",
                        help="result producer kind (default random_split)")
    parser.add_argument("-D", dest="listener", default=DEFAULT_LISTENER, metavar="KIND",
                        help="result listener kind (default csv)")
    parser.add_argument("-N", dest="notes", default="", help="notes about the experiment")
    parser.add_argument("-O", dest="producer_options", action="append", default=[],
                        metavar="KEY=VALUE", help="producer option (repeatable)")
    parser.add_argument("-W", dest="listener_options", action="append", default=[],
                        metavar="KEY=VALUE", help="listener option (repeatable)")
    return parser


def parse_assignments(items: Sequence[str]) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for item in items:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigurationError(f"expected KEY=VALUE, got {item!r}")
        try:
            value = yaml.safe_load(raw) if raw.strip() else ""
        except yaml.YAMLError as e:
            raise ConfigurationError(f"cannot parse value of {key!r}: {e}") from None
        options[key] = value_from_data(value)
    return options


def config_from_args(args: argparse.Namespace) -> ExperimentConfig:
    """Build and validate a config from parsed arguments."""
    config = ExperimentConfig(
        run_lower=args.run_lower,
        run_upper=args.run_upper,
        datasets=list(args.datasets),
        notes=args.notes or "",
        producer=ComponentSpec(args.producer, parse_assignments(args.producer_options)),
        listener=ComponentSpec(args.listener, parse_assignments(args.listener_options)),
    )
    if not config.datasets:
        raise ConfigurationError("Required: -T <dataset file>")
    config.validate()
    return config


def parse_options(argv: Sequence[str]) -> ExperimentConfig:
    parser = add_experiment_arguments(_OptionParser(prog="experiment", add_help=False))
    return config_from_args(parser.parse_args(list(argv)))


def _reads_back(text: str) -> bool:
    try:
        return yaml.safe_load(text) == text
    except yaml.YAMLError:
        return False


def _render(value: Any) -> str:
    data = value_to_data(value)
    if isinstance(data, str) and (data == "" or _reads_back(data)):
        return data
    # JSON is valid YAML flow syntax
    return json.dumps(data)


def config_to_options(config: ExperimentConfig) -> list[str]:
    """Options reproducing ``config``; the property iterator is left out."""
    options = ["-L", str(config.run_lower), "-U", str(config.run_upper)]
    for dataset in config.datasets:
        options += ["-T", dataset]
    if config.producer is not None:
        options += ["-P", config.producer.kind]
    if config.listener is not None:
        options += ["-D", config.listener.kind]
    if config.notes:
        options += ["-N", config.notes]
    if config.producer is not None:
        for key, value in config.producer.options.items():
            options += ["-O", f"{key}={_render(value)}"]
    if config.listener is not None:
        for key, value in config.listener.options.items():
            options += ["-W", f"{key}={_render(value)}"]
    return options
