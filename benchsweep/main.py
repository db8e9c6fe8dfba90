"""Command-line driver: load, save and run experiments.

    benchsweep -l exp.yaml -r                      run a saved experiment
    benchsweep -T iris.arff -O classifier=knn -s exp.yaml
    benchsweep -T a.csv -T b.csv -L 1 -U 5 -W output_file=out.csv -r --summary sum.csv
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from typing import Optional, Sequence

from benchsweep.components import component_kinds
from benchsweep.errors import ConfigurationError, SerializationError
from benchsweep.experiments.aggregate import summarize_results, write_summary_csv
from benchsweep.experiments.config import ExperimentConfig
from benchsweep.experiments.options import add_experiment_arguments, config_from_args
from benchsweep.experiments.persistence import load_config, save_config
from benchsweep.experiments.runner import Experiment

logger = logging.getLogger("benchsweep")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="benchsweep",
        description="Run a classifier benchmark over runs x datasets x property values",
        epilog="component kinds: " + ", ".join(component_kinds()),
    )
    parser.add_argument("-l", dest="load", metavar="FILE",
                        help="load experiment from file (YAML or JSON); other options ignored")
    parser.add_argument("-s", dest="save", metavar="FILE",
                        help="save experiment to file after setting other options")
    parser.add_argument("-r", dest="run", action="store_true", help="run the experiment")
    parser.add_argument("--timeout-s", type=float, default=None,
                        help="per-iteration deadline in seconds")
    parser.add_argument("--summary", metavar="FILE",
                        help="after running, write a per dataset/classifier summary CSV")
    parser.add_argument("--plot", metavar="FILE", help="after running, save a summary chart")
    parser.add_argument("--log-level", default="INFO")
    return add_experiment_arguments(parser)


def run_experiment(config: ExperimentConfig, timeout_s: float | None = None) -> Experiment:
    """Initialize, iterate and post-process; Ctrl-C stops after the current cell."""
    experiment = Experiment(config, iteration_timeout_s=timeout_s)
    logger.info("Initializing...")
    experiment.initialize()
    previous = None
    if threading.current_thread() is threading.main_thread():
        previous = signal.signal(signal.SIGINT, lambda signum, frame: experiment.cancel())
    try:
        logger.info("Iterating...")
        experiment.run_experiment()
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)
        logger.info("Postprocessing...")
        experiment.post_process()
    return experiment


def _results_file(config: ExperimentConfig) -> Optional[str]:
    listener = config.listener
    if listener is None or listener.kind != "csv":
        return None
    output = listener.options.get("output_file", "")
    return None if output in ("", "-") else str(output)


def write_reports(config: ExperimentConfig, summary_path: str | None, plot_path: str | None) -> None:
    if not summary_path and not plot_path:
        return
    results = _results_file(config)
    if results is None:
        logger.warning("Summary/plot need a csv listener writing to a file; skipped")
        return
    if summary_path:
        write_summary_csv(results, summary_path)
    if plot_path:
        from benchsweep.visualization import plot_summary

        plot_summary(summarize_results(results), plot_path)
        logger.info("Saved summary chart to %s", plot_path)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(args.load) if args.load else config_from_args(args)
        logger.info("Experiment:\n%s", config.describe())
        if args.save:
            save_config(config, args.save)
        if not args.run:
            return 0
        experiment = run_experiment(config, args.timeout_s)
    except (ConfigurationError, SerializationError) as e:
        logger.error("%s", e)
        return 2
    write_reports(config, args.summary, args.plot)
    if experiment.errors:
        logger.warning("%d iteration(s) failed", len(experiment.errors))
        return 1
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
