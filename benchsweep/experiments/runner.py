"""Iteration controller for experiment sweeps.

An :class:`Experiment` walks the cells of run x dataset x custom property
value, innermost first:

    for custom_index in property values (or once when the iterator is off):
        for dataset_index in datasets:
            for run in run_lower..run_upper:
                producer.run_iteration(run, context)

Progress lives in an immutable :class:`IterationState`; each call to
``next_iteration()`` executes exactly one cell and replaces the state. The
property value is written only when the custom index changes and a dataset is
loaded only when the dataset index changes.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, List, NoReturn

from benchsweep.components import create_component
from benchsweep.errors import (
    ConfigurationError,
    ExperimentCancelled,
    IterationError,
)
from benchsweep.experiments.config import ExperimentConfig
from benchsweep.experiments.protocol import (
    IterationContext,
    ResultListener,
    ResultProducer,
)
from benchsweep.models import Dataset
from benchsweep.parser import load_dataset
from benchsweep.property_path import set_property, validate_path

logger = logging.getLogger("benchsweep.experiment")

DatasetLoader = Callable[[str], Dataset]


@dataclass(frozen=True)
class IterationState:
    """Counters of a sweep in progress. Never persisted."""

    current_run: int
    dataset_index: int = 0
    custom_index: int = 0
    applied_custom_index: int = -1
    loaded_dataset: Dataset | None = None
    finished: bool = False

    @classmethod
    def start(cls, config: ExperimentConfig) -> "IterationState":
        return cls(current_run=config.run_lower)

    def advance(self, config: ExperimentConfig) -> "IterationState":
        """Counters after one cell: run, then dataset, then custom index roll over."""
        run = self.current_run + 1
        if run <= config.run_upper:
            return replace(self, current_run=run)
        dataset_index = self.dataset_index + 1
        custom_index = self.custom_index
        finished = False
        if dataset_index >= len(config.datasets):
            dataset_index = 0
            if config.use_property_iterator:
                custom_index += 1
                finished = custom_index >= len(config.property_values or ())
            else:
                finished = True
        return replace(
            self,
            current_run=config.run_lower,
            dataset_index=dataset_index,
            custom_index=custom_index,
            loaded_dataset=None,
            finished=finished,
        )

    @property
    def cell(self) -> tuple[int, int, int]:
        return (self.current_run, self.dataset_index, self.custom_index)


class Experiment:
    """Drives a result producer over every cell of an experiment configuration.

    Args:
        config: Sweep description; treated as read-only while running.
        producer: Live producer; built from ``config.producer`` when omitted.
        listener: Live listener; built from ``config.listener`` when omitted.
        loader: Dataset collaborator, ``reference -> Dataset``.
        iteration_timeout_s: Per-cell deadline handed to the producer.
    """

    def __init__(
        self,
        config: ExperimentConfig,
        producer: ResultProducer | None = None,
        listener: ResultListener | None = None,
        loader: DatasetLoader = load_dataset,
        iteration_timeout_s: float | None = None,
    ) -> None:
        self.config = config
        self.producer = producer
        self.listener = listener
        self.loader = loader
        self.iteration_timeout_s = iteration_timeout_s
        self.state = IterationState(current_run=config.run_lower, finished=True)
        self.errors: List[IterationError] = []
        self.completed = 0
        self._cancel = threading.Event()

    # --- counters exposed for progress reporting ---
    @property
    def current_run_number(self) -> int:
        return self.state.current_run

    @property
    def current_dataset_number(self) -> int:
        return self.state.dataset_index

    @property
    def current_custom_number(self) -> int:
        return self.state.custom_index

    def _build_components(self) -> tuple[ResultProducer, ResultListener]:
        producer = self.producer
        if producer is None and self.config.producer is not None:
            producer = create_component(self.config.producer)  # type: ignore[assignment]
        listener = self.listener
        if listener is None and self.config.listener is not None:
            listener = create_component(self.config.listener)  # type: ignore[assignment]
        if producer is None:
            raise ConfigurationError("No result producer set")
        if listener is None:
            raise ConfigurationError("No result listener set")
        if not isinstance(producer, ResultProducer):
            raise ConfigurationError(f"{type(producer).__name__} is not a result producer")
        if not isinstance(listener, ResultListener):
            raise ConfigurationError(f"{type(listener).__name__} is not a result listener")
        return producer, listener

    def initialize(self) -> IterationState:
        """Validate the configuration and reset the sweep to its first cell."""
        self.config.validate(require_components=False)
        producer, listener = self._build_components()
        if self.config.use_property_iterator:
            if self.config.property_path is None:
                raise ConfigurationError("custom property iterator is on but no path is set")
            validate_path(producer, self.config.property_path, self.config.property_values or ())
        self.producer, self.listener = producer, listener
        self.state = IterationState.start(self.config)
        self.errors = []
        self.completed = 0
        self._cancel.clear()
        producer.set_result_listener(listener)
        producer.pre_process()
        logger.info(
            "Initialized experiment: %d iteration(s) over %d dataset(s)",
            self.config.total_iterations(),
            len(self.config.datasets),
        )
        return self.state

    def has_more_iterations(self) -> bool:
        return not self.state.finished

    def cancel(self) -> None:
        """Request a stop; honoured before the next cell and by ``context.check()``."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _cell_error(self, message: str, exc: BaseException) -> IterationError:
        run, dataset_index, custom_index = self.state.cell
        if isinstance(exc, IterationError):
            exc.run, exc.dataset_index, exc.custom_index = run, dataset_index, custom_index
            return exc
        return IterationError(f"{message}: {exc}", run, dataset_index, custom_index)

    def _fail(self, message: str, exc: Exception) -> NoReturn:
        error = self._cell_error(message, exc)
        if error is exc:
            raise error
        raise error from exc

    def _apply_property(self, producer: ResultProducer) -> None:
        state, config = self.state, self.config
        if not config.use_property_iterator or state.applied_custom_index == state.custom_index:
            return
        if config.property_path is None or config.property_values is None:
            raise ConfigurationError("custom property path or values missing")
        value = config.property_values[state.custom_index]
        try:
            set_property(producer, config.property_path, value)
        except Exception as e:
            self._fail(f"cannot set {config.property_path}", e)
        logger.info(
            "Custom property %s = %s (%d/%d)",
            config.property_path,
            value,
            state.custom_index + 1,
            len(config.property_values),
        )
        self.state = replace(state, applied_custom_index=state.custom_index)

    def _load_dataset(self, producer: ResultProducer) -> None:
        if self.state.loaded_dataset is not None:
            return
        reference = self.config.datasets[self.state.dataset_index]
        try:
            dataset = self.loader(reference)
        except Exception as e:
            self._fail(f"cannot load dataset {reference}", e)
        if dataset.class_index is None:
            dataset.class_index = dataset.num_attributes - 1
        logger.info(
            "Loaded dataset %s: %d instances, %d attributes",
            reference,
            dataset.num_instances,
            dataset.num_attributes,
        )
        try:
            producer.set_dataset(dataset)
        except Exception as e:
            self._fail(f"producer rejected dataset {reference}", e)
        self.state = replace(self.state, loaded_dataset=dataset)

    def _context(self) -> IterationContext:
        deadline = None
        if self.iteration_timeout_s is not None:
            deadline = time.monotonic() + self.iteration_timeout_s
        run, dataset_index, custom_index = self.state.cell
        return IterationContext(run, dataset_index, custom_index, deadline, self._cancel)

    def next_iteration(self) -> IterationState:
        """Execute the current cell and advance to the next one.

        Raises:
            ExperimentCancelled: ``cancel()`` was called.
            IterationError: the cell failed; counters are left on the failed
                cell so the caller decides whether to ``advance_counters()``.
        """
        if self._cancel.is_set():
            raise ExperimentCancelled("experiment cancelled")
        if self.state.finished:
            raise RuntimeError("no more iterations; call initialize() first")
        producer = self.producer
        if producer is None:
            raise RuntimeError("experiment not initialized")
        self._apply_property(producer)
        self._load_dataset(producer)
        context = self._context()
        try:
            producer.run_iteration(self.state.current_run, context)
        except Exception as e:
            self._fail("result producer failed", e)
        self.completed += 1
        return self.advance_counters()

    def advance_counters(self) -> IterationState:
        self.state = self.state.advance(self.config)
        return self.state

    def run_experiment(self) -> List[IterationError]:
        """Run every remaining cell; failed cells are recorded and skipped."""
        total = self.config.total_iterations()
        step = max(1, total // 10)
        done = 0
        while self.has_more_iterations() and not self.cancelled:
            try:
                self.next_iteration()
            except ExperimentCancelled:
                break
            except IterationError as e:
                logger.warning(
                    "Iteration run=%s dataset=%s custom=%s failed: %s",
                    e.run,
                    e.dataset_index,
                    e.custom_index,
                    e,
                )
                self.errors.append(e)
                self.advance_counters()
            done += 1
            if done % step == 0:
                logger.info("Progress %d/%d (%d failed)", done, total, len(self.errors))
        if self.cancelled:
            logger.warning("Experiment cancelled after %d/%d iteration(s)", done, total)
        return self.errors

    def post_process(self) -> None:
        if self.producer is None:
            raise RuntimeError("experiment not initialized")
        self.producer.post_process()
        logger.info(
            "Experiment finished: %d succeeded, %d failed", self.completed, len(self.errors)
        )
