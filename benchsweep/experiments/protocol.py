"""Producer/listener collaboration protocol driven by :class:`Experiment`.

The experiment only sequences calls; producers do the work and push rows to
their listener:

    producer.set_result_listener(listener)
    producer.pre_process()                  # once
    producer.set_dataset(ds)                # whenever a dataset is (re)loaded
    producer.run_iteration(run, context)    # once per sweep cell
    producer.post_process()                 # once
"""

from __future__ import annotations

import threading
import time
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from benchsweep.accessors import Configurable, FieldRegistry
from benchsweep.components import component_kind
from benchsweep.errors import IterationCancelled, IterationTimeout
from benchsweep.models import Dataset

ResultRow = Mapping[str, Any]


@dataclass(frozen=True)
class IterationContext:
    """Coordinates of the current cell plus its deadline and cancel flag.

    ``deadline`` is a ``time.monotonic()`` value or ``None`` for no limit.
    """

    run: int
    dataset_index: int
    custom_index: int
    deadline: float | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False)

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() > self.deadline

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        """Raise if the iteration was cancelled or ran past its deadline."""
        if self.cancel_event.is_set():
            raise IterationCancelled(
                "iteration cancelled", self.run, self.dataset_index, self.custom_index
            )
        if self.expired:
            raise IterationTimeout(
                f"iteration exceeded its deadline (run={self.run})",
                self.run,
                self.dataset_index,
                self.custom_index,
            )


class ResultListener(Configurable):
    """Sink for result rows. Lifecycle hooks are called by the producer."""

    def pre_process(self, producer: "ResultProducer") -> None:
        """Prepare for rows from ``producer``."""

    @abstractmethod
    def accept_result_row(self, row: ResultRow) -> None:
        """Receive one result row."""

    def post_process(self, producer: "ResultProducer") -> None:
        """All rows from ``producer`` have been delivered."""

    def fields(self) -> FieldRegistry:
        return FieldRegistry(component_kind(self))


class ResultProducer(Configurable):
    """Unit of work evaluated once per sweep cell."""

    def __init__(self) -> None:
        self.listener: ResultListener | None = None
        self.dataset: Dataset | None = None

    def set_result_listener(self, listener: ResultListener) -> None:
        self.listener = listener

    def set_dataset(self, dataset: Dataset) -> None:
        self.dataset = dataset

    def pre_process(self) -> None:
        if self.listener is None:
            raise RuntimeError("no result listener bound before pre_process()")
        self.listener.pre_process(self)

    @abstractmethod
    def run_iteration(self, run: int, context: IterationContext) -> None:
        """Produce and push the result rows of one cell; raise on failure."""

    def post_process(self) -> None:
        if self.listener is not None:
            self.listener.post_process(self)

    def fields(self) -> FieldRegistry:
        return FieldRegistry(component_kind(self))
