"""Exception hierarchy shared by the sweep engine and its collaborators."""

from __future__ import annotations


class SweepError(Exception):
    """Base class for all errors raised by benchsweep."""


class ConfigurationError(SweepError):
    """Invalid experiment setup; fatal at ``Experiment.initialize()``."""


class SerializationError(SweepError):
    """Saving or loading an experiment configuration failed."""


class ExperimentCancelled(SweepError):
    """Raised by ``next_iteration()`` once cancellation was requested."""


class IterationError(SweepError):
    """Failure of a single sweep cell.

    Attributes:
        run: Run number of the failed cell.
        dataset_index: Index into ``ExperimentConfig.datasets``.
        custom_index: Index into ``property_values`` (0 when the iterator is off).
    """

    def __init__(
        self,
        message: str,
        run: int | None = None,
        dataset_index: int | None = None,
        custom_index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.run = run
        self.dataset_index = dataset_index
        self.custom_index = custom_index

    @property
    def cell(self) -> tuple[int | None, int | None, int | None]:
        return (self.run, self.dataset_index, self.custom_index)


class IterationTimeout(IterationError):
    """The producer passed its per-iteration deadline."""


class IterationCancelled(IterationError):
    """The producer noticed a cancellation request mid-iteration."""


class DatasetFormatError(ValueError):
    """Dataset file could not be parsed."""
