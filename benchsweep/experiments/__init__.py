"""Experiment sweep package.

Provides the experiment configuration, its persistence and option surface,
the iteration controller, and the shipped result producers and listeners.
"""

from benchsweep.experiments.config import ExperimentConfig
from benchsweep.experiments.listeners import CSVResultListener, InMemoryResultListener
from benchsweep.experiments.persistence import load_config, save_config
from benchsweep.experiments.producers import RandomSplitResultProducer
from benchsweep.experiments.protocol import IterationContext, ResultListener, ResultProducer
from benchsweep.experiments.runner import Experiment, IterationState

__all__ = [
    "CSVResultListener",
    "Experiment",
    "ExperimentConfig",
    "InMemoryResultListener",
    "IterationContext",
    "IterationState",
    "RandomSplitResultProducer",
    "ResultListener",
    "ResultProducer",
    "load_config",
    "save_config",
]
