"""Benchmark sweep engine.

Exports the experiment controller, its configuration and the error types.
Importing the package registers the shipped components (classifiers,
producers, listeners).
"""

from benchsweep.components import ComponentSpec  # noqa: F401
from benchsweep.errors import (  # noqa: F401
    ConfigurationError,
    IterationError,
    SerializationError,
)
from benchsweep.experiments import Experiment, ExperimentConfig  # noqa: F401
from benchsweep.property_path import PropertyNode, PropertyPath  # noqa: F401

__all__ = [
    "ComponentSpec",
    "ConfigurationError",
    "Experiment",
    "ExperimentConfig",
    "IterationError",
    "PropertyNode",
    "PropertyPath",
    "SerializationError",
]
