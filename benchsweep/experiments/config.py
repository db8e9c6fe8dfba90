"""Experiment configuration: the durable description of a sweep."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from benchsweep.components import ComponentSpec, value_from_data, value_to_data
from benchsweep.errors import ConfigurationError
from benchsweep.property_path import PropertyPath

DEFAULT_RUN_LOWER = 1
DEFAULT_RUN_UPPER = 10
DEFAULT_PRODUCER = "random_split"
DEFAULT_LISTENER = "csv"


def _default_producer() -> ComponentSpec:
    return ComponentSpec(DEFAULT_PRODUCER)


def _default_listener() -> ComponentSpec:
    return ComponentSpec(DEFAULT_LISTENER)


def _run_bound(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    return value


def _path_from_data(data: Any) -> PropertyPath | None:
    if data is None or data == "" or data == []:
        return None
    if not isinstance(data, (str, list)):
        raise ConfigurationError(
            f"property_path must be a dotted string or a list of nodes, got {data!r}"
        )
    return PropertyPath.from_list(data)


@dataclass
class ExperimentConfig:
    """Run range x datasets x optional custom property values.

    Attributes:
        run_lower: First run number (inclusive).
        run_upper: Last run number (inclusive).
        datasets: Dataset references (file paths) in sweep order.
        use_property_iterator: Enables the outer custom-property dimension.
        property_path: Route from the producer to the swept field.
        property_values: Values written at ``property_path``, one per custom index.
        notes: Free text kept with the experiment.
        producer: Result producer specification (``None`` means unset).
        listener: Result listener specification (``None`` means unset).
    """

    run_lower: int = DEFAULT_RUN_LOWER
    run_upper: int = DEFAULT_RUN_UPPER
    datasets: list[str] = field(default_factory=list)
    use_property_iterator: bool = False
    property_path: PropertyPath | None = None
    property_values: list[Any] | None = None
    notes: str = ""
    producer: ComponentSpec | None = field(default_factory=_default_producer)
    listener: ComponentSpec | None = field(default_factory=_default_listener)

    def validate(self, *, require_components: bool = True) -> None:
        """Raise ``ConfigurationError`` unless the config describes a runnable sweep."""
        if self.use_property_iterator:
            if not self.property_values:
                raise ConfigurationError("Null or empty value array for property iterator")
            if self.property_path is None:
                raise ConfigurationError("Property iterator enabled without a property path")
        if self.run_lower > self.run_upper:
            raise ConfigurationError(
                f"Lower run number ({self.run_lower}) is greater than "
                f"upper run number ({self.run_upper})"
            )
        if not self.datasets:
            raise ConfigurationError("No datasets have been specified")
        if require_components:
            if self.producer is None:
                raise ConfigurationError("No result producer set")
            if self.listener is None:
                raise ConfigurationError("No result listener set")

    @property
    def run_count(self) -> int:
        return self.run_upper - self.run_lower + 1

    @property
    def custom_count(self) -> int:
        if self.use_property_iterator and self.property_values:
            return len(self.property_values)
        return 1

    def total_iterations(self) -> int:
        return self.run_count * len(self.datasets) * self.custom_count

    def describe(self) -> str:
        lines = [f"Runs from: {self.run_lower} to: {self.run_upper}"]
        lines.append("Datasets:" + "".join(f" {d}" for d in self.datasets))
        lines.append(
            "Custom property iterator: " + ("on" if self.use_property_iterator else "off")
        )
        if self.use_property_iterator and self.property_path is not None:
            nodes = self.property_path.nodes
            if len(nodes) > 1:
                lines.append("Custom property path:")
                for i, node in enumerate(nodes[:-1], start=1):
                    lines.append(f"{i}  {node}")
            lines.append(f"Custom property name: {nodes[-1]}")
            lines.append("Custom property values:")
            for i, value in enumerate(self.property_values or [], start=1):
                lines.append(f" {i} {type(value).__name__} {value}")
        lines.append(f"ResultProducer: {self.producer}")
        lines.append(f"ResultListener: {self.listener}")
        if self.notes:
            lines.append(f"Notes: {self.notes}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_lower": self.run_lower,
            "run_upper": self.run_upper,
            "datasets": list(self.datasets),
            "use_property_iterator": self.use_property_iterator,
            "property_path": self.property_path.to_list() if self.property_path else None,
            "property_values": (
                [value_to_data(v) for v in self.property_values]
                if self.property_values is not None
                else None
            ),
            "notes": self.notes,
            "producer": self.producer.to_dict() if self.producer else None,
            "listener": self.listener.to_dict() if self.listener else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExperimentConfig":
        """Build a config from plain data; structural problems raise ``ConfigurationError``."""
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"experiment must be a mapping, got {type(data).__name__}")
        unknown = set(data) - set(cls().to_dict())
        if unknown:
            raise ConfigurationError(f"unknown experiment keys: {', '.join(sorted(unknown))}")
        run_lower = _run_bound(data, "run_lower", DEFAULT_RUN_LOWER)
        run_upper = _run_bound(data, "run_upper", DEFAULT_RUN_UPPER)
        datasets = data.get("datasets") or []
        if isinstance(datasets, str) or not isinstance(datasets, list):
            raise ConfigurationError("datasets must be a list of dataset references")
        use_iterator = data.get("use_property_iterator", False)
        if not isinstance(use_iterator, bool):
            raise ConfigurationError(
                f"use_property_iterator must be true or false, got {use_iterator!r}"
            )
        path = _path_from_data(data.get("property_path"))
        values = data.get("property_values")
        if values is not None and not isinstance(values, list):
            raise ConfigurationError("property_values must be a list")
        producer = data.get("producer", _default_producer().to_dict())
        listener = data.get("listener", _default_listener().to_dict())
        return cls(
            run_lower=run_lower,
            run_upper=run_upper,
            datasets=[str(d) for d in datasets],
            use_property_iterator=use_iterator,
            property_path=path,
            property_values=[value_from_data(v) for v in values] if values is not None else None,
            notes=str(data.get("notes") or ""),
            producer=ComponentSpec.from_dict(producer) if producer is not None else None,
            listener=ComponentSpec.from_dict(listener) if listener is not None else None,
        )
