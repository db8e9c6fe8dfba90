"""Registry of component kinds and conversion between live components and specs.

A component kind is a short name (``"knn"``, ``"csv"``) bound to a
:class:`~benchsweep.accessors.Configurable` class with the
:func:`register_component` decorator. ``create_component`` builds a fresh
instance from a :class:`ComponentSpec` and ``snapshot_component`` turns a live
instance back into one, recursing into nested components.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TypeVar

from benchsweep.accessors import Configurable, registry_of
from benchsweep.errors import ConfigurationError

logger = logging.getLogger("benchsweep.components")

_COMPONENTS: dict[str, type[Configurable]] = {}

C = TypeVar("C", bound=type)


@dataclass(frozen=True)
class ComponentSpec:
    """Kind name plus option values; options may nest further specs."""

    kind: str
    options: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "options": {k: _value_to_data(v) for k, v in self.options.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ComponentSpec":
        if not isinstance(data, Mapping) or "kind" not in data:
            raise ConfigurationError(f"component specification needs a 'kind': {data!r}")
        options = data.get("options") or {}
        if not isinstance(options, Mapping):
            raise ConfigurationError(f"options of {data['kind']!r} must be a mapping")
        return cls(str(data["kind"]), {str(k): value_from_data(v) for k, v in options.items()})

    def __str__(self) -> str:
        if not self.options:
            return self.kind
        opts = " ".join(f"{k}={v}" for k, v in self.options.items())
        return f"{self.kind}({opts})"


def _value_to_data(value: Any) -> Any:
    if isinstance(value, ComponentSpec):
        return value.to_dict()
    return value


def value_from_data(value: Any) -> Any:
    """Inverse of serialization for option or property values."""
    if isinstance(value, Mapping) and "kind" in value:
        return ComponentSpec.from_dict(value)
    return value


def value_to_data(value: Any) -> Any:
    return _value_to_data(value)


def register_component(kind: str) -> Callable[[C], C]:
    def deco(cls: C) -> C:
        if kind in _COMPONENTS and _COMPONENTS[kind] is not cls:
            raise ValueError(f"component kind {kind!r} already registered")
        _COMPONENTS[kind] = cls
        cls.kind = kind  # type: ignore[attr-defined]
        return cls

    return deco


def component_kinds() -> list[str]:
    return sorted(_COMPONENTS)


def component_kind(obj: Any) -> str:
    """Registered kind of ``obj`` or its class name when unregistered."""
    return getattr(type(obj), "kind", type(obj).__name__)


def create_component(spec: ComponentSpec | Mapping[str, Any] | str) -> Configurable:
    """Instantiate ``spec.kind`` and apply its options through the field registry."""
    if isinstance(spec, str):
        spec = ComponentSpec(spec)
    elif not isinstance(spec, ComponentSpec):
        spec = ComponentSpec.from_dict(spec)
    cls = _COMPONENTS.get(spec.kind)
    if cls is None:
        raise ConfigurationError(
            f"Unknown component kind {spec.kind!r} (available: {', '.join(component_kinds())})"
        )
    obj = cls()
    registry = obj.fields()
    for name, value in spec.options.items():
        registry.set(name, resolve_value(value))
    logger.debug("Created component %s", spec)
    return obj


def resolve_value(value: Any) -> Any:
    """Build a live component for spec values, pass scalars through."""
    if isinstance(value, ComponentSpec):
        return create_component(value)
    return value


def snapshot_component(obj: Any) -> ComponentSpec:
    """Describe a live component as a spec holding all of its option fields."""
    options: dict[str, Any] = {}
    for acc in registry_of(obj):
        if not acc.option:
            continue
        value = acc.getter()
        options[acc.name] = snapshot_component(value) if isinstance(value, Configurable) else value
    return ComponentSpec(component_kind(obj), options)
