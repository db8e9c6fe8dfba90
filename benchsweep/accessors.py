"""Named, typed field access for configurable components.

Every component that can be configured from an experiment (producers,
listeners, classifiers) exposes a :class:`FieldRegistry` through
``fields()``. The registry maps a field name to a getter/setter pair plus the
accepted value type, so property paths and option snapshots never need
``getattr``/``setattr`` on arbitrary attribute names.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from benchsweep.errors import ConfigurationError

Getter = Callable[[], Any]
Setter = Callable[[Any], None]


@dataclass(frozen=True)
class FieldAccessor:
    """Getter/setter pair for one field.

    ``value_type`` may be a class or a tuple of classes. ``setter`` is ``None``
    for read-only fields. ``option`` marks fields that are part of the
    component's persisted options. ``check`` raises ``ValueError`` for
    values of the right type that the component still rejects.
    """

    name: str
    value_type: type | tuple[type, ...]
    getter: Getter
    setter: Setter | None = None
    option: bool = True
    doc: str = ""
    check: Callable[[Any], None] | None = None

    @property
    def writable(self) -> bool:
        return self.setter is not None

    def coerce(self, value: Any) -> Any:
        """Return ``value`` converted to the field type or raise ``ConfigurationError``."""
        types = self.value_type if isinstance(self.value_type, tuple) else (self.value_type,)
        if isinstance(value, bool) and bool not in types:
            raise ConfigurationError(
                f"field {self.name!r} expects {_type_names(types)}, got bool {value!r}"
            )
        if not isinstance(value, types):
            # ints are accepted where floats are expected
            if float in types and isinstance(value, int):
                value = float(value)
            else:
                raise ConfigurationError(
                    f"field {self.name!r} expects {_type_names(types)}, "
                    f"got {type(value).__name__} {value!r}"
                )
        if self.check is not None:
            try:
                self.check(value)
            except ValueError as e:
                raise ConfigurationError(f"invalid value for field {self.name!r}: {e}") from None
        return value


def _type_names(types: tuple[type, ...]) -> str:
    return " | ".join(t.__name__ for t in types)


class FieldRegistry:
    """Ordered collection of :class:`FieldAccessor` for one component."""

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._fields: dict[str, FieldAccessor] = {}

    def register(
        self,
        name: str,
        value_type: type | tuple[type, ...],
        getter: Getter,
        setter: Setter | None = None,
        *,
        option: bool = True,
        doc: str = "",
        check: Callable[[Any], None] | None = None,
    ) -> "FieldRegistry":
        if name in self._fields:
            raise ValueError(f"field {name!r} already registered on {self.owner}")
        self._fields[name] = FieldAccessor(
            name, value_type, getter, setter, option, doc, check
        )
        return self

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[FieldAccessor]:
        return iter(self._fields.values())

    def names(self) -> list[str]:
        return list(self._fields)

    def accessor(self, name: str) -> FieldAccessor:
        try:
            return self._fields[name]
        except KeyError:
            raise ConfigurationError(
                f"{self.owner} has no field {name!r} (known: {', '.join(self._fields) or 'none'})"
            ) from None

    def get(self, name: str) -> Any:
        return self.accessor(name).getter()

    def set(self, name: str, value: Any) -> None:
        acc = self.accessor(name)
        if acc.setter is None:
            raise ConfigurationError(f"field {name!r} of {self.owner} is read-only")
        acc.setter(acc.coerce(value))


class Configurable(ABC):
    """Mixin for components exposing a field registry."""

    @abstractmethod
    def fields(self) -> FieldRegistry:
        """Return the registry describing this component's configurable fields."""


def registry_of(obj: Any) -> FieldRegistry:
    """Return ``obj.fields()`` or raise ``ConfigurationError`` for plain objects."""
    if not isinstance(obj, Configurable):
        raise ConfigurationError(
            f"{type(obj).__name__} object is not configurable (no field registry)"
        )
    return obj.fields()
