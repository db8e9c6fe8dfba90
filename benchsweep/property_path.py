"""Property paths: routes from the result producer down to a field to sweep.

A path such as ``classifier.k`` is a list of :class:`PropertyNode`. Every
node except the last is read with its registry getter and must yield another
configurable component; the last node is written with the registry setter.
A node may name the component kind it expects to be read from
(``knn:k``); traversal fails when the live component is of another kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Sequence

from benchsweep.accessors import FieldAccessor, FieldRegistry, registry_of
from benchsweep.components import component_kind, resolve_value
from benchsweep.errors import ConfigurationError


@dataclass(frozen=True)
class PropertyNode:
    name: str
    owner: str = ""  # expected component kind; "" accepts any

    def __str__(self) -> str:
        return f"{self.owner}:{self.name}" if self.owner else self.name

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "owner": self.owner}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | str) -> "PropertyNode":
        if isinstance(data, str):
            return cls.parse(data)
        if not isinstance(data, Mapping) or not data.get("name"):
            raise ConfigurationError(f"property node needs a 'name': {data!r}")
        return cls(str(data["name"]), str(data.get("owner") or ""))

    @classmethod
    def parse(cls, text: str) -> "PropertyNode":
        owner, _, name = text.strip().rpartition(":")
        if not name:
            raise ConfigurationError(f"empty property name in {text!r}")
        return cls(name, owner)


@dataclass(frozen=True)
class PropertyPath:
    nodes: tuple[PropertyNode, ...]

    def __post_init__(self) -> None:
        if not self.nodes:
            raise ConfigurationError("property path must contain at least one node")

    @classmethod
    def of(cls, nodes: Iterable[PropertyNode | str]) -> "PropertyPath":
        return cls(tuple(n if isinstance(n, PropertyNode) else PropertyNode.parse(n) for n in nodes))

    @classmethod
    def parse(cls, text: str) -> "PropertyPath":
        """``"classifier.k"`` -> path of two nodes; segments may be ``kind:name``."""
        return cls.of(text.split("."))

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[PropertyNode]:
        return iter(self.nodes)

    def __str__(self) -> str:
        return ".".join(str(n) for n in self.nodes)

    @property
    def leaf(self) -> PropertyNode:
        return self.nodes[-1]

    def to_list(self) -> list[dict[str, str]]:
        return [n.to_dict() for n in self.nodes]

    @classmethod
    def from_list(cls, data: Sequence[Any]) -> "PropertyPath":
        if isinstance(data, str):
            return cls.parse(data)
        return cls(tuple(PropertyNode.from_dict(d) for d in data))


def _registry_for(obj: Any, node: PropertyNode, depth: int) -> FieldRegistry:
    try:
        registry = registry_of(obj)
    except ConfigurationError as e:
        raise ConfigurationError(f"cannot resolve {node} at depth {depth}: {e}") from None
    if node.owner and component_kind(obj) != node.owner:
        raise ConfigurationError(
            f"property {node.name!r} expects a {node.owner!r} component, "
            f"found {component_kind(obj)!r}"
        )
    return registry


def resolve_leaf(root: Any, path: PropertyPath) -> tuple[FieldRegistry, FieldAccessor]:
    """Walk the non-leaf nodes and return the leaf's registry and accessor."""
    current = root
    for depth, node in enumerate(path.nodes[:-1]):
        current = _registry_for(current, node, depth).get(node.name)
    registry = _registry_for(current, path.leaf, len(path) - 1)
    return registry, registry.accessor(path.leaf.name)


def get_property(root: Any, path: PropertyPath) -> Any:
    registry, acc = resolve_leaf(root, path)
    return registry.get(acc.name)


def set_property(root: Any, path: PropertyPath, value: Any) -> None:
    """Write ``value`` at the end of ``path``; component specs are instantiated first."""
    registry, acc = resolve_leaf(root, path)
    registry.set(acc.name, resolve_value(value))


def validate_path(root: Any, path: PropertyPath, values: Sequence[Any] = ()) -> None:
    """Check that ``path`` resolves to a writable field accepting every value.

    Nothing is written; component specs are type-checked by instantiating a
    throw-away copy.
    """
    _, acc = resolve_leaf(root, path)
    if not acc.writable:
        raise ConfigurationError(f"property {path} is read-only")
    for i, value in enumerate(values):
        try:
            acc.coerce(resolve_value(value))
        except ConfigurationError as e:
            raise ConfigurationError(f"property value #{i} for {path}: {e}") from None
