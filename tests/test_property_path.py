from __future__ import annotations

import pytest
from fakes import RecordingProducer

from benchsweep.classifiers import NearestNeighbours, ZeroR
from benchsweep.components import ComponentSpec, create_component
from benchsweep.errors import ConfigurationError
from benchsweep.property_path import (
    PropertyNode,
    PropertyPath,
    get_property,
    set_property,
    validate_path,
)


def test_parse_dotted_path_with_owner() -> None:
    path = PropertyPath.parse("random_split:classifier.k")
    assert path.nodes == (PropertyNode("classifier", "random_split"), PropertyNode("k"))
    assert str(path) == "random_split:classifier.k"
    assert path.leaf.name == "k"


@pytest.mark.parametrize("text", ["", "a..b", "classifier.", "owner:"])
def test_parse_rejects_empty_segments(text: str) -> None:
    with pytest.raises(ConfigurationError):
        PropertyPath.parse(text)


def test_list_roundtrip() -> None:
    path = PropertyPath.parse("classifier.knn:k")
    assert PropertyPath.from_list(path.to_list()) == path
    assert PropertyPath.from_list("classifier.knn:k") == path


def test_set_and_get_nested_property() -> None:
    producer = create_component(
        ComponentSpec("random_split", {"classifier": ComponentSpec("knn")})
    )
    path = PropertyPath.parse("classifier.k")
    set_property(producer, path, 7)
    assert get_property(producer, path) == 7
    assert producer.classifier.k == 7  # type: ignore[attr-defined]


def test_set_property_instantiates_component_values() -> None:
    producer = create_component("random_split")
    path = PropertyPath.parse("classifier")
    set_property(producer, path, ComponentSpec("knn", {"k": 2}))
    assert isinstance(producer.classifier, NearestNeighbours)  # type: ignore[attr-defined]
    set_property(producer, path, ComponentSpec("zero_r"))
    assert isinstance(producer.classifier, ZeroR)  # type: ignore[attr-defined]


def test_validate_path_does_not_mutate() -> None:
    producer = RecordingProducer()
    validate_path(producer, PropertyPath.parse("settings.alpha"), [1.0, 2, 3.5])
    assert producer.settings.alpha_writes == 0


def test_validate_path_rejects_wrong_component_value() -> None:
    producer = create_component("random_split")
    with pytest.raises(ConfigurationError):
        validate_path(producer, PropertyPath.parse("classifier"), [ComponentSpec("csv")])


def test_owner_mismatch() -> None:
    producer = create_component("random_split")
    with pytest.raises(ConfigurationError):
        set_property(producer, PropertyPath.parse("classifier.knn:k"), 3)
