from __future__ import annotations

import pytest
from fakes import RecordingProducer, Settings

from benchsweep.accessors import FieldRegistry, registry_of
from benchsweep.classifiers import NearestNeighbours, ZeroR
from benchsweep.components import (
    ComponentSpec,
    component_kind,
    create_component,
    snapshot_component,
)
from benchsweep.errors import ConfigurationError


def test_registry_get_set_roundtrip() -> None:
    settings = Settings()
    registry = settings.fields()
    registry.set("alpha", 0.25)
    registry.set("label", "tuned")
    assert registry.get("alpha") == 0.25
    assert settings.label == "tuned"
    assert registry.names() == ["alpha", "label", "version"]


def test_int_is_widened_to_float() -> None:
    settings = Settings()
    settings.fields().set("alpha", 3)
    assert settings.alpha == 3.0
    assert isinstance(settings.alpha, float)


@pytest.mark.parametrize(
    "name, value",
    [
        ("alpha", "0.5"),
        ("alpha", True),
        ("label", 7),
        ("missing", 1),
        ("version", 2),
    ],
)
def test_registry_set_errors(name: str, value: object) -> None:
    with pytest.raises(ConfigurationError):
        Settings().fields().set(name, value)


def test_check_rejects_out_of_range_value() -> None:
    knn = NearestNeighbours()
    with pytest.raises(ConfigurationError):
        knn.fields().set("k", 0)
    with pytest.raises(ConfigurationError):
        knn.fields().set("distance_weighting", "cubic")
    assert knn.k == 1


def test_duplicate_field_registration_fails() -> None:
    registry = FieldRegistry("x").register("a", int, lambda: 1)
    with pytest.raises(ValueError):
        registry.register("a", int, lambda: 2)


def test_registry_of_plain_object_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        registry_of(object())


def test_create_component_applies_nested_options() -> None:
    spec = ComponentSpec(
        "random_split",
        {"train_percent": 50, "classifier": ComponentSpec("knn", {"k": 3})},
    )
    producer = create_component(spec)
    assert component_kind(producer) == "random_split"
    assert producer.train_percent == 50.0  # type: ignore[attr-defined]
    assert isinstance(producer.classifier, NearestNeighbours)  # type: ignore[attr-defined]
    assert producer.classifier.k == 3  # type: ignore[attr-defined]


def test_snapshot_component_skips_non_option_fields() -> None:
    spec = snapshot_component(RecordingProducer())
    assert spec == ComponentSpec(
        "test_recording",
        {"settings": ComponentSpec("test_settings", {"alpha": 0.0, "label": "base"})},
    )


def test_snapshot_then_create_reproduces_component() -> None:
    original = create_component(
        ComponentSpec("random_split", {"classifier": ComponentSpec("knn", {"k": 5})})
    )
    copy = create_component(snapshot_component(original))
    assert snapshot_component(copy) == snapshot_component(original)
    assert isinstance(copy.classifier, NearestNeighbours)  # type: ignore[attr-defined]


def test_component_spec_from_dict_validation() -> None:
    with pytest.raises(ConfigurationError):
        ComponentSpec.from_dict({"options": {}})
    with pytest.raises(ConfigurationError):
        ComponentSpec.from_dict({"kind": "knn", "options": [1, 2]})
    assert ComponentSpec.from_dict({"kind": "zero_r"}) == ComponentSpec("zero_r")


def test_zero_r_has_no_fields() -> None:
    assert registry_of(ZeroR()).names() == []
