from abc import abstractmethod

import pytest

from customdata import (
    CurveData,
    CustomData,
    FloatData,
    IntData,
    InvalidArgumentError,
    PayloadTypeRegistry,
    UnknownTypeError,
    Vec3Data,
    default_registry,
    register_payload,
)

BUILTIN_TYPES = [
    "CurveData",
    "FloatData",
    "IntData",
    "ObjectCollection",
    "StringData",
    "Vec3Data",
]


class Scalar(CustomData):
    """Capability family, never listed."""

    @abstractmethod
    def as_float(self) -> float: ...


class Celsius(Scalar):
    value: float = 20.0

    def as_float(self) -> float:
        return self.value


class Needs(CustomData):
    required_value: int


class Alpha(CustomData):
    value: int = 1


@pytest.fixture
def registry():
    reg = PayloadTypeRegistry()
    for payload_type in (Celsius, Scalar, Needs, Alpha):
        reg.register(payload_type)
    return reg


def test_builtin_listing_is_sorted_and_complete():
    """Every built-in variant is listed exactly once, sorted by name."""
    names = [d.type_id for d in default_registry.list_types()]
    assert names == BUILTIN_TYPES
    assert len(set(names)) == len(names)


def test_listing_excludes_abstract_and_non_instantiable(registry):
    names = [d.type_id for d in registry.list_types()]
    assert names == ["Alpha", "Celsius"]
    assert "Scalar" not in registry
    assert "Needs" not in registry


def test_listing_is_cached_until_next_registration(registry):
    first = registry.list_types()
    assert registry.list_types() is first

    class Beta(CustomData):
        value: str = ""

    registry.register(Beta)
    second = registry.list_types()
    assert second is not first
    assert [d.type_id for d in second] == ["Alpha", "Beta", "Celsius"]


def test_display_name_controls_order():
    reg = PayloadTypeRegistry()

    @register_payload(registry=reg, display_name="zz last")
    class First(CustomData):
        pass

    @register_payload(registry=reg, type_id="second", display_name="aa first")
    class Second(CustomData):
        pass

    assert [d.type_id for d in reg.list_types()] == ["second", "First"]
    assert reg.descriptor("second").payload_type is Second


def test_instantiate_returns_defaults():
    payload = default_registry.instantiate("Vec3Data")
    assert isinstance(payload, Vec3Data)
    assert (payload.value.x, payload.value.y, payload.value.z) == (0.0, 0.0, 0.0)

    curve = default_registry.instantiate("CurveData")
    assert isinstance(curve, CurveData)
    assert curve.curve.evaluate(0.5) == pytest.approx(0.5)


def test_instantiate_builds_fresh_instances():
    a = default_registry.instantiate("IntData")
    b = default_registry.instantiate("IntData")
    assert a is not b


@pytest.mark.parametrize("type_id", ["Missing", "intdata", "", "Scalar"])
def test_instantiate_unknown_type(registry, type_id):
    with pytest.raises(UnknownTypeError) as exc_info:
        registry.instantiate(type_id)
    assert exc_info.value.type_id == type_id


def test_index_of():
    assert default_registry.index_of("CurveData") == 0
    assert default_registry.index_of(FloatData(value=1.0)) == 1
    assert default_registry.index_of("Vec3Data") == len(BUILTIN_TYPES) - 1


def test_index_of_not_found_does_not_raise(registry):
    assert registry.index_of(None) is None
    assert registry.index_of("Missing") is None
    assert registry.index_of(IntData()) is None
    assert registry.index_of(Celsius()) == 1


def test_type_id_of():
    assert default_registry.type_id_of(IntData()) == "IntData"
    assert default_registry.type_id_of(IntData) == "IntData"
    assert default_registry.type_id_of(Alpha()) is None


def test_register_same_class_twice_is_noop(registry):
    registry.register(Alpha)
    assert [d.type_id for d in registry.list_types()].count("Alpha") == 1


def test_register_conflicting_id(registry):
    class Other(CustomData):
        pass

    with pytest.raises(InvalidArgumentError):
        registry.register(Other, type_id="Alpha")


@pytest.mark.parametrize("bad", [CustomData, int, "IntData", object()])
def test_register_rejects_non_payload_types(bad):
    with pytest.raises(InvalidArgumentError):
        PayloadTypeRegistry().register(bad)


def test_load_plugins_registers_into_loading_registry(tmp_path, monkeypatch):
    """Plugin modules register their variants into the registry importing them."""
    reg = PayloadTypeRegistry()
    (tmp_path / "health_payloads.py").write_text(
        "from customdata import CustomData, register_payload\n"
        "\n"
        "@register_payload\n"
        "class HealthData(CustomData):\n"
        "    value: int = 100\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    reg.load_plugins(["health_payloads"])

    assert "HealthData" in reg
    assert reg.instantiate("HealthData").value == 100
    assert "HealthData" not in default_registry


def test_load_plugins_propagates_import_errors():
    with pytest.raises(ImportError):
        PayloadTypeRegistry().load_plugins(["customdata_no_such_plugin"])


def test_listing_is_only_public_through_list_types(registry):
    assert not hasattr(registry, "types")
    assert list(registry) == list(registry.list_types())
