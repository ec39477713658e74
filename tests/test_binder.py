import math

import pytest

from spinlio.ghx.binder import BoundParameter, bind, infer_kind
from spinlio.ghx.builtin import WHEEL_TEMPLATE
from spinlio.ghx.templates import ComponentTemplate, ValueKind


def test_bind_uses_defaults_in_order(fork):
    bound = bind(fork)
    assert [p.name for p in bound] == list(fork.parameter_names)
    assert [p.value for p in bound] == [150, 28.6, 60, 400, 100, 45]


def test_supplied_values_override_defaults(fork):
    bound = {p.name: p for p in bind(fork, {"rake": 50, "blade_length": 420.5})}
    assert bound["rake"] == BoundParameter("rake", 50, ValueKind.INTEGER)
    assert bound["blade_length"] == BoundParameter("blade_length", 420.5, ValueKind.REAL)
    assert bound["crown_width"].value == 60


def test_kind_inferred_from_value(fork):
    bound = {p.name: p for p in bind(fork)}
    assert bound["steerer_length"].kind is ValueKind.INTEGER
    assert isinstance(bound["steerer_length"].value, int)
    assert bound["steerer_diameter"].kind is ValueKind.REAL
    assert isinstance(bound["steerer_diameter"].value, float)


def test_integral_float_binds_as_integer(fork):
    (rake,) = [p for p in bind(fork, {"rake": 50.0}) if p.name == "rake"]
    assert rake.kind is ValueKind.INTEGER
    assert rake.value == 50
    assert isinstance(rake.value, int)


@pytest.mark.parametrize("bad", ["50", None, True, math.nan, math.inf, [1], object()])
def test_unusable_values_fall_back_to_default(fork, bad):
    (rake,) = [p for p in bind(fork, {"rake": bad}) if p.name == "rake"]
    assert rake.value == 45


def test_unusable_value_is_logged(fork, caplog):
    bind(fork, {"rake": "fifty"})
    assert "unusable value" in caplog.text


def test_values_are_not_clamped(fork):
    (rake,) = [p for p in bind(fork, {"rake": 500}) if p.name == "rake"]
    assert rake.value == 500


def test_undeclared_names_ignored(fork):
    bound = bind(fork, {"frame_size": 56})
    assert "frame_size" not in [p.name for p in bound]
    assert len(bound) == len(fork.parameter_definitions)


def test_pinned_kinds():
    bound = {p.name: p for p in bind(WHEEL_TEMPLATE, {"spoke_count": 28.6, "spoke_diameter": 2})}
    assert bound["spoke_count"] == BoundParameter("spoke_count", 29, ValueKind.INTEGER)
    assert bound["spoke_diameter"] == BoundParameter("spoke_diameter", 2.0, ValueKind.REAL)
    assert isinstance(bound["spoke_diameter"].value, float)


def test_template_without_parameters():
    empty = ComponentTemplate("plate", "Plate", "", (), "a = make_plate()")
    assert bind(empty, {"anything": 1}) == []


def test_infer_kind():
    assert infer_kind(3) is ValueKind.INTEGER
    assert infer_kind(3.0) is ValueKind.INTEGER
    assert infer_kind(-0.5) is ValueKind.REAL
