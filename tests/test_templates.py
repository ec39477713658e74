import pytest

from spinlio.ghx.builtin import FORK_TEMPLATE, HANDLEBAR_TEMPLATE, WHEEL_TEMPLATE, builtin_templates
from spinlio.ghx.templates import ComponentTemplate, ParameterDefinition, TemplateRegistry, ValueKind


def test_lookup_is_case_insensitive(registry):
    assert registry.lookup("fork") is FORK_TEMPLATE
    assert registry.lookup("FORK") is FORK_TEMPLATE
    assert registry.lookup("  Fork ") is FORK_TEMPLATE


def test_lookup_unknown_returns_none(registry):
    assert registry.lookup("frame") is None
    assert registry.lookup("") is None
    assert registry.lookup(None) is None


def test_fork_template_parameters():
    fork = TemplateRegistry(builtin_templates()).lookup("fork")
    assert fork.parameter_names == (
        "steerer_length",
        "steerer_diameter",
        "crown_width",
        "blade_length",
        "dropout_width",
        "rake",
    )
    rake = fork.definition("rake")
    assert rake.default_value == 45
    assert (rake.min, rake.max, rake.step) == (30, 60, 1)
    assert fork.definition("missing") is None


def test_builtin_templates_reference_every_parameter():
    for template in builtin_templates():
        for name in template.parameter_names:
            assert name in template.script_body


def test_wheel_pins_value_kinds():
    assert WHEEL_TEMPLATE.definition("spoke_count").kind is ValueKind.INTEGER
    assert WHEEL_TEMPLATE.definition("spoke_diameter").kind is ValueKind.REAL
    assert HANDLEBAR_TEMPLATE.definition("width").kind is None


def test_registry_is_read_only(registry):
    assert len(registry) == 2
    assert "spacer" in registry
    assert "SPACER" in registry
    assert 42 not in registry
    with pytest.raises(TypeError):
        registry._templates["new"] = FORK_TEMPLATE


def test_registry_rejects_duplicate_ids(fork):
    with pytest.raises(ValueError, match="duplicate template id"):
        TemplateRegistry([fork, fork])


def test_merged_replaces_same_id(registry, fork):
    replacement = ComponentTemplate(
        id="FORK",
        name="Custom Fork",
        description="",
        parameter_definitions=(ParameterDefinition("rake", "Rake", "", 40),),
        script_body="a = fork(rake)",
    )
    merged = registry.merged([replacement])
    assert merged.lookup("fork") is replacement
    assert registry.lookup("fork") is fork
    assert len(merged) == len(registry)


def test_value_kind_tags():
    assert ValueKind.INTEGER.system_type == "System.Int32"
    assert ValueKind.REAL.system_type == "System.Double"
    assert ValueKind.INTEGER.gh_type == ("gh_int32", 3)
    assert ValueKind.REAL.gh_type == ("gh_double", 6)


@pytest.mark.parametrize(
    "kwargs, message",
    [
        (dict(name="Bad Name"), "lower-case identifier"),
        (dict(min=10, max=5), "exceeds max"),
        (dict(min=20), "below min"),
        (dict(max=5), "above max"),
        (dict(step=0), "step must be positive"),
    ],
)
def test_parameter_definition_invariants(kwargs, message):
    base = dict(name="height", display_name="Height", description="", default_value=10)
    base.update(kwargs)
    with pytest.raises(ValueError, match=message):
        ParameterDefinition(**base)


def test_template_requires_script_reference():
    with pytest.raises(ValueError, match="does not reference"):
        ComponentTemplate(
            id="stem",
            name="Stem",
            description="",
            parameter_definitions=(ParameterDefinition("length", "Length", "", 100),),
            script_body="a = make_stem(lengthy)",
        )


def test_template_rejects_duplicate_parameters():
    p = ParameterDefinition("length", "Length", "", 100)
    with pytest.raises(ValueError, match="duplicate parameter"):
        ComponentTemplate("stem", "Stem", "", (p, p), "a = make_stem(length)")


def test_template_rejects_literal_terminator():
    with pytest.raises(ValueError, match="must not contain"):
        ComponentTemplate("stem", "Stem", "", (), "s = ']]>'")


def test_template_freezes_definition_list():
    params = [ParameterDefinition("length", "Length", "", 100)]
    template = ComponentTemplate("stem", "Stem", "", params, "a = make_stem(length)")
    params.append(ParameterDefinition("angle", "Angle", "", 6))
    assert isinstance(template.parameter_definitions, tuple)
    assert template.parameter_names == ("length",)
