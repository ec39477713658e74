from spinlio.compute.request import build_compute_request, parameter_tree
from spinlio.compute.schema import ComputeResponse, DataTreeParam, TreeValue, ValueTag
from spinlio.ghx.binder import BoundParameter, bind
from spinlio.ghx.synthesizer import synthesize
from spinlio.ghx.templates import ValueKind


def test_value_tags():
    assert ValueTag.from_type_name("Rhino.Geometry.Mesh") is ValueTag.MESH
    assert ValueTag.from_type_name("Rhino.Geometry.Brep").is_geometry
    assert ValueTag.from_type_name("Rhino.Geometry.GeometryBase").is_geometry
    assert ValueTag.from_type_name("System.Double") is ValueTag.REAL
    assert not ValueTag.REAL.is_geometry
    assert ValueTag.from_type_name("Rhino.Geometry.Curve") is ValueTag.UNRECOGNIZED
    assert ValueTag.from_type_name("") is ValueTag.UNRECOGNIZED
    assert ValueTag.from_type_name(None) is ValueTag.UNRECOGNIZED
    assert not ValueTag.UNRECOGNIZED.is_geometry


def test_parameter_tree():
    tree = parameter_tree(BoundParameter("rake", 45, ValueKind.INTEGER))
    assert tree.param_name == "rake"
    assert tree.inner_tree == {"0": [TreeValue(type="System.Int32", data=45)]}


def test_request_payload_uses_solver_names(fork):
    bound = bind(fork, {"steerer_diameter": 28.6})
    document = synthesize(fork, bound)
    payload = build_compute_request(document, bound).to_payload()

    assert payload["algo"] == document
    assert payload["pointer"] is None
    assert [v["ParamName"] for v in payload["values"]] == list(fork.parameter_names)
    first = payload["values"][0]["InnerTree"]["0"][0]
    assert first == {"type": "System.Int32", "data": 150}
    diameter = payload["values"][1]["InnerTree"]["0"][0]
    assert diameter == {"type": "System.Double", "data": 28.6}


def test_response_accepts_key_styles():
    response = ComputeResponse.model_validate(
        {
            "values": [
                {"ParamName": "A", "InnerTree": {"{0}": [{"type": "System.Int32", "data": 1}]}},
                {"paramName": "B", "innerTree": {"{0}": [{"type": "System.String", "data": "x"}]}},
                {"param_name": "C", "inner_tree": {}},
            ],
            "modelunits": "Millimeters",
        }
    )
    assert [v.param_name for v in response.values] == ["A", "B", "C"]
    assert response.find("B").first_tag is ValueTag.STRING
    assert response.find("C").first_value() is None
    assert response.find("C").first_tag is ValueTag.UNRECOGNIZED
    assert response.find("D") is None
    assert response.errors == []


def test_first_value_uses_first_branch():
    entry = DataTreeParam.model_validate(
        {
            "ParamName": "out",
            "InnerTree": {
                "{0;0}": [{"type": "Rhino.Geometry.Mesh", "data": "{}"}],
                "{0;1}": [{"type": "System.Double", "data": 2.0}],
            },
        }
    )
    assert entry.first_tag is ValueTag.MESH
    empty_branch = DataTreeParam.model_validate({"ParamName": "out", "InnerTree": {"{0}": []}})
    assert empty_branch.first_value() is None
