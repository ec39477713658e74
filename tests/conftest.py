import itertools
import json
import uuid

import pytest

from spinlio.compute.mesh import DecodedGeometry, IndexedAccessor
from spinlio.ghx.builtin import FORK_TEMPLATE
from spinlio.ghx.templates import ComponentTemplate, ParameterDefinition, TemplateRegistry


class FakeCodec:
    """Codec stand-in: the payload's ``data`` is JSON with explicit lists.

    ``{"kind": "mesh", "vertices": [[x, y, z], ...], "faces": [[a, b, c], ...]}``
    """

    def __init__(self):
        self.calls = []

    def decode(self, payload):
        self.calls.append(payload)
        body = json.loads(payload["data"])
        if "error" in body:
            raise ValueError(body["error"])
        return DecodedGeometry(
            kind=body.get("kind", "mesh"),
            vertices=IndexedAccessor.of([tuple(v) for v in body.get("vertices", [])]),
            faces=IndexedAccessor.of([tuple(f) for f in body.get("faces", [])]),
        )


QUAD_VERTICES = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]]
QUAD_FACES = [[0, 1, 2], [0, 2, 3]]


def _mesh_value(vertices=QUAD_VERTICES, faces=QUAD_FACES, kind="mesh", type_name="Rhino.Geometry.Mesh"):
    body = json.dumps({"kind": kind, "vertices": vertices, "faces": faces})
    return {"type": type_name, "data": json.dumps({"version": 10000, "archive3dm": 70, "opennurbs": -1, "data": body})}


def _response_with(*entries):
    return {
        "values": [
            {"ParamName": name, "InnerTree": {"{0;0}": [value]}}
            for name, value in entries
        ]
    }


@pytest.fixture
def mesh_value():
    """Build a data-tree value holding an encoded mesh."""
    return _mesh_value


@pytest.fixture
def response_with():
    """Build a response dict from (param_name, value) pairs."""
    return _response_with


@pytest.fixture
def fake_codec():
    return FakeCodec()


@pytest.fixture
def fork():
    return FORK_TEMPLATE


@pytest.fixture
def simple_template():
    return ComponentTemplate(
        id="spacer",
        name="Spacer",
        description="Headset spacer",
        parameter_definitions=(
            ParameterDefinition("height", "Height", "Spacer height", 10.0, min=2.0, max=40.0, step=0.5),
            ParameterDefinition("bore", "Bore", "Inner diameter", 28.6),
        ),
        script_body="a = make_spacer(height, bore)",
    )


@pytest.fixture
def registry(fork, simple_template):
    return TemplateRegistry([fork, simple_template])


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda: uuid.UUID(int=next(counter))
