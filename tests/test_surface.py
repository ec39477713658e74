import numpy as np
import pytest

from spinlio.compute.mesh import DecodedMesh, IndexedAccessor
from spinlio.render.surface import (
    SurfaceMaterial,
    compute_vertex_normals,
    surface_to_json,
    to_surface,
    triangulate_face,
)


QUAD = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]


def test_quad_face_becomes_two_triangles():
    surface = to_surface(DecodedMesh.from_lists(QUAD, [(0, 1, 2, 3)]))
    assert surface.triangles() == [(0, 1, 2), (0, 2, 3)]
    assert surface.triangle_count == 2


def test_positions_preserve_vertex_order():
    surface = to_surface(DecodedMesh.from_lists(QUAD, [(0, 1, 2, 3)]))
    assert surface.positions.dtype == np.float32
    assert surface.positions.tolist() == [0, 0, 0, 1, 0, 0, 1, 1, 0, 0, 1, 0]
    assert surface.indices.dtype == np.uint32
    assert surface.vertex_count == 4


def test_normals_of_flat_quad_point_up():
    surface = to_surface(DecodedMesh.from_lists(QUAD, [(0, 1, 2, 3)]))
    normals = surface.normals.reshape(-1, 3)
    assert np.allclose(normals, [[0, 0, 1]] * 4)


def test_empty_mesh():
    surface = to_surface(DecodedMesh.from_lists([], []))
    assert surface.positions.size == 0
    assert surface.indices.size == 0
    assert surface.normals.size == 0
    assert surface.bounds() is None


def test_degenerate_triangles_do_not_produce_nan():
    points = [(0, 0, 0), (1, 0, 0), (2, 0, 0)]
    surface = to_surface(DecodedMesh.from_lists(points, [(0, 1, 2)]))
    assert surface.triangle_count == 1
    assert not np.isnan(surface.normals).any()
    assert np.allclose(surface.normals, 0.0)


def test_out_of_range_triangles_dropped(caplog):
    surface = to_surface(DecodedMesh.from_lists(QUAD[:3], [(0, 1, 2), (0, 2, 7)]))
    assert surface.triangles() == [(0, 1, 2)]
    assert "out-of-range" in caplog.text


def test_unused_vertices_keep_zero_normals():
    points = QUAD + [(5, 5, 5)]
    surface = to_surface(DecodedMesh.from_lists(points, [(0, 1, 2)]))
    assert surface.vertex_count == 5
    assert np.allclose(surface.normals.reshape(-1, 3)[4], 0.0)


@pytest.mark.parametrize(
    "face, expected",
    [
        ((0, 1), []),
        ((4, 5, 6), [(4, 5, 6)]),
        ((0, 1, 2, 3, 4), [(0, 1, 2), (0, 2, 3), (0, 3, 4)]),
    ],
)
def test_triangulate_face(face, expected):
    assert triangulate_face(face) == expected


def test_compute_vertex_normals_area_weighted():
    points = np.array([(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)], dtype=float)
    triangles = np.array([(0, 1, 2), (0, 3, 1)])
    normals = compute_vertex_normals(points, triangles)
    assert np.allclose(normals[2], [0, 0, 1])
    assert np.allclose(normals[3], [0, 1, 0])
    assert np.allclose(normals[0], np.array([0, 1, 1]) / np.sqrt(2))
    assert np.allclose(normals[1], normals[0])


def test_bounds():
    surface = to_surface(DecodedMesh.from_lists([(-1, 2, 0), (3, -2, 1), (0, 0, 5)], [(0, 1, 2)]))
    assert surface.bounds() == ((-1.0, -2.0, 0.0), (3.0, 2.0, 5.0))


def test_surface_accepts_lazy_accessors():
    vertices = IndexedAccessor(3, lambda i: QUAD[i])
    faces = IndexedAccessor(1, lambda i: (0, 1, 2))
    surface = to_surface(DecodedMesh(vertices, faces))
    assert surface.triangles() == [(0, 1, 2)]


def test_surface_to_json():
    surface = to_surface(DecodedMesh.from_lists(QUAD, [(0, 1, 2, 3)]), SurfaceMaterial(color=0xFF0000))
    data = surface_to_json(surface)
    geometry = data["geometry"]
    assert geometry["type"] == "BufferGeometry"
    assert geometry["data"]["index"]["array"] == [0, 1, 2, 0, 2, 3]
    assert len(geometry["data"]["attributes"]["position"]["array"]) == 12
    assert geometry["data"]["attributes"]["normal"]["itemSize"] == 3
    material = data["material"]
    assert material["type"] == "MeshStandardMaterial"
    assert material["color"] == 0xFF0000
    assert material["side"] == 2
    assert material["flatShading"] is True
