"""Convert a decoded mesh into flat, renderable buffers."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from spinlio.compute.mesh import DecodedMesh

logger = logging.getLogger(__name__)

__all__ = [
    "SurfaceMaterial",
    "RenderableSurface",
    "triangulate_face",
    "compute_vertex_normals",
    "to_surface",
    "surface_to_json",
]

_EPSILON = 1e-12

# three.js side constants
_SIDES = {"front": 0, "back": 1, "double": 2}


@dataclass(frozen=True)
class SurfaceMaterial:
    """Shaded material applied to every converted surface. No textures."""

    color: int = 0x00AAFF
    emissive: int = 0x222222
    metalness: float = 0.2
    roughness: float = 0.5
    side: str = "double"
    flat_shading: bool = True
    wireframe: bool = False

    def to_json(self) -> Dict[str, Any]:
        return {
            "type": "MeshStandardMaterial",
            "color": self.color,
            "emissive": self.emissive,
            "metalness": self.metalness,
            "roughness": self.roughness,
            "side": _SIDES[self.side],
            "flatShading": self.flat_shading,
            "wireframe": self.wireframe,
        }


@dataclass
class RenderableSurface:
    """Triangulated surface with flat position, index and normal buffers.

    ``positions`` and ``normals`` hold ``3 * vertex_count`` float32 values;
    ``indices`` holds ``3 * triangle_count`` uint32 vertex indices.
    """

    positions: np.ndarray
    indices: np.ndarray
    normals: np.ndarray
    material: SurfaceMaterial = field(default_factory=SurfaceMaterial)

    @property
    def vertex_count(self) -> int:
        return len(self.positions) // 3

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def triangles(self) -> List[Tuple[int, int, int]]:
        return [tuple(int(i) for i in tri) for tri in self.indices.reshape(-1, 3)]

    def bounds(self) -> Optional[Tuple[Tuple[float, float, float], Tuple[float, float, float]]]:
        """Axis-aligned ``(min, max)`` corners, or ``None`` when empty."""
        if self.vertex_count == 0:
            return None
        pts = self.positions.reshape(-1, 3)
        lo = pts.min(axis=0)
        hi = pts.max(axis=0)
        return (tuple(float(c) for c in lo), tuple(float(c) for c in hi))


def triangulate_face(face: Sequence[int]) -> List[Tuple[int, int, int]]:
    """Fan-triangulate a face from its first vertex.

    ``(v0, v1, v2, v3)`` becomes ``(v0, v1, v2), (v0, v2, v3)``. Correct for
    convex planar polygons only; faces with fewer than three indices yield
    nothing.
    """

    if len(face) < 3:
        return []
    v0 = int(face[0])
    return [(v0, int(face[k]), int(face[k + 1])) for k in range(1, len(face) - 1)]


def compute_vertex_normals(points: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Area-weighted smooth vertex normals.

    ``points`` is ``(n, 3)``, ``triangles`` is ``(t, 3)``. Vertices touched
    only by degenerate triangles (or by none) get a zero normal.
    """

    normals = np.zeros((len(points), 3), dtype=np.float64)
    if len(triangles) == 0:
        return normals
    v0 = points[triangles[:, 0]]
    v1 = points[triangles[:, 1]]
    v2 = points[triangles[:, 2]]
    face_normals = np.cross(v1 - v0, v2 - v0)
    for k in range(3):
        np.add.at(normals, triangles[:, k], face_normals)
    lengths = np.linalg.norm(normals, axis=1)
    mask = lengths > _EPSILON
    normals[mask] /= lengths[mask][:, None]
    normals[~mask] = 0.0
    return normals


def to_surface(mesh: DecodedMesh, material: Optional[SurfaceMaterial] = None) -> RenderableSurface:
    """Convert ``mesh`` to a :class:`RenderableSurface`.

    Vertex order is preserved so face indices stay valid. Triangles that
    reference missing vertices are dropped.
    """

    vertex_count = mesh.vertices.count
    points = np.zeros((vertex_count, 3), dtype=np.float64)
    for i, vertex in enumerate(mesh.vertices):
        points[i] = (vertex[0], vertex[1], vertex[2])

    triangles: List[Tuple[int, int, int]] = []
    dropped = 0
    for face in mesh.faces:
        for tri in triangulate_face(face):
            if all(0 <= idx < vertex_count for idx in tri):
                triangles.append(tri)
            else:
                dropped += 1
    if dropped:
        logger.warning("dropped %d triangle(s) with out-of-range vertex indices", dropped)

    tri_array = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    normals = compute_vertex_normals(points, tri_array)

    surface = RenderableSurface(
        positions=points.astype(np.float32).reshape(-1),
        indices=tri_array.astype(np.uint32).reshape(-1),
        normals=normals.astype(np.float32).reshape(-1),
        material=material or SurfaceMaterial(),
    )
    logger.debug(
        "converted mesh: %d vertices, %d faces -> %d triangles",
        vertex_count, mesh.faces.count, surface.triangle_count,
    )
    return surface


def _attribute(array: np.ndarray, item_size: int, array_type: str) -> Dict[str, Any]:
    return {
        "itemSize": item_size,
        "type": array_type,
        "array": array.tolist(),
        "normalized": False,
    }


def surface_to_json(surface: RenderableSurface) -> Dict[str, Any]:
    """three.js JSON (geometry plus material) for the scene layer."""

    return {
        "geometry": {
            "metadata": {"version": 4.6, "type": "BufferGeometry", "generator": "spinlio"},
            "uuid": str(uuid.uuid4()),
            "type": "BufferGeometry",
            "data": {
                "attributes": {
                    "position": _attribute(surface.positions, 3, "Float32Array"),
                    "normal": _attribute(surface.normals, 3, "Float32Array"),
                },
                "index": {"type": "Uint32Array", "array": surface.indices.tolist()},
            },
        },
        "material": surface.material.to_json(),
    }
