"""STL export for renderable surfaces."""

from __future__ import annotations

import contextlib
import math
from dataclasses import dataclass
from typing import IO, Iterator, Optional, Tuple

import numpy as np

from .surface import RenderableSurface

__all__ = ["Triangle", "triangle_normal", "surface_triangles", "write_stl"]

Vec3 = Tuple[float, float, float]

_HEADER_SIZE = 80
_EPSILON = 1e-12

# one little-endian binary STL facet record, 50 bytes
_FACET_DTYPE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attributes", "<u2"),
])


@dataclass(frozen=True)
class Triangle:
    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Optional[Vec3]:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    ax, ay, az = v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2]
    bx, by, bz = v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2]
    nx, ny, nz = ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx
    length = math.sqrt(nx * nx + ny * ny + nz * nz)
    if length <= _EPSILON:
        return None
    return (nx / length, ny / length, nz / length)


def _facets(surface: RenderableSurface) -> Tuple[np.ndarray, np.ndarray]:
    """Corner coordinates ``(t, 3, 3)`` and unit normals ``(t, 3)``.

    Degenerate triangles are left out.
    """

    points = surface.positions.reshape(-1, 3).astype(np.float64)
    corners = points[surface.indices.reshape(-1, 3).astype(np.intp)]
    normals = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
    lengths = np.linalg.norm(normals, axis=1)
    keep = lengths > _EPSILON
    return corners[keep], normals[keep] / lengths[keep][:, None]


def surface_triangles(surface: RenderableSurface) -> Iterator[Triangle]:
    """Yield the surface's triangles; degenerate ones are skipped."""

    corners, normals = _facets(surface)
    for (v0, v1, v2), n in zip(corners.tolist(), normals.tolist()):
        yield Triangle(normal=tuple(n), v0=tuple(v0), v1=tuple(v1), v2=tuple(v2))


@contextlib.contextmanager
def _opened(path_or_file, mode: str) -> Iterator[IO]:
    if hasattr(path_or_file, "write"):
        yield path_or_file
    else:
        with open(path_or_file, mode, **({} if "b" in mode else {"encoding": "ascii"})) as stream:
            yield stream


def write_stl(surface: RenderableSurface, path_or_file, *, binary: bool = True, name: str = "spinlio") -> None:
    """Write ``surface`` to STL.

    ``path_or_file`` can be a filesystem path or an open stream (binary
    for ``binary=True``, text otherwise). Degenerate triangles are
    skipped.
    """

    corners, normals = _facets(surface)

    if binary:
        records = np.zeros(len(corners), dtype=_FACET_DTYPE)
        records["normal"] = normals
        records["vertices"] = corners
        header = name[:_HEADER_SIZE].encode("ascii", errors="replace").ljust(_HEADER_SIZE, b" ")
        with _opened(path_or_file, "wb") as stream:
            stream.write(header)
            stream.write(np.uint32(len(records)).astype("<u4").tobytes())
            stream.write(records.tobytes())
        return

    lines = [f"solid {name}"]
    for (v0, v1, v2), (nx, ny, nz) in zip(corners.tolist(), normals.tolist()):
        lines.append(f"  facet normal {nx:.6e} {ny:.6e} {nz:.6e}")
        lines.append("    outer loop")
        lines.extend(f"      vertex {x:.6e} {y:.6e} {z:.6e}" for x, y, z in (v0, v1, v2))
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    with _opened(path_or_file, "w") as stream:
        stream.write("\n".join(lines) + "\n")
