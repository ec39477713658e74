"""Geometry codecs that turn an encoded solver payload into mesh data.

The default codec wraps `rhino3dm`. Importing this module without
rhino3dm installed is fine; a clear runtime error is raised the first
time the codec is actually needed.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

try:  # pragma: no cover - exercised in environments with rhino3dm
    import rhino3dm

    _RHINO3DM_IMPORT_ERROR: Optional[Exception] = None
    _HAVE_RHINO3DM = True
except ImportError as exc:  # pragma: no cover - handled during runtime detection
    rhino3dm = None
    _RHINO3DM_IMPORT_ERROR = exc
    _HAVE_RHINO3DM = False

from spinlio.errors import CodecUnavailableError
from .mesh import DecodedGeometry, Face, IndexedAccessor, Vec3

logger = logging.getLogger(__name__)

__all__ = [
    "GeometryCodec",
    "Rhino3dmCodec",
    "rhino3dm_available",
    "require_rhino3dm",
]


class GeometryCodec(Protocol):
    """Decodes one serialized geometry object.

    Implementations raise an exception when the payload cannot be decoded.
    """

    def decode(self, payload: Mapping[str, Any]) -> DecodedGeometry:
        ...


def rhino3dm_available() -> bool:
    """Return True when rhino3dm imported successfully."""
    return _HAVE_RHINO3DM


def require_rhino3dm() -> None:
    """Raise a descriptive error if rhino3dm is not installed."""
    if _HAVE_RHINO3DM:
        return
    raise CodecUnavailableError(
        "rhino3dm is not available. Install it with `pip install spinlio[rhino]` "
        "to decode geometry returned by the solver."
    ) from _RHINO3DM_IMPORT_ERROR


def _face_tuple(face) -> Face:
    # rhino3dm reports every face as a quad; triangles repeat the third index
    a, b, c, d = (int(i) for i in face)
    if c == d:
        return (a, b, c)
    return (a, b, c, d)


def _point_tuple(pt) -> Vec3:
    return (float(pt.X), float(pt.Y), float(pt.Z))


class Rhino3dmCodec:
    """Decode ``CommonObject`` JSON payloads with rhino3dm."""

    def __init__(self) -> None:
        require_rhino3dm()

    def decode(self, payload: Mapping[str, Any]) -> DecodedGeometry:
        obj = rhino3dm.CommonObject.Decode(dict(payload))
        if obj is None:
            raise ValueError("rhino3dm could not decode the payload")
        if not isinstance(obj, rhino3dm.Mesh):
            kind = type(obj).__name__.lower()
            logger.debug("decoded non-mesh object of type %s", kind)
            return DecodedGeometry(kind=kind, native=obj)

        verts = obj.Vertices
        faces = obj.Faces
        logger.debug("decoded rhino3dm mesh: %d vertices, %d faces", len(verts), len(faces))
        return DecodedGeometry(
            kind="mesh",
            vertices=IndexedAccessor(len(verts), lambda i: _point_tuple(verts[i])),
            faces=IndexedAccessor(len(faces), lambda i: _face_tuple(faces[i])),
            native=obj,
        )
