"""Solver wire format, request building and response decoding."""

from .schema import (
    ValueTag,
    GEOMETRY_TAGS,
    TreeValue,
    DataTreeParam,
    ComputeRequest,
    ComputeResponse,
)
from .request import build_compute_request
from .mesh import DecodedGeometry, DecodedMesh, IndexedAccessor
from .codec import GeometryCodec, Rhino3dmCodec, rhino3dm_available, require_rhino3dm
from .decoder import decode

__all__ = [
    "ValueTag",
    "GEOMETRY_TAGS",
    "TreeValue",
    "DataTreeParam",
    "ComputeRequest",
    "ComputeResponse",
    "build_compute_request",
    "DecodedGeometry",
    "DecodedMesh",
    "IndexedAccessor",
    "GeometryCodec",
    "Rhino3dmCodec",
    "rhino3dm_available",
    "require_rhino3dm",
    "decode",
]
