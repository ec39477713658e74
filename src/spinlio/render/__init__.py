"""Renderable surfaces built from decoded meshes."""

from .surface import (
    SurfaceMaterial,
    RenderableSurface,
    compute_vertex_normals,
    surface_to_json,
    to_surface,
    triangulate_face,
)
from .stl import write_stl

__all__ = [
    "SurfaceMaterial",
    "RenderableSurface",
    "compute_vertex_normals",
    "surface_to_json",
    "to_surface",
    "triangulate_face",
    "write_stl",
]
