"""Locate and decode the baked mesh in a solver response."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from spinlio.config import DEFAULT_OUTPUT_NAME
from spinlio.errors import (
    MalformedPayloadError,
    NoGeometryOutputError,
    UnsupportedGeometryKindError,
)
from .codec import GeometryCodec
from .mesh import DecodedMesh
from .schema import ComputeResponse, DataTreeParam

logger = logging.getLogger(__name__)

__all__ = ["select_output", "extract_payload", "parse_response", "decode"]

ResponseLike = Union[ComputeResponse, Mapping[str, Any]]


def parse_response(response: ResponseLike) -> ComputeResponse:
    """Validate a raw response dict; schema violations are malformed payloads."""

    if isinstance(response, ComputeResponse):
        return response
    try:
        return ComputeResponse.model_validate(response)
    except ValidationError as exc:
        raise MalformedPayloadError(f"response does not match the compute schema ({exc.error_count()} error(s))") from exc


def select_output(response: ComputeResponse, output_name: str = DEFAULT_OUTPUT_NAME) -> Optional[DataTreeParam]:
    """Pick the output carrying geometry.

    An exact ``output_name`` match wins; otherwise the first entry whose
    first value is tagged as geometry.
    """

    entry = response.find(output_name)
    if entry is not None:
        return entry
    for entry in response.values:
        if entry.first_tag.is_geometry:
            logger.debug("no %r output; using %r (%s)", output_name, entry.param_name, entry.first_tag.value)
            return entry
    return None


def extract_payload(entry: DataTreeParam) -> Mapping[str, Any]:
    """Return the encoded geometry object held by the entry's first value."""

    value = entry.first_value()
    if value is None:
        raise MalformedPayloadError(f"output {entry.param_name!r} has no values")
    data = value.data
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise MalformedPayloadError(f"output {entry.param_name!r} data is not JSON: {exc}") from exc
    if not isinstance(data, Mapping) or "data" not in data:
        raise MalformedPayloadError(f"output {entry.param_name!r} has no encoded 'data' field")
    return data


def decode(
    response: ResponseLike,
    *,
    codec: GeometryCodec,
    output_name: str = DEFAULT_OUTPUT_NAME,
) -> DecodedMesh:
    """Decode the baked mesh of a solver response.

    Raises :class:`~spinlio.errors.NoGeometryOutputError`,
    :class:`~spinlio.errors.MalformedPayloadError` or
    :class:`~spinlio.errors.UnsupportedGeometryKindError`. There are no
    retries; a failure is final for this response.
    """

    parsed = parse_response(response)
    for message in parsed.warnings:
        logger.warning("solver warning: %s", message)
    for message in parsed.errors:
        logger.warning("solver error: %s", message)

    entry = select_output(parsed, output_name)
    if entry is None:
        available = [(v.param_name, v.first_value().type if v.first_value() else None) for v in parsed.values]
        logger.debug("no geometry output among %r", available)
        raise NoGeometryOutputError(f"{len(parsed.values)} output(s), none with geometry")

    payload = extract_payload(entry)
    try:
        geometry = codec.decode(payload)
    except Exception as exc:
        raise MalformedPayloadError(f"codec failed to decode {entry.param_name!r}: {exc}") from exc

    if geometry.kind != "mesh":
        raise UnsupportedGeometryKindError(geometry.kind)

    mesh = DecodedMesh(vertices=geometry.vertices, faces=geometry.faces)
    logger.debug(
        "decoded %r: %d vertices, %d faces", entry.param_name, mesh.vertices.count, mesh.faces.count
    )
    return mesh
