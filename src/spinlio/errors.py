"""Exception hierarchy for spinlio.

The template registry and the parameter binder never raise for missing
data (they return ``None`` or fall back to defaults) and the document
validator returns its findings. Everything else reports failure through
the classes below; a failure is terminal for the current request.
"""

from typing import Iterable, List

__all__ = [
    "SpinlioError",
    "UnknownComponentTypeError",
    "DocumentValidationError",
    "NetworkFailureError",
    "CodecUnavailableError",
    "DecodeError",
    "NoGeometryOutputError",
    "MalformedPayloadError",
    "UnsupportedGeometryKindError",
]


class SpinlioError(Exception):
    """Base exception for spinlio errors."""


class UnknownComponentTypeError(SpinlioError):
    """Raised when a component type id is not in the template registry."""

    def __init__(self, component_type: str):
        self.component_type = component_type
        super().__init__(f"unknown component type: {component_type!r}")


class DocumentValidationError(SpinlioError):
    """Raised when a synthesized document fails structural validation."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        detail = "; ".join(self.errors) if self.errors else "no details"
        super().__init__(f"document failed validation: {detail}")


class NetworkFailureError(SpinlioError):
    """Raised when the call to the geometry solver fails."""


class CodecUnavailableError(SpinlioError, RuntimeError):
    """Raised when no geometry codec can be loaded (rhino3dm missing)."""


class DecodeError(SpinlioError):
    """Base class for compute-response decoding failures."""

    reason = "decode failure"

    def __init__(self, detail: str = ""):
        self.detail = detail
        message = f"{self.reason}: {detail}" if detail else self.reason
        super().__init__(message)


class NoGeometryOutputError(DecodeError):
    reason = "no geometry output"


class MalformedPayloadError(DecodeError):
    reason = "malformed payload"


class UnsupportedGeometryKindError(DecodeError):
    reason = "unsupported geometry kind"

    def __init__(self, kind: str, detail: str = ""):
        self.kind = kind
        super().__init__(detail or f"decoded object is {kind!r}, expected 'mesh'")
