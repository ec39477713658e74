"""Request-scoped pipeline from component type to renderable surface.

::

    registry -> bind -> synthesize -> validate -> transport -> decode -> to_surface

The registry and settings are shared read-only; everything else lives for
one request. The transport is the only blocking step and is called once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional

from spinlio.compute.codec import GeometryCodec, Rhino3dmCodec
from spinlio.compute.decoder import ResponseLike, decode
from spinlio.compute.request import build_compute_request
from spinlio.compute.schema import ComputeRequest
from spinlio.config import Settings
from spinlio.errors import (
    DocumentValidationError,
    NetworkFailureError,
    UnknownComponentTypeError,
)
from spinlio.ghx.binder import BoundParameter, bind
from spinlio.ghx.synthesizer import synthesize
from spinlio.ghx.templates import ComponentTemplate, TemplateRegistry
from spinlio.ghx.validator import ValidationResult, validate
from spinlio.render.surface import RenderableSurface, to_surface

logger = logging.getLogger(__name__)

__all__ = ["GeneratedDefinition", "GeometryPipeline", "Transport"]

# Sends the JSON request payload to the solver and returns its decoded JSON body.
Transport = Callable[[Mapping[str, Any]], Mapping[str, Any]]


@dataclass
class GeneratedDefinition:
    template: ComponentTemplate
    parameters: List[BoundParameter]
    document: str
    validation: ValidationResult
    request: ComputeRequest


class GeometryPipeline:
    """Generate definitions and turn solver responses into surfaces."""

    def __init__(
        self,
        registry: TemplateRegistry,
        codec: Optional[GeometryCodec] = None,
        settings: Optional[Settings] = None,
    ):
        self.registry = registry
        self.settings = settings or Settings()
        self._codec = codec

    @property
    def codec(self) -> GeometryCodec:
        if self._codec is None:
            self._codec = Rhino3dmCodec()
        return self._codec

    def generate(self, component_type: str, values: Optional[Mapping[str, object]] = None) -> GeneratedDefinition:
        """Build and validate the definition for ``component_type``."""

        template = self.registry.lookup(component_type)
        if template is None:
            raise UnknownComponentTypeError(component_type)

        parameters = bind(template, values)
        document = synthesize(
            template,
            parameters,
            output_name=self.settings.output_name,
            spacing=self.settings.node_spacing,
        )
        validation = validate(document)
        if not validation.is_valid:
            raise DocumentValidationError(validation.errors)

        logger.info("generated %s definition with %d parameter(s)", template.id, len(parameters))
        return GeneratedDefinition(
            template=template,
            parameters=parameters,
            document=document,
            validation=validation,
            request=build_compute_request(document, parameters),
        )

    def preview(self, response: ResponseLike) -> RenderableSurface:
        """Decode a solver response and convert it for rendering."""

        mesh = decode(response, codec=self.codec, output_name=self.settings.output_name)
        return to_surface(mesh)

    def solve(
        self,
        component_type: str,
        values: Optional[Mapping[str, object]],
        transport: Transport,
    ) -> RenderableSurface:
        """Generate, call the solver once, and convert its response."""

        generated = self.generate(component_type, values)
        codec = self.codec
        try:
            response = transport(generated.request.to_payload())
        except Exception as exc:
            raise NetworkFailureError(f"solver request for {generated.template.id!r} failed: {exc}") from exc
        mesh = decode(response, codec=codec, output_name=self.settings.output_name)
        return to_surface(mesh)
