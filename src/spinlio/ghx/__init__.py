"""GHX definition templates, synthesis and validation."""

from .templates import (
    ValueKind,
    ParameterDefinition,
    ComponentTemplate,
    TemplateRegistry,
)
from .builtin import builtin_templates
from .catalog import build_registry, default_registry, load_templates
from .binder import BoundParameter, bind
from .synthesizer import synthesize
from .validator import ValidationResult, validate
from .inspect import describe_document, extract_script_body

__all__ = [
    "ValueKind",
    "ParameterDefinition",
    "ComponentTemplate",
    "TemplateRegistry",
    "builtin_templates",
    "build_registry",
    "default_registry",
    "load_templates",
    "BoundParameter",
    "bind",
    "synthesize",
    "ValidationResult",
    "validate",
    "describe_document",
    "extract_script_body",
]
