"""Component templates and the read-only template registry."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

__all__ = [
    "ValueKind",
    "ParameterDefinition",
    "ComponentTemplate",
    "TemplateRegistry",
]

_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")
_CDATA_END = "]]>"


class ValueKind(Enum):
    """Numeric kind of a bound parameter."""

    INTEGER = "integer"
    REAL = "real"

    @property
    def system_type(self) -> str:
        """Data-type tag used in solver requests."""
        return "System.Int32" if self is ValueKind.INTEGER else "System.Double"

    @property
    def gh_type(self) -> Tuple[str, int]:
        """``(type_name, type_code)`` of the matching GHX item type."""
        return ("gh_int32", 3) if self is ValueKind.INTEGER else ("gh_double", 6)


@dataclass(frozen=True)
class ParameterDefinition:
    """A named numeric input of a component template.

    ``kind`` pins the value kind; when it is ``None`` the kind is inferred
    from the bound value.
    """

    name: str
    display_name: str
    description: str
    default_value: float
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    kind: Optional[ValueKind] = None

    def __post_init__(self) -> None:
        if not _NAME_RE.match(self.name):
            raise ValueError(f"parameter name {self.name!r} must be a lower-case identifier")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"parameter {self.name!r}: min {self.min} exceeds max {self.max}")
        if self.min is not None and self.default_value < self.min:
            raise ValueError(
                f"parameter {self.name!r}: default {self.default_value} below min {self.min}"
            )
        if self.max is not None and self.default_value > self.max:
            raise ValueError(
                f"parameter {self.name!r}: default {self.default_value} above max {self.max}"
            )
        if self.step is not None and self.step <= 0:
            raise ValueError(f"parameter {self.name!r}: step must be positive")


@dataclass(frozen=True)
class ComponentTemplate:
    """A parametric component type with its embedded script."""

    id: str
    name: str
    description: str
    parameter_definitions: Tuple[ParameterDefinition, ...] = field(default_factory=tuple)
    script_body: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("template id must not be empty")
        # freeze whatever sequence was supplied
        object.__setattr__(self, "parameter_definitions", tuple(self.parameter_definitions))
        seen = set()
        for definition in self.parameter_definitions:
            if definition.name in seen:
                raise ValueError(f"template {self.id!r}: duplicate parameter {definition.name!r}")
            seen.add(definition.name)
            if not re.search(rf"\b{re.escape(definition.name)}\b", self.script_body):
                raise ValueError(
                    f"template {self.id!r}: script does not reference parameter {definition.name!r}"
                )
        if _CDATA_END in self.script_body:
            raise ValueError(f"template {self.id!r}: script body must not contain {_CDATA_END!r}")

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self.parameter_definitions)

    def definition(self, name: str) -> Optional[ParameterDefinition]:
        for d in self.parameter_definitions:
            if d.name == name:
                return d
        return None


class TemplateRegistry:
    """Immutable, case-insensitive catalog of component templates.

    Built once (usually at startup) and shared by reference. There is no
    mutation API; build a new registry to change the catalog.
    """

    def __init__(self, templates: Iterable[ComponentTemplate] = ()):
        entries = {}
        for template in templates:
            key = template.id.lower()
            if key in entries:
                raise ValueError(f"duplicate template id: {template.id!r}")
            entries[key] = template
        self._templates: Mapping[str, ComponentTemplate] = MappingProxyType(entries)

    def lookup(self, component_type: str) -> Optional[ComponentTemplate]:
        """Return the template for ``component_type`` or ``None`` if unknown."""

        if not isinstance(component_type, str):
            return None
        template = self._templates.get(component_type.strip().lower())
        if template is None:
            logger.debug("unknown component type %r", component_type)
        return template

    def ids(self) -> Tuple[str, ...]:
        return tuple(t.id for t in self._templates.values())

    def merged(self, templates: Iterable[ComponentTemplate]) -> "TemplateRegistry":
        """Return a new registry where ``templates`` replace same-id entries."""

        combined = dict(self._templates)
        for template in templates:
            combined[template.id.lower()] = template
        return TemplateRegistry(combined.values())

    def __contains__(self, component_type: object) -> bool:
        return isinstance(component_type, str) and component_type.strip().lower() in self._templates

    def __iter__(self) -> Iterator[ComponentTemplate]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    def __repr__(self) -> str:
        return f"TemplateRegistry({list(self.ids())!r})"
