"""Bind caller-supplied values to a template's parameter definitions."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import List, Mapping, Optional, Union

from .templates import ComponentTemplate, ValueKind

logger = logging.getLogger(__name__)

__all__ = ["BoundParameter", "bind", "infer_kind"]

Number = Union[int, float]


@dataclass(frozen=True)
class BoundParameter:
    """A parameter value resolved for one generation request."""

    name: str
    value: Number
    kind: ValueKind


def _usable(value: object) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(float(value))
    )


def infer_kind(value: Number) -> ValueKind:
    """INTEGER when ``value`` has no fractional part, REAL otherwise."""
    return ValueKind.INTEGER if float(value).is_integer() else ValueKind.REAL


def bind(
    template: ComponentTemplate,
    supplied_values: Optional[Mapping[str, object]] = None,
) -> List[BoundParameter]:
    """Resolve every parameter of ``template`` in declaration order.

    Supplied values that are missing, non-numeric or not finite fall back
    to the definition's default. Values are not clamped to min/max.
    """

    supplied = dict(supplied_values or {})
    bound: List[BoundParameter] = []
    for definition in template.parameter_definitions:
        raw = supplied.pop(definition.name, None)
        if _usable(raw):
            value = raw
        else:
            if raw is not None:
                logger.warning(
                    "parameter %s: unusable value %r, using default %r",
                    definition.name, raw, definition.default_value,
                )
            value = definition.default_value

        kind = definition.kind if definition.kind is not None else infer_kind(value)
        if kind is ValueKind.INTEGER:
            if not float(value).is_integer():
                logger.debug("parameter %s: rounding %r for integer kind", definition.name, value)
            value = int(round(float(value)))
        else:
            value = float(value)
        bound.append(BoundParameter(definition.name, value, kind))

    if supplied:
        logger.debug("ignoring values for undeclared parameters: %s", sorted(supplied))
    return bound
