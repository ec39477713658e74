"""Pydantic models for the Grasshopper compute wire format.

Requests and responses share the data-tree shape::

    {"ParamName": "OutputBake",
     "InnerTree": {"{0}": [{"type": "Rhino.Geometry.Mesh", "data": "..."}]}}

Field names are accepted in the solver's PascalCase, in camelCase and in
snake_case; dumps use the solver's names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

__all__ = [
    "ValueTag",
    "GEOMETRY_TAGS",
    "TreeValue",
    "DataTreeParam",
    "ComputeRequest",
    "ComputeResponse",
]


class ValueTag(Enum):
    """Known data-tree value types; anything else is UNRECOGNIZED."""

    MESH = "Rhino.Geometry.Mesh"
    BREP = "Rhino.Geometry.Brep"
    GEOMETRY = "Rhino.Geometry.GeometryBase"
    INTEGER = "System.Int32"
    REAL = "System.Double"
    STRING = "System.String"
    BOOLEAN = "System.Boolean"
    UNRECOGNIZED = ""

    @classmethod
    def from_type_name(cls, type_name: Optional[str]) -> "ValueTag":
        if not type_name:
            return cls.UNRECOGNIZED
        for tag in cls:
            if tag is not cls.UNRECOGNIZED and tag.value == type_name:
                return tag
        return cls.UNRECOGNIZED

    @property
    def is_geometry(self) -> bool:
        return self in GEOMETRY_TAGS


GEOMETRY_TAGS: FrozenSet[ValueTag] = frozenset({ValueTag.MESH, ValueTag.BREP, ValueTag.GEOMETRY})


class TreeValue(BaseModel):
    """One typed value in a data-tree branch."""

    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    data: Any = None

    @property
    def tag(self) -> ValueTag:
        return ValueTag.from_type_name(self.type)


class DataTreeParam(BaseModel):
    """A named parameter holding a tree of branches."""

    model_config = ConfigDict(extra="ignore")

    param_name: str = Field(
        validation_alias=AliasChoices("ParamName", "paramName", "param_name"),
        serialization_alias="ParamName",
    )
    inner_tree: Dict[str, List[TreeValue]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("InnerTree", "innerTree", "inner_tree"),
        serialization_alias="InnerTree",
    )

    def first_value(self) -> Optional[TreeValue]:
        """First value of the first branch, in the tree's key order."""
        for branch in self.inner_tree.values():
            return branch[0] if branch else None
        return None

    @property
    def first_tag(self) -> ValueTag:
        value = self.first_value()
        return ValueTag.UNRECOGNIZED if value is None else value.tag


class ComputeRequest(BaseModel):
    """Body of a ``POST /grasshopper`` request."""

    model_config = ConfigDict(extra="ignore")

    algo: str = Field(validation_alias=AliasChoices("algo", "algorithmDocument"))
    pointer: Optional[str] = None
    values: List[DataTreeParam] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict using the solver's key names."""
        return self.model_dump(by_alias=True, mode="json")


class ComputeResponse(BaseModel):
    """Solver response; only ``values`` is needed for decoding."""

    model_config = ConfigDict(extra="ignore")

    values: List[DataTreeParam] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    def find(self, param_name: str) -> Optional[DataTreeParam]:
        for entry in self.values:
            if entry.param_name == param_name:
                return entry
        return None
