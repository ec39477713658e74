"""Build solver requests from a synthesized definition."""

from __future__ import annotations

from typing import Iterable

from spinlio.ghx.binder import BoundParameter
from .schema import ComputeRequest, DataTreeParam, TreeValue

__all__ = ["parameter_tree", "build_compute_request"]


def parameter_tree(param: BoundParameter) -> DataTreeParam:
    """Single-branch data tree carrying one bound parameter value."""
    return DataTreeParam(
        param_name=param.name,
        inner_tree={"0": [TreeValue(type=param.kind.system_type, data=param.value)]},
    )


def build_compute_request(document: str, bound_parameters: Iterable[BoundParameter]) -> ComputeRequest:
    """Return the request for ``document`` with one value per parameter, in order."""
    return ComputeRequest(
        algo=document,
        pointer=None,
        values=[parameter_tree(p) for p in bound_parameters],
    )
