"""Synthesize a GHX definition from a template and bound parameters.

The generated definition is a single-row canvas::

    [slider 0] [slider 1] ... [slider n-1] [GhPython script] [Bake]

Every slider is wired to the script input of the same name; the script's
only output is wired to the bake node. The result is the base64 encoding
of the archive's XML text, ready to be posted to the solver.
"""

from __future__ import annotations

import datetime as _dt
import logging
import uuid
from typing import Callable, Optional, Sequence, Tuple

from spinlio.config import DEFAULT_NODE_SPACING, DEFAULT_OUTPUT_NAME
from .binder import BoundParameter
from .document import (
    Archive,
    Chunk,
    Item,
    bool_item,
    color_item,
    date_item,
    double_item,
    encode,
    guid_item,
    int_item,
    pointf_item,
    rectanglef_item,
    script_item,
    string_item,
    version_item,
)
from .templates import ComponentTemplate, ParameterDefinition, ValueKind

logger = logging.getLogger(__name__)

__all__ = [
    "SLIDER_TYPE",
    "SCRIPT_TYPE",
    "BAKE_TYPE",
    "ROW_Y",
    "build_archive",
    "synthesize",
]

# Component class markers written into every node's ``TypeName`` item.
SLIDER_TYPE = "Grasshopper.Kernel.Special.GhNumberSlider"
SCRIPT_TYPE = "GhPython.Component.ZuiPythonComponent"
BAKE_TYPE = "Grasshopper.Kernel.Components.GH_Bake"

_SLIDER_CLASS_ID = "57da07bd-ecab-415d-9d86-af36d7073abc"
_SCRIPT_CLASS_ID = "410755b1-224a-4c1e-a407-bf32fb45ea7e"
_BAKE_CLASS_ID = "a7e7c8c7-1b0a-4b52-9f4d-6c3b1f9d2e11"

ROW_Y = 100.0
_SLIDER_SIZE = (50.0, 20.0)
_SCRIPT_SIZE = (100.0, 100.0)
_BAKE_SIZE = (80.0, 60.0)

_DOTNET_EPOCH_TICKS = 621355968000000000

IdFactory = Callable[[], object]


def _dotnet_ticks(when: _dt.datetime) -> int:
    if when.tzinfo is None:
        when = when.replace(tzinfo=_dt.timezone.utc)
    seconds = when.timestamp()
    return _DOTNET_EPOCH_TICKS + int(round(seconds * 10_000_000))


def _slider_digits(definition: Optional[ParameterDefinition], kind: ValueKind) -> int:
    if kind is ValueKind.INTEGER:
        return 0
    if definition is None or definition.step is None:
        return 3
    text = repr(float(definition.step))
    if "e" in text or "E" in text:
        return 6
    decimals = text.split(".", 1)[1].rstrip("0")
    return min(len(decimals), 6)


def _slider_range(definition: Optional[ParameterDefinition], value: float) -> Tuple[float, float]:
    lo = definition.min if definition is not None and definition.min is not None else min(0.0, value)
    hi = definition.max if definition is not None and definition.max is not None else max(2.0 * value, 1.0)
    return min(lo, value), max(hi, value)


def _attributes(container: Chunk, x: float, size: Tuple[float, float]) -> None:
    w, h = size
    attrs = container.add_chunk("Attributes")
    attrs.add_item(rectanglef_item("Bounds", x, ROW_Y, w, h))
    attrs.add_item(pointf_item("Pivot", x + w / 2.0, ROW_Y + h / 2.0))


def _object_chunk(objects: Chunk, index: int, class_id: str, name: str, type_name: str) -> Chunk:
    obj = objects.add_chunk("Object", index)
    obj.add_item(guid_item("GUID", class_id))
    obj.add_item(string_item("Name", name))
    obj.add_item(string_item("TypeName", type_name))
    return obj.add_chunk("Container")


def _value_item(name: str, value: float, kind: ValueKind) -> Item:
    if kind is ValueKind.INTEGER:
        return int_item(name, int(value))
    return double_item(name, float(value))


def _add_slider(
    objects: Chunk,
    index: int,
    param: BoundParameter,
    definition: Optional[ParameterDefinition],
    instance_id: str,
    x: float,
) -> None:
    container = _object_chunk(objects, index, _SLIDER_CLASS_ID, "Number Slider", SLIDER_TYPE)
    description = definition.description if definition and definition.description else f"Parameter {param.name}"
    container.add_item(string_item("Description", description))
    container.add_item(guid_item("InstanceGuid", instance_id))
    container.add_item(string_item("Name", param.name))
    container.add_item(string_item("NickName", param.name))
    _attributes(container, x, _SLIDER_SIZE)

    lo, hi = _slider_range(definition, float(param.value))
    slider = container.add_chunk("Slider")
    slider.add_item(int_item("Digits", _slider_digits(definition, param.kind)))
    slider.add_item(_value_item("Max", hi, param.kind))
    slider.add_item(_value_item("Min", lo, param.kind))
    slider.add_item(string_item("TypeHint", param.kind.system_type))
    slider.add_item(_value_item("Value", param.value, param.kind))


def _add_script(
    objects: Chunk,
    index: int,
    template: ComponentTemplate,
    params: Sequence[BoundParameter],
    slider_ids: Sequence[str],
    input_ids: Sequence[str],
    instance_id: str,
    output_id: str,
    output_name: str,
    x: float,
) -> None:
    container = _object_chunk(objects, index, _SCRIPT_CLASS_ID, "GhPython Script", SCRIPT_TYPE)
    container.add_item(script_item("CodeInput", template.script_body))
    container.add_item(string_item("Description", f"{template.name} script"))
    container.add_item(guid_item("InstanceGuid", instance_id))
    container.add_item(string_item("Name", "Python Script"))
    container.add_item(string_item("NickName", template.id))
    _attributes(container, x, _SCRIPT_SIZE)

    data = container.add_chunk("ParameterData")
    data.add_item(int_item("InputCount", len(params)))
    data.add_item(int_item("OutputCount", 1))
    for i, (param, slider_id, input_id) in enumerate(zip(params, slider_ids, input_ids)):
        inp = data.add_chunk("InputParam", i)
        inp.add_item(int_item("Access", 0))
        inp.add_item(guid_item("InstanceGuid", input_id))
        inp.add_item(string_item("Name", param.name))
        inp.add_item(string_item("NickName", param.name))
        inp.add_item(guid_item("Source", slider_id, index=0))
        inp.add_item(int_item("SourceCount", 1))
        inp.add_item(string_item("TypeHint", param.kind.system_type))
    out = data.add_chunk("OutputParam", 0)
    out.add_item(string_item("Description", "Script output"))
    out.add_item(guid_item("InstanceGuid", output_id))
    out.add_item(string_item("Name", output_name))
    out.add_item(string_item("NickName", output_name))
    out.add_item(string_item("TypeHint", "mesh"))


def _add_bake(
    objects: Chunk,
    index: int,
    instance_id: str,
    input_id: str,
    source_id: str,
    x: float,
) -> None:
    container = _object_chunk(objects, index, _BAKE_CLASS_ID, "Bake", BAKE_TYPE)
    container.add_item(string_item("Description", "Bakes the script output"))
    container.add_item(guid_item("InstanceGuid", instance_id))
    container.add_item(string_item("Name", "Bake"))
    container.add_item(string_item("NickName", "Bake"))
    _attributes(container, x, _BAKE_SIZE)

    inp = container.add_chunk("BakeInput", 0)
    inp.add_item(int_item("Access", 1))
    inp.add_item(guid_item("InstanceGuid", input_id))
    inp.add_item(string_item("Name", "Geometry"))
    inp.add_item(string_item("NickName", "G"))
    inp.add_item(guid_item("Source", source_id, index=0))
    inp.add_item(int_item("SourceCount", 1))


def build_archive(
    template: ComponentTemplate,
    bound_parameters: Sequence[BoundParameter],
    *,
    output_name: str = DEFAULT_OUTPUT_NAME,
    spacing: float = DEFAULT_NODE_SPACING,
    id_factory: IdFactory = uuid.uuid4,
    created: Optional[_dt.datetime] = None,
) -> Archive:
    """Build the archive tree for ``template`` with ``bound_parameters``."""

    def new_id() -> str:
        return str(id_factory())

    params = list(bound_parameters)
    n = len(params)
    document_id = new_id()
    slider_ids = [new_id() for _ in params]
    input_ids = [new_id() for _ in params]
    script_id, output_id = new_id(), new_id()
    bake_id, bake_input_id = new_id(), new_id()
    created = created or _dt.datetime.now(_dt.timezone.utc)

    archive = Archive()
    archive.add_item(version_item("ArchiveVersion", 0, 2, 2))

    definition = archive.add_chunk("Definition")
    definition.add_item(version_item("plugin_version", 1, 0, 7))

    header = definition.add_chunk("DocumentHeader")
    header.add_item(guid_item("DocumentID", document_id))
    header.add_item(string_item("Preview", "Shaded"))
    header.add_item(int_item("PreviewMeshType", 1))
    header.add_item(color_item("PreviewNormal", (100, 150, 0, 0)))
    header.add_item(color_item("PreviewSelected", (100, 0, 150, 0)))

    properties = definition.add_chunk("DefinitionProperties")
    properties.add_item(date_item("Date", _dotnet_ticks(created)))
    properties.add_item(string_item("Description", f"{template.name} generated by spinlio"))
    properties.add_item(bool_item("KeepOpen", False))
    properties.add_item(string_item("Name", f"{template.id}.ghx"))

    objects = definition.add_chunk("DefinitionObjects")
    objects.add_item(int_item("ObjectCount", n + 2))

    for i, param in enumerate(params):
        _add_slider(objects, i, param, template.definition(param.name), slider_ids[i], i * spacing)
    _add_script(
        objects, n, template, params, slider_ids, input_ids,
        script_id, output_id, output_name, n * spacing,
    )
    _add_bake(objects, n + 1, bake_id, bake_input_id, output_id, (n + 1) * spacing)

    logger.debug(
        "built archive for %s: document %s, %d slider(s)", template.id, document_id, n
    )
    return archive


def synthesize(
    template: ComponentTemplate,
    bound_parameters: Sequence[BoundParameter],
    *,
    output_name: str = DEFAULT_OUTPUT_NAME,
    spacing: float = DEFAULT_NODE_SPACING,
    id_factory: IdFactory = uuid.uuid4,
    created: Optional[_dt.datetime] = None,
) -> str:
    """Return the base64-encoded GHX definition.

    Never fails on questionable input; run :func:`spinlio.ghx.validator.validate`
    on the result to check it.
    """

    archive = build_archive(
        template,
        bound_parameters,
        output_name=output_name,
        spacing=spacing,
        id_factory=id_factory,
        created=created,
    )
    document = encode(archive)
    logger.debug("encoded %s definition: %d base64 characters", template.id, len(document))
    return document
