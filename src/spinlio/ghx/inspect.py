"""Read information back out of a base64 GHX definition."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .synthesizer import BAKE_TYPE, SCRIPT_TYPE, SLIDER_TYPE
from .templates import ValueKind
from .validator import decode_base64_text

__all__ = [
    "SliderSummary",
    "DocumentSummary",
    "decode_document",
    "extract_script_body",
    "describe_document",
]

_LITERAL_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)


@dataclass(frozen=True)
class SliderSummary:
    name: str
    value: float
    kind: ValueKind
    min: Optional[float] = None
    max: Optional[float] = None


@dataclass
class DocumentSummary:
    document_id: Optional[str]
    node_types: List[str] = field(default_factory=list)
    sliders: List[SliderSummary] = field(default_factory=list)
    script_inputs: List[str] = field(default_factory=list)
    output_name: Optional[str] = None
    has_bake: bool = False


def decode_document(document: str) -> str:
    """Return the XML text of a base64 document.

    Raises ``ValueError`` when the document is not base64-encoded UTF-8.
    """
    text, error = decode_base64_text(document)
    if text is None:
        raise ValueError(error)
    return text


def extract_script_body(document: str) -> str:
    """Return the embedded script body, exactly as stored."""

    match = _LITERAL_RE.search(decode_document(document))
    if not match:
        raise ValueError("no script body found in document")
    return match.group(1)


def _items(chunk: ET.Element) -> Dict[str, ET.Element]:
    found = {}
    container = chunk.find("items")
    if container is not None:
        for item in container.findall("item"):
            found.setdefault(item.get("name", ""), item)
    return found


def _chunks(chunk: ET.Element, name: str) -> List[ET.Element]:
    container = chunk.find("chunks")
    if container is None:
        return []
    return [c for c in container.findall("chunk") if c.get("name") == name]


def _chunk(chunk: ET.Element, name: str) -> Optional[ET.Element]:
    found = _chunks(chunk, name)
    return found[0] if found else None


def _text(items: Dict[str, ET.Element], name: str) -> Optional[str]:
    item = items.get(name)
    return None if item is None or item.text is None else item.text.strip()


def _number(items: Dict[str, ET.Element], name: str) -> Optional[float]:
    text = _text(items, name)
    return None if text is None else float(text)


def _slider(container: ET.Element) -> SliderSummary:
    slider = _chunk(container, "Slider")
    values = _items(slider) if slider is not None else {}
    value_item = values.get("Value")
    kind = ValueKind.INTEGER if value_item is not None and value_item.get("type_name") == "gh_int32" else ValueKind.REAL
    value = _number(values, "Value")
    return SliderSummary(
        name=_text(_items(container), "Name") or "",
        value=0.0 if value is None else value,
        kind=kind,
        min=_number(values, "Min"),
        max=_number(values, "Max"),
    )


def describe_document(document: str) -> DocumentSummary:
    """Summarize the nodes of a document produced by the synthesizer.

    Raises ``ValueError`` for undecodable or unparseable documents.
    """

    text = decode_document(document)
    try:
        root = ET.fromstring(text.encode("utf-8"))
    except ET.ParseError as exc:
        raise ValueError(f"document is not well-formed XML: {exc}") from exc

    definition = _chunk(root, "Definition")
    if definition is None:
        raise ValueError("document has no Definition chunk")
    header = _chunk(definition, "DocumentHeader")
    summary = DocumentSummary(document_id=_text(_items(header), "DocumentID") if header is not None else None)

    objects = _chunk(definition, "DefinitionObjects")
    for obj in _chunks(objects, "Object") if objects is not None else []:
        type_name = _text(_items(obj), "TypeName") or ""
        summary.node_types.append(type_name)
        container = _chunk(obj, "Container")
        if container is None:
            continue
        if type_name == SLIDER_TYPE:
            summary.sliders.append(_slider(container))
        elif type_name == SCRIPT_TYPE:
            data = _chunk(container, "ParameterData")
            if data is None:
                continue
            for inp in _chunks(data, "InputParam"):
                summary.script_inputs.append(_text(_items(inp), "Name") or "")
            out = _chunk(data, "OutputParam")
            if out is not None:
                summary.output_name = _text(_items(out), "Name")
        elif type_name == BAKE_TYPE:
            summary.has_bake = True
    return summary
