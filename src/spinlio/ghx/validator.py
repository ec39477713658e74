"""Structural validation of base64-encoded GHX definitions.

This is a linter over the document text, not a schema validator: each
check looks for a required marker and records its own error, so a broken
document reports every problem at once. ``strict`` mode additionally
parses the XML and compares every declared container count with the
children actually present.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .synthesizer import SLIDER_TYPE

logger = logging.getLogger(__name__)

__all__ = [
    "ValidationResult",
    "validate",
    "decode_base64_text",
    "SCRIPT_MARKER",
    "BAKE_MARKER",
    "SLIDER_MARKER",
]

XML_DECLARATION_MARKER = '<?xml version="1.0"'
ARCHIVE_MARKER = '<Archive name="Root"'
SCRIPT_MARKER = "GhPython"
BAKE_MARKER = "GH_Bake"
SLIDER_MARKER = SLIDER_TYPE
LITERAL_OPEN = "<![CDATA["
LITERAL_CLOSE = "]]>"

_INPUT_COUNT_RE = re.compile(r'<item name="InputCount"[^>]*>\s*(\d+)\s*</item>')
_WHITESPACE_RE = re.compile(rb"\s+")


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.is_valid


def decode_base64_text(document: object) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(text, None)`` or ``(None, error)`` for a base64 document."""

    if isinstance(document, bytes):
        raw = document
    elif isinstance(document, str):
        raw = document.encode("ascii", errors="replace")
    else:
        return None, f"Invalid base64: expected a string, got {type(document).__name__}"
    # MIME-style line wrapping
    raw = _WHITESPACE_RE.sub(b"", raw)
    if not raw:
        return None, "Invalid base64: document is empty"
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        return None, f"Invalid base64: {exc}"
    try:
        return data.decode("utf-8"), None
    except UnicodeDecodeError as exc:
        return None, f"Invalid base64: decoded content is not UTF-8 text ({exc})"


def _declares_script_inputs(text: str) -> bool:
    counts = [int(m.group(1)) for m in _INPUT_COUNT_RE.finditer(text)]
    if not counts:
        # no explicit count: require sliders as a plain definition would
        return True
    return any(c > 0 for c in counts)


def _check_literal_block(text: str) -> List[str]:
    opening = text.find(LITERAL_OPEN)
    closing = text.find(LITERAL_CLOSE, opening + len(LITERAL_OPEN) if opening >= 0 else 0)
    errors = []
    if opening < 0:
        errors.append("Script body missing opening CDATA delimiter '<![CDATA['")
    if closing < 0:
        if LITERAL_CLOSE in text:
            errors.append("Script body CDATA closing delimiter ']]>' precedes the opening delimiter")
        else:
            errors.append("Script body missing closing CDATA delimiter ']]>'")
    return errors


def _check_counts(text: str) -> List[str]:
    try:
        root = ET.fromstring(text.encode("utf-8"))
    except ET.ParseError as exc:
        return [f"XML syntax error: {exc}"]

    errors: List[str] = []

    def walk(element: ET.Element, path: str) -> None:
        for child in element:
            if child.tag == "chunk":
                name = child.get("name", "?")
                index = child.get("index")
                label = f"{path}/{name}" + (f"[{index}]" if index is not None else "")
                walk(child, label)
            elif child.tag in ("items", "chunks"):
                expected_tag = child.tag[:-1]
                actual = sum(1 for c in child if c.tag == expected_tag)
                declared = child.get("count")
                if declared is None or not declared.isdigit():
                    errors.append(f"{path}: <{child.tag}> has no valid count attribute")
                elif int(declared) != actual:
                    errors.append(
                        f"{path}: <{child.tag}> declares count {declared} but holds {actual}"
                    )
                walk(child, path)

    walk(root, root.get("name", root.tag))
    return errors


def validate(document: object, *, strict: bool = False) -> ValidationResult:
    """Check a base64 GHX document; never raises.

    All applicable checks run and each failure adds one error message.
    ``is_valid`` is true exactly when no error was recorded.
    """

    text, error = decode_base64_text(document)
    if text is None:
        logger.debug("validation stopped: %s", error)
        return ValidationResult(False, [error])

    errors: List[str] = []
    if XML_DECLARATION_MARKER not in text:
        errors.append("Missing XML declaration")
    if ARCHIVE_MARKER not in text:
        errors.append("Missing Archive root element")
    if SCRIPT_MARKER not in text:
        errors.append(f"Missing required script component: {SCRIPT_MARKER}")
    if BAKE_MARKER not in text:
        errors.append(f"Missing required bake component: {BAKE_MARKER}")
    if _declares_script_inputs(text) and SLIDER_MARKER not in text:
        errors.append(f"Missing required parameter slider component: {SLIDER_MARKER}")
    errors.extend(_check_literal_block(text))
    if strict:
        errors.extend(_check_counts(text))

    for message in errors:
        logger.debug("validation error: %s", message)
    return ValidationResult(not errors, errors)
