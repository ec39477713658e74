"""In-memory GHX archive tree and its XML serialization.

A GHX archive is an ordered tree of named chunks. Each chunk holds typed
items and nested chunks. Containers are written as ``<items count=N>``
and ``<chunks count=M>``; the counts are taken from the tree when it is
serialized, so they always match the children actually written.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TextIO, Tuple, Union
from xml.sax.saxutils import escape, quoteattr

__all__ = [
    "Item",
    "Chunk",
    "Archive",
    "string_item",
    "int_item",
    "double_item",
    "bool_item",
    "guid_item",
    "date_item",
    "version_item",
    "pointf_item",
    "rectanglef_item",
    "color_item",
    "script_item",
    "serialize",
    "encode",
]

Scalar = Union[str, int, float, bool]

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8" standalone="yes"?>'
ARCHIVE_COMMENTS = (
    "Grasshopper archive",
    "Archive generated by spinlio",
)


def format_scalar(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


@dataclass
class Item:
    """A typed record inside a chunk.

    An item carries either a text value or a list of ``(tag, value)``
    fields (points, rectangles, versions). ``literal`` items store their
    text in a CDATA block, unescaped.
    """

    name: str
    type_name: str
    type_code: int
    text: Optional[str] = None
    fields: List[Tuple[str, str]] = field(default_factory=list)
    index: Optional[int] = None
    literal: bool = False


@dataclass
class Chunk:
    name: str
    index: Optional[int] = None
    items: List[Item] = field(default_factory=list)
    chunks: List["Chunk"] = field(default_factory=list)

    def add_item(self, item: Item) -> Item:
        self.items.append(item)
        return item

    def add_chunk(self, name: str, index: Optional[int] = None) -> "Chunk":
        chunk = Chunk(name, index)
        self.chunks.append(chunk)
        return chunk

    def find_chunk(self, name: str) -> Optional["Chunk"]:
        for chunk in self.chunks:
            if chunk.name == name:
                return chunk
        return None

    def find_item(self, name: str) -> Optional[Item]:
        for item in self.items:
            if item.name == name:
                return item
        return None


class Archive(Chunk):
    """The root chunk, written as ``<Archive name="Root">``."""

    def __init__(self) -> None:
        super().__init__("Root")


# item constructors, named after the GH_IO type they produce

def string_item(name: str, value: str, index: Optional[int] = None) -> Item:
    return Item(name, "gh_string", 10, text=value, index=index)


def int_item(name: str, value: int, index: Optional[int] = None) -> Item:
    return Item(name, "gh_int32", 3, text=format_scalar(int(value)), index=index)


def double_item(name: str, value: float, index: Optional[int] = None) -> Item:
    return Item(name, "gh_double", 6, text=format_scalar(float(value)), index=index)


def bool_item(name: str, value: bool, index: Optional[int] = None) -> Item:
    return Item(name, "gh_bool", 1, text=format_scalar(bool(value)), index=index)


def guid_item(name: str, value: str, index: Optional[int] = None) -> Item:
    return Item(name, "gh_guid", 9, text=str(value), index=index)


def date_item(name: str, ticks: int) -> Item:
    return Item(name, "gh_date", 8, text=str(int(ticks)))


def version_item(name: str, major: int, minor: int, revision: int) -> Item:
    return Item(name, "gh_version", 80, fields=[
        ("Major", str(major)), ("Minor", str(minor)), ("Revision", str(revision)),
    ])


def pointf_item(name: str, x: float, y: float) -> Item:
    return Item(name, "gh_drawing_pointf", 31, fields=[
        ("X", format_scalar(float(x))), ("Y", format_scalar(float(y))),
    ])


def rectanglef_item(name: str, x: float, y: float, w: float, h: float) -> Item:
    return Item(name, "gh_drawing_rectanglef", 35, fields=[
        ("X", format_scalar(float(x))), ("Y", format_scalar(float(y))),
        ("W", format_scalar(float(w))), ("H", format_scalar(float(h))),
    ])


def color_item(name: str, argb: Sequence[int]) -> Item:
    return Item(name, "gh_drawing_color", 36, fields=[
        ("ARGB", ";".join(str(int(c)) for c in argb)),
    ])


def script_item(name: str, body: str) -> Item:
    """A string item whose value is stored verbatim in a CDATA block."""
    return Item(name, "gh_string", 10, text=body, literal=True)


# serialization

def _index_attr(index: Optional[int]) -> str:
    return "" if index is None else f" index={quoteattr(str(index))}"


def _write_item(item: Item, stream: TextIO, pad: str) -> None:
    head = (
        f"{pad}<item name={quoteattr(item.name)}{_index_attr(item.index)} "
        f"type_name={quoteattr(item.type_name)} type_code={quoteattr(str(item.type_code))}>"
    )
    if item.fields:
        print(head, file=stream)
        for tag, value in item.fields:
            print(f"{pad}  <{tag}>{escape(value)}</{tag}>", file=stream)
        print(f"{pad}</item>", file=stream)
    elif item.literal:
        print(f"{head}<![CDATA[{item.text or ''}]]></item>", file=stream)
    else:
        print(f"{head}{escape(item.text or '')}</item>", file=stream)


def _write_body(chunk: Chunk, stream: TextIO, pad: str) -> None:
    if chunk.items:
        print(f'{pad}<items count="{len(chunk.items)}">', file=stream)
        for item in chunk.items:
            _write_item(item, stream, pad + "  ")
        print(f"{pad}</items>", file=stream)
    if chunk.chunks:
        print(f'{pad}<chunks count="{len(chunk.chunks)}">', file=stream)
        for child in chunk.chunks:
            _write_chunk(child, stream, pad + "  ")
        print(f"{pad}</chunks>", file=stream)


def _write_chunk(chunk: Chunk, stream: TextIO, pad: str) -> None:
    print(f"{pad}<chunk name={quoteattr(chunk.name)}{_index_attr(chunk.index)}>", file=stream)
    _write_body(chunk, stream, pad + "  ")
    print(f"{pad}</chunk>", file=stream)


def serialize(archive: Archive) -> str:
    """Return the XML text of ``archive``."""

    stream = io.StringIO()
    print(XML_DECLARATION, file=stream)
    print(f"<Archive name={quoteattr(archive.name)}>", file=stream)
    for comment in ARCHIVE_COMMENTS:
        print(f"  <!--{comment}-->", file=stream)
    _write_body(archive, stream, "  ")
    print("</Archive>", file=stream)
    return stream.getvalue()


def encode(archive: Archive) -> str:
    """Serialize ``archive`` and return it base64-encoded."""
    return base64.b64encode(serialize(archive).encode("utf-8")).decode("ascii")
