"""Decoded mesh representation handed to the mesh converter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, Sequence, Tuple, TypeVar, Union, overload

__all__ = ["Vec3", "Face", "IndexedAccessor", "DecodedMesh", "DecodedGeometry"]

Vec3 = Tuple[float, float, float]
Face = Tuple[int, ...]

T = TypeVar("T")


class IndexedAccessor(Sequence[T]):
    """Read-only ``count``/``get(i)`` view over a decoded object's list.

    The getter is called lazily, so the view can be backed directly by a
    native geometry object.
    """

    def __init__(self, count: int, getter: Callable[[int], T]):
        self._count = int(count)
        self._getter = getter

    @classmethod
    def of(cls, items: Sequence[T]) -> "IndexedAccessor[T]":
        items = list(items)
        return cls(len(items), items.__getitem__)

    @property
    def count(self) -> int:
        return self._count

    def get(self, index: int) -> T:
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError(f"index {index} out of range for {self._count} entries")
        return self._getter(index)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: Union[int, slice]):
        if isinstance(index, slice):
            return [self.get(i) for i in range(*index.indices(self._count))]
        return self.get(index)

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[T]:
        for i in range(self._count):
            yield self._getter(i)

    def __repr__(self) -> str:
        return f"IndexedAccessor(count={self._count})"


@dataclass(frozen=True)
class DecodedGeometry:
    """What a geometry codec returns: a kind plus mesh accessors if any."""

    kind: str
    vertices: IndexedAccessor[Vec3] = field(default_factory=lambda: IndexedAccessor.of([]))
    faces: IndexedAccessor[Face] = field(default_factory=lambda: IndexedAccessor.of([]))
    native: object = None


@dataclass(frozen=True)
class DecodedMesh:
    """Indexed vertex positions and faces of one decoded mesh."""

    vertices: IndexedAccessor[Vec3]
    faces: IndexedAccessor[Face]

    @classmethod
    def from_lists(cls, vertices: Sequence[Sequence[float]], faces: Sequence[Sequence[int]]) -> "DecodedMesh":
        verts = [(float(v[0]), float(v[1]), float(v[2])) for v in vertices]
        fcs = [tuple(int(i) for i in f) for f in faces]
        return cls(IndexedAccessor.of(verts), IndexedAccessor.of(fcs))

    @property
    def is_empty(self) -> bool:
        return self.faces.count == 0
