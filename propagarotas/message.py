"""Routing-information packet exchanged between routers.

Each packet carries the number of the node that sent it and that node's
routing table. The table is stored as two parallel arrays: destination node
numbers and the cost of reaching each of them.
"""

from __future__ import annotations

import copy
import operator
import struct
from dataclasses import dataclass, field
from typing import Any

__all__ = ["MessageError", "RoutingMessage", "unpack_message", "ARRAY_FIELDS"]

ARRAY_FIELDS = ("destinations", "costs")

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_SHORT_MIN = -(2**15)
_SHORT_MAX = 2**15 - 1

_LENGTH = struct.Struct("!i")
_KIND = struct.Struct("!h")
_ORIGIN = struct.Struct("!i")
_COUNT = struct.Struct("!I")


class MessageError(Exception):
    """Raised for out-of-range indices, unknown fields and malformed packets."""


def _as_int32(value: Any) -> int:
    try:
        number = operator.index(value)
    except TypeError as exc:
        raise MessageError(f"expected an integer, got {value!r}") from exc
    if not _INT_MIN <= number <= _INT_MAX:
        raise MessageError(f"integer {number} does not fit in 32 bits")
    return number


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise MessageError(f"expected a number, got {value!r}") from exc


def _index_error(size: int, index: int) -> MessageError:
    return MessageError(f"Array of size {size} indexed by {index}")


@dataclass(eq=False)
class RoutingMessage:
    """A packet carrying one node's routing table."""

    name: str | None = None
    kind: int = 0
    origin: int = 0
    destinations: list[int] = field(default_factory=list)
    costs: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not _SHORT_MIN <= self.kind <= _SHORT_MAX:
            raise MessageError(f"kind {self.kind} does not fit in 16 bits")
        self.origin = _as_int32(self.origin)
        self.destinations = [_as_int32(v) for v in self.destinations]
        self.costs = [_as_float(v) for v in self.costs]

    def _array(self, name: str) -> list:
        if name not in ARRAY_FIELDS:
            raise MessageError(f"no array field named {name!r}")
        return getattr(self, name)

    @staticmethod
    def _coerce(name: str, value: Any) -> int | float:
        return _as_int32(value) if name == "destinations" else _as_float(value)

    def dup(self) -> RoutingMessage:
        """Return an independent copy of this message."""
        return copy.deepcopy(self)

    def resize(self, field: str, size: int) -> None:
        """Truncate or zero-pad an array field to ``size`` elements."""
        array = self._array(field)
        size = operator.index(size)
        if size < 0:
            raise MessageError(f"array size cannot be negative: {size}")
        filler = 0 if field == "destinations" else 0.0
        del array[size:]
        array.extend([filler] * (size - len(array)))

    def insert(self, field: str, index: int, value: Any) -> None:
        """Insert ``value`` before position ``index`` (which may equal the size)."""
        array = self._array(field)
        if not 0 <= index <= len(array):
            raise _index_error(len(array), index)
        array.insert(index, self._coerce(field, value))

    def append(self, field: str, value: Any) -> None:
        """Add ``value`` at the end of an array field."""
        array = self._array(field)
        self.insert(field, len(array), value)

    def erase(self, field: str, index: int) -> None:
        """Remove the element at ``index`` from an array field."""
        array = self._array(field)
        if not 0 <= index < len(array):
            raise _index_error(len(array), index)
        del array[index]

    def table(self) -> dict[int, float]:
        """Rebuild the sender's routing table as a destination-to-cost mapping.

        Later duplicates of a destination override earlier ones. Every
        destination needs a matching cost.
        """
        if len(self.costs) < len(self.destinations):
            raise _index_error(len(self.costs), len(self.costs))
        return dict(zip(self.destinations, self.costs))

    def pack(self) -> bytes:
        """Serialise the message to bytes; see :func:`unpack_message`."""
        parts = []
        if self.name is None:
            parts.append(_LENGTH.pack(-1))
        else:
            encoded = self.name.encode("utf-8")
            parts.append(_LENGTH.pack(len(encoded)))
            parts.append(encoded)
        parts.append(_KIND.pack(self.kind))
        parts.append(_ORIGIN.pack(_as_int32(self.origin)))
        destinations = [_as_int32(v) for v in self.destinations]
        parts.append(_COUNT.pack(len(destinations)))
        parts.append(struct.pack(f"!{len(destinations)}i", *destinations))
        costs = [_as_float(v) for v in self.costs]
        parts.append(_COUNT.pack(len(costs)))
        parts.append(struct.pack(f"!{len(costs)}d", *costs))
        return b"".join(parts)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)
        self._offset = 0

    def take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._view):
            raise MessageError("packet is truncated")
        chunk = self._view[self._offset:end].tobytes()
        self._offset = end
        return chunk

    def read(self, layout: struct.Struct) -> Any:
        return layout.unpack(self.take(layout.size))[0]

    def read_array(self, code: str, count: int) -> list:
        layout = struct.Struct(f"!{count}{code}")
        return list(layout.unpack(self.take(layout.size)))

    def finish(self) -> None:
        if self._offset != len(self._view):
            raise MessageError("trailing bytes after packet")


def unpack_message(data: bytes) -> RoutingMessage:
    """Rebuild a message from the bytes produced by :meth:`RoutingMessage.pack`."""
    reader = _Reader(bytes(data))
    length = reader.read(_LENGTH)
    if length < -1:
        raise MessageError(f"invalid name length {length}")
    if length == -1:
        name = None
    else:
        try:
            name = reader.take(length).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MessageError("name is not valid UTF-8") from exc
    kind = reader.read(_KIND)
    origin = reader.read(_ORIGIN)
    destinations = reader.read_array("i", reader.read(_COUNT))
    costs = reader.read_array("d", reader.read(_COUNT))
    reader.finish()
    return RoutingMessage(
        name=name, kind=kind, origin=origin, destinations=destinations, costs=costs
    )