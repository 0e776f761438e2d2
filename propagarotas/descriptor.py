"""Reflective access to the fields of a :class:`RoutingMessage`.

The descriptor lists the message's fields by index, reports their types and
flags, and reads or writes individual values, either as Python values or as
strings.
"""

from __future__ import annotations

import enum
import operator
from dataclasses import dataclass
from typing import Any

from .message import MessageError, RoutingMessage

__all__ = ["FieldFlag", "MessageDescriptor"]

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_CLASS_NAME = "RoutingMessage"


class FieldFlag(enum.Flag):
    """Properties of a message field."""

    NONE = 0
    ISARRAY = enum.auto()
    ISEDITABLE = enum.auto()
    ISRESIZABLE = enum.auto()


@dataclass(frozen=True)
class _Field:
    name: str
    type_name: str
    flags: FieldFlag

    @property
    def is_array(self) -> bool:
        return FieldFlag.ISARRAY in self.flags


_FIELDS = (
    _Field("origin", "int", FieldFlag.ISEDITABLE),
    _Field(
        "destinations",
        "int",
        FieldFlag.ISARRAY | FieldFlag.ISEDITABLE | FieldFlag.ISRESIZABLE,
    ),
    _Field(
        "costs",
        "double",
        FieldFlag.ISARRAY | FieldFlag.ISEDITABLE | FieldFlag.ISRESIZABLE,
    ),
)


def _checked_int(value: Any) -> int:
    if isinstance(value, bool):
        raise MessageError(f"expected an integer, got {value!r}")
    try:
        number = operator.index(value)
    except TypeError as exc:
        raise MessageError(f"expected an integer, got {value!r}") from exc
    if not _INT_MIN <= number <= _INT_MAX:
        raise MessageError(f"integer {number} does not fit in 32 bits")
    return number


def _checked_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MessageError(f"expected a number, got {value!r}")
    return float(value)


def _parse_int(text: str) -> int:
    try:
        return _checked_int(int(text.strip()))
    except ValueError as exc:
        raise MessageError(f"cannot convert {text!r} to an integer") from exc


def _parse_float(text: str) -> float:
    try:
        return float(text.strip())
    except ValueError as exc:
        raise MessageError(f"cannot convert {text!r} to a number") from exc


def _check_index(array: list, index: int) -> int:
    if not 0 <= index < len(array):
        raise MessageError(f"Array of size {len(array)} indexed by {index}")
    return index


class MessageDescriptor:
    """Describes the fields of :class:`RoutingMessage` by index."""

    def _field(self, field: int) -> _Field | None:
        if 0 <= field < len(_FIELDS):
            return _FIELDS[field]
        return None

    def supports(self, obj: Any) -> bool:
        """Whether ``obj`` is a message this descriptor can describe."""
        return isinstance(obj, RoutingMessage)

    def field_count(self) -> int:
        """Number of described fields."""
        return len(_FIELDS)

    def field_name(self, field: int) -> str | None:
        """Name of the field at ``field``, or None if out of range."""
        entry = self._field(field)
        return entry.name if entry else None

    def find_field(self, name: str) -> int | None:
        """Index of the field called ``name``, or None if there is none."""
        return next(
            (index for index, entry in enumerate(_FIELDS) if entry.name == name),
            None,
        )

    def field_flags(self, field: int) -> FieldFlag:
        """Flags of the field at ``field``; no flags if out of range."""
        entry = self._field(field)
        return entry.flags if entry else FieldFlag.NONE

    def field_type(self, field: int) -> str | None:
        """Element type name of the field, or None if out of range."""
        entry = self._field(field)
        return entry.type_name if entry else None

    def array_size(self, message: RoutingMessage, field: int) -> int:
        """Length of an array field; 0 for scalar or unknown fields."""
        entry = self._field(field)
        if entry is None or not entry.is_array:
            return 0
        return len(getattr(message, entry.name))

    def set_array_size(self, message: RoutingMessage, field: int, size: int) -> None:
        """Resize an array field."""
        entry = self._field(field)
        if entry is None or not entry.is_array:
            raise MessageError(
                f"Cannot set array size of field {field} of class '{_CLASS_NAME}'"
            )
        message.resize(entry.name, size)

    def get_value_as_string(
        self, message: RoutingMessage, field: int, index: int = 0
    ) -> str:
        """Value of a field (element ``index`` for arrays) as text."""
        entry = self._field(field)
        if entry is None:
            return ""
        return str(self.get_value(message, field, index))

    def set_value_from_string(
        self, message: RoutingMessage, field: int, index: int, value: str
    ) -> None:
        """Parse ``value`` and store it in a field."""
        entry = self._field(field)
        if entry is None:
            raise MessageError(f"Cannot set field {field} of class '{_CLASS_NAME}'")
        parsed = _parse_int(value) if entry.type_name == "int" else _parse_float(value)
        self._store(message, entry, index, parsed)

    def get_value(self, message: RoutingMessage, field: int, index: int = 0) -> Any:
        """Value of a field (element ``index`` for arrays)."""
        entry = self._field(field)
        if entry is None:
            raise MessageError(
                f"Cannot return field {field} of class '{_CLASS_NAME}' as value"
                " -- field index out of range?"
            )
        current = getattr(message, entry.name)
        if entry.is_array:
            return current[_check_index(current, index)]
        return current

    def set_value(
        self, message: RoutingMessage, field: int, index: int, value: Any
    ) -> None:
        """Store ``value`` in a field, checking its type and range."""
        entry = self._field(field)
        if entry is None:
            raise MessageError(f"Cannot set field {field} of class '{_CLASS_NAME}'")
        checked = (
            _checked_int(value) if entry.type_name == "int" else _checked_float(value)
        )
        self._store(message, entry, index, checked)

    @staticmethod
    def _store(message: RoutingMessage, entry: _Field, index: int, value: Any) -> None:
        if entry.is_array:
            array = getattr(message, entry.name)
            array[_check_index(array, index)] = value
        else:
            setattr(message, entry.name, value)