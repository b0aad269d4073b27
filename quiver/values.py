"""
Quiver option values: a tagged scalar and its type-directed text parser.

Overview
- OptionType: the closed set of value types an option can declare
  (BOOL, STRING, eight fixed-width integers, two float widths).
- OptionValue: an immutable (type, payload) pair. The payload always matches
  its tag; construction rejects any payload whose runtime shape disagrees.
- parse_value(type, text): turn a raw command-line token into an OptionValue
  of the requested type, or None when the token is not acceptable.

Parsing rules
- BOOL: always succeeds and yields True (presence is the value).
- STRING: always succeeds and keeps the raw text as-is.
- integers: a full decimal numeral within [min, max] of the width.
- floats: a full decimal numeral that stays finite; FLOAT32 additionally stays
  within the single-precision range.

Quick example:
    >>> parse_value(OptionType.INT8, "-5")
    option-value(type=<OptionType.INT8: 'int8'>, payload=-5)
    >>> parse_value(OptionType.INT8, "200") is None
    True
"""
import math
import struct
from enum import Enum

from .utils import *


class OptionType(Enum):
    """
    Declared type of an option and of every value it stores.
    """
    BOOL = "bool"
    STRING = "string"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def integral(self):
        return self in _WIDTHS and self not in (OptionType.FLOAT32, OptionType.FLOAT64)

    @property
    def floating(self):
        return self in (OptionType.FLOAT32, OptionType.FLOAT64)

    @property
    def takes_value(self):
        """
        Whether an option of this type consumes the following token as its value.
        """
        return self is not OptionType.BOOL

    @property
    def bits(self):
        return _WIDTHS[self][0] if self in _WIDTHS else None

    @property
    def signed(self):
        return _WIDTHS[self][1] if self in _WIDTHS else None

    @property
    def bounds(self):
        """
        Inclusive (min, max) for integer types, None otherwise.
        """
        if not self.integral:
            return None
        bits, signed = _WIDTHS[self]
        if signed:
            return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        return 0, (1 << bits) - 1


_WIDTHS = {
    OptionType.INT8: (8, True),
    OptionType.INT16: (16, True),
    OptionType.INT32: (32, True),
    OptionType.INT64: (64, True),
    OptionType.UINT8: (8, False),
    OptionType.UINT16: (16, False),
    OptionType.UINT32: (32, False),
    OptionType.UINT64: (64, False),
    OptionType.FLOAT32: (32, True),
    OptionType.FLOAT64: (64, True),
}


def _check_payload(type, payload):
    """
    Reject a payload whose runtime shape disagrees with its tag.

    Returns the normalized payload (floats as float, FLOAT32 rounded to single precision).
    """
    match type:
        case OptionType.BOOL:
            if not isinstance(payload, bool):
                raise TypeError("bool option value must be a bool")
            return payload
        case OptionType.STRING:
            if not isinstance(payload, str):
                raise TypeError("string option value must be a string")
            return payload
        case OptionType() if type.integral:
            if not isinstance(payload, int) or isinstance(payload, bool):
                raise TypeError(f"{type.value} option value must be an integer")
            lower, upper = type.bounds
            if not lower <= payload <= upper:
                raise ValueError(f"{type.value} option value must be within [{lower}, {upper}]")
            return payload
        case OptionType.FLOAT32 | OptionType.FLOAT64:
            if not isinstance(payload, int | float) or isinstance(payload, bool):
                raise TypeError(f"{type.value} option value must be a number")
            payload = float(payload)
            if not math.isfinite(payload):
                raise ValueError(f"{type.value} option value must be finite")
            if type is OptionType.FLOAT32:
                if abs(payload) > FLOAT32_MAX:
                    raise ValueError(f"{type.value} option value is out of range")
                payload = struct.unpack("<f", struct.pack("<f", payload))[0]
            return payload
        case _:
            raise TypeError("option value type must be an option-type")


class OptionValue:
    """
    Immutable tagged scalar.

    Build instances through the create_* factories; the constructor is shared
    by all of them and validates that the payload matches the tag.
    """

    __slots__ = ("_type", "_payload")

    type = mirror("type")
    payload = mirror("payload")

    def __init__(self, type, payload, /):
        object.__setattr__(self, "_type", type)
        object.__setattr__(self, "_payload", _check_payload(type, payload))

    def __setattr__(self, name, value, /):
        raise AttributeError("option values are immutable")

    def __delattr__(self, name, /):
        raise AttributeError("option values are immutable")

    @classmethod
    def create_bool(cls, value, /):
        return cls(OptionType.BOOL, value)

    @classmethod
    def create_string(cls, value, /):
        return cls(OptionType.STRING, value)

    @classmethod
    def create_integer(cls, type, value, /):
        """
        Integer value tagged with exactly the given width.
        """
        if not isinstance(type, OptionType) or not type.integral:
            raise TypeError("create_integer() first argument must be an integer option-type")
        return cls(type, value)

    @classmethod
    def create_int8(cls, value, /):
        return cls(OptionType.INT8, value)

    @classmethod
    def create_int16(cls, value, /):
        return cls(OptionType.INT16, value)

    @classmethod
    def create_int32(cls, value, /):
        return cls(OptionType.INT32, value)

    @classmethod
    def create_int64(cls, value, /):
        return cls(OptionType.INT64, value)

    @classmethod
    def create_uint8(cls, value, /):
        return cls(OptionType.UINT8, value)

    @classmethod
    def create_uint16(cls, value, /):
        return cls(OptionType.UINT16, value)

    @classmethod
    def create_uint32(cls, value, /):
        return cls(OptionType.UINT32, value)

    @classmethod
    def create_uint64(cls, value, /):
        return cls(OptionType.UINT64, value)

    @classmethod
    def create_float32(cls, value, /):
        return cls(OptionType.FLOAT32, value)

    @classmethod
    def create_float64(cls, value, /):
        return cls(OptionType.FLOAT64, value)

    def __eq__(self, other, /):
        if not isinstance(other, OptionValue):
            return NotImplemented
        return self._type is other._type and self._payload == other._payload

    def __hash__(self):
        return hash((self._type, self._payload))

    def __repr__(self):
        return "option-value(type=%r, payload=%r)" % (self._type, self._payload)

    def __rich_repr__(self):
        yield "type", self._type.value
        yield "payload", self._payload


def parse_value(type, text, /):
    """
    Parse a raw token into an OptionValue of the given type.

    Returns None when the text is not acceptable for the type; never raises for
    bad user input.
    """
    if not isinstance(text, str):
        raise TypeError("parse_value() second argument must be a string")
    match type:
        case OptionType.BOOL:
            return OptionValue.create_bool(True)
        case OptionType.STRING:
            return OptionValue.create_string(text)
        case OptionType.FLOAT32 | OptionType.FLOAT64:
            number = float_from_text(text, type.bits)
            return None if number is None else OptionValue(type, number)
        case OptionType() if type.integral:
            number = int_from_text(text, type.bits, type.signed)
            return None if number is None else OptionValue.create_integer(type, number)
        case _:
            raise TypeError("parse_value() first argument must be an option-type")


__all__ = (
    "OptionType",
    "OptionValue",
    "parse_value",
)
