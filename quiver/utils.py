"""
Quiver utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the value, option, command and parser layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr);
    containers are handed out as tuples so callers cannot mutate internal state.

- int_from_text(text, bits, signed) / float_from_text(text, bits)
  • Exact, bounds-checked numeral parsing for fixed-width scalars. Both return
    None instead of raising, so callers can report the failure in their own words.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> int_from_text("-5", 8, True)
    -5
    >>> int_from_text("200", 8, True) is None
    True
"""
import builtins
import functools
import math
import re
import struct
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0 or "" are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                # Built-ins disallow attribute updates.
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Shallow read-only snapshot of a container (tuple, mapping proxy or frozenset).

    Anything that is not a container is returned unchanged.
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" from the instance and freezes
    container values (see _freeze), so the public view can never be used to
    mutate the backing storage.

    Example
    - Given self._options, declare options = mirror("options") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


# Decimal integer numeral: optional sign, ASCII digits only.
_INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)

# Decimal float numeral: optional sign, digits with optional fraction (or a bare
# fraction), optional exponent. No inf/nan spellings, no hex, no underscores.
_FLOAT = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)

FLOAT32_MAX = struct.unpack("<f", b"\xff\xff\x7f\x7f")[0]


def int_from_text(text, bits, signed, /):
    """
    Parse a full decimal numeral into an integer of the given width.

    Parameters
    - text: str, the raw token.
    - bits: int, the width (8, 16, 32 or 64).
    - signed: bool, whether the width is two's complement signed.

    Returns
    - int when text is a complete numeral within [min(width), max(width)].
    - None when text is empty, carries any trailing/leading garbage, or the
      value falls outside the range of the width.

    Notes
    - A leading '+' is accepted. '-0' is accepted for unsigned widths (it is 0).
    - Leading zeros are ignored; more than 20 significant digits never fit.
    """
    if not isinstance(text, str) or not _INTEGER.fullmatch(text):
        return None
    # No 64-bit value needs more than 20 significant digits.
    digits = text.lstrip("+-").lstrip("0")
    if len(digits) > 20:
        return None
    value = int(digits or "0")
    if text.startswith("-"):
        value = -value
    if signed:
        lower, upper = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        lower, upper = 0, (1 << bits) - 1
    if not lower <= value <= upper:
        return None
    return value


def float_from_text(text, bits, /):
    """
    Parse a full decimal numeral into a float of the given width.

    Returns
    - float when text is a complete numeral whose value is finite (and, for
      32 bits, within the single-precision range). 32-bit results are rounded
      to single precision.
    - None for malformed text or overflow.
    """
    if not isinstance(text, str) or not _FLOAT.fullmatch(text):
        return None
    value = float(text)
    if math.isinf(value):
        return None
    if bits == 32:
        if abs(value) > FLOAT32_MAX:
            return None
        value = struct.unpack("<f", struct.pack("<f", value))[0]
    return value


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "int_from_text",
    "float_from_text",

    # Types
    "UnsetType",

    # Constants
    "Unset",
    "FLOAT32_MAX",
)
