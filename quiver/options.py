r"""
Quiver options: named, typed definitions that collect parsed values.

Overview
- Option: a short and/or long name, a description, a declared OptionType, a
  single/multiple value policy and a bounded list of accepted OptionValues.
- strip_dashes(text): the "--name"/"-n" → bare name normalization used for
  every name comparison.

Value-list policy
- Every stored value carries the option's declared type.
- A single-value option never holds more than one value; a second add_value()
  is rejected without parsing the text.
- BOOL options always end up with exactly one True value: presence is the value.
- The list has a capacity fixed at construction (max_values); appending past it
  fails instead of growing.

Failures
- add_value() returns False on failure and leaves the reason in option.fault.
  Only malformed values are printed by add_value() itself:
      Failed to parse value: <text> for option: <long name>

Lifecycle
- Created with empty values at registration time, filled by the parser during a
  single parse pass, released with close() (or by leaving a with-block). The
  owning Command closes its options on teardown.

Quick example:
    >>> chapter = Option("c", "chapter", "Chapter number", OptionType.INT32)
    >>> chapter.add_value("3")
    True
    >>> chapter.get_first_int32()
    3
"""
from .faults import *
from .storage import heap
from .utils import *
from .values import OptionType, OptionValue, parse_value


def strip_dashes(text, /):
    """
    Remove a leading "--", or else a single leading "-".

    Examples
    - strip_dashes("--book") -> "book"
    - strip_dashes("-b")     -> "b"
    - strip_dashes("book")   -> "book"
    """
    if not isinstance(text, str):
        raise TypeError("strip_dashes() argument must be a string")
    if text.startswith("--"):
        return text[2:]
    if text.startswith("-"):
        return text[1:]
    return text


def _sanitize_metadata(metadata, /):
    """
    Internal: validate and normalize option metadata in place.

    - short_name/long_name: None or a string; stored dash-stripped; at least one
      must be present and neither may be empty once stripped.
    - description: a string (surrounding whitespace trimmed).
    - type: an OptionType.
    - max_values: a positive integer.
    """
    present = 0
    for key in ("short_name", "long_name"):
        if (name := metadata[key]) is None:
            continue
        if not isinstance(name, str):
            raise TypeError(f"option '{key}' must be a string or None")
        elif not (name := strip_dashes(name.strip())):
            raise ValueError(f"option '{key}' cannot be empty")
        metadata[key] = name
        present += 1
    if not present:
        raise TypeError("option must specify at least one name")

    if not isinstance(description := metadata["description"], str):
        raise TypeError("option 'description' must be a string")
    metadata["description"] = description.strip()

    if not isinstance(metadata["type"], OptionType):
        raise TypeError("option 'type' must be an option-type")

    if not isinstance(max_values := metadata["max_values"], int) or isinstance(max_values, bool):
        raise TypeError("option 'max_values' must be an integer")
    elif max_values < 1:
        raise ValueError("option 'max_values' must be a positive integer")


class Option:
    """
    Named, typed option definition plus the values accepted for it.

    Parameters
    - short_name: str | None
      Short alias, with or without its dash ("b" or "-b").
    - long_name: str | None
      Long alias, with or without its dashes ("book" or "--book").
    - description: str
      One-line help text.
    - type: OptionType
      Declared type; drives parsing and the typed accessors. BOOL options are
      flags and never consume a following token.
    - allow_multiple: bool
      Whether more than one value may be collected.
    - max_values: int
      Capacity of the value list.
    - allocator: Allocator
      Where the value list is allocated from (defaults to the process heap).
    """

    short_name = mirror("short_name")
    long_name = mirror("long_name")
    description = mirror("description")
    type = mirror("type")
    allow_multiple = mirror("allow_multiple")
    max_values = mirror("max_values")
    fault = mirror("fault")
    closed = mirror("closed")

    def __init__(
            self,
            short_name=None,
            long_name=None,
            description="",
            type=OptionType.BOOL,
            allow_multiple=False,
            max_values=10,
            *,
            allocator=Unset
    ):
        metadata = {
            "short_name": short_name,
            "long_name": long_name,
            "description": description,
            "type": type,
            "allow_multiple": bool(allow_multiple),
            "max_values": max_values,
        }
        _sanitize_metadata(metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._values = coalesce(allocator, heap).allocate(self._max_values)
        self._fault = None
        self._closed = False

    @property
    def label(self):
        """
        Name used in diagnostics: the long name, or the short one when absent.
        """
        return self._long_name if self._long_name is not None else self._short_name

    @property
    def usage(self):
        """
        Help form of the names, e.g. "-b, --book <value>".
        """
        names = []
        if self._short_name is not None:
            names.append("-" + self._short_name)
        if self._long_name is not None:
            names.append("--" + self._long_name)
        usage = ", ".join(names)
        if self._type.takes_value:
            usage += " <value>"
        return usage

    @property
    def values(self):
        return tuple(self._values)

    def equals(self, name, /):
        """
        Whether name (dash-stripped) is this option's short or long name.

        Absent names never match.
        """
        if not isinstance(name, str):
            return False
        name = strip_dashes(name)
        return name in (self._short_name, self._long_name)

    @property
    def takes_value(self):
        """
        Whether the option consumes the following token (every type but BOOL).
        """
        return self._type.takes_value

    def add_value(self, raw, /, *, console=Unset, colorful=True):
        """
        Parse raw according to the declared type and append it.

        Returns
        - True when the value was stored.
        - False when the option already holds its single value (silently), when
          raw is malformed for the type (a diagnostic is printed), or when the
          value list is at capacity. option.fault tells which.
        """
        if not isinstance(raw, str):
            raise TypeError("add_value() argument must be a string")
        self._fault = None

        if self._type is OptionType.BOOL:
            return self.set_bool_value(True)

        if not self._allow_multiple and len(self._values) > 0:
            self._fault = DuplicateValueRejectedError(
                "option %r accepts a single value" % self.label,
                option=self,
                token=raw,
                hint="pass %s only once" % self.usage,
            )
            return False

        value = parse_value(self._type, raw)
        if value is None:
            if self._type.integral:
                hint = "expected an integer (%s) within [%d, %d]" % ((self._type.value,) + self._type.bounds)
            else:
                hint = "expected a decimal number (%s)" % self._type.value
            self._fault = MalformedValueError(
                "Failed to parse value: %s for option: %s" % (raw, self.label),
                option=self,
                token=raw,
                hint=hint,
            )
            report(self._fault, console=console, colorful=colorful)
            return False

        return self._append(value, raw)

    def _append(self, value, raw):
        if not self._values.append(value):
            self._fault = CapacityExceededError(
                "option %r cannot hold more than %d values" % (self.label, self._max_values),
                option=self,
                token=raw,
                hint="remove some of the %s values" % self.usage,
            )
            return False
        return True

    def set_bool_value(self, value, /):
        """
        Force a flag's state: clear the values and store a single bool.

        Only meaningful for BOOL options; returns False (and changes nothing)
        for any other type.
        """
        if self._type is not OptionType.BOOL:
            return False
        value = OptionValue.create_bool(value)
        self._values.clear()
        return self._append(value, str(value.payload).lower())

    def get_first_value(self):
        """
        First stored value (any type), or None.
        """
        if not self._values:
            return None
        return self._values[0]

    def get_all_values(self):
        return tuple(self._values)

    def get_first(self, type, /):
        """
        Payload of the first value if it is tagged with type, else None.
        """
        value = self.get_first_value()
        if value is None or value.type is not type:
            return None
        return value.payload

    def get_first_bool(self):
        return self.get_first(OptionType.BOOL)

    def get_first_string(self):
        return self.get_first(OptionType.STRING)

    def get_first_int8(self):
        return self.get_first(OptionType.INT8)

    def get_first_int16(self):
        return self.get_first(OptionType.INT16)

    def get_first_int32(self):
        return self.get_first(OptionType.INT32)

    def get_first_int64(self):
        return self.get_first(OptionType.INT64)

    def get_first_uint8(self):
        return self.get_first(OptionType.UINT8)

    def get_first_uint16(self):
        return self.get_first(OptionType.UINT16)

    def get_first_uint32(self):
        return self.get_first(OptionType.UINT32)

    def get_first_uint64(self):
        return self.get_first(OptionType.UINT64)

    def get_first_float32(self):
        return self.get_first(OptionType.FLOAT32)

    def get_first_float64(self):
        return self.get_first(OptionType.FLOAT64)

    def get_all_strings(self):
        return tuple(value.payload for value in self._values if value.type is OptionType.STRING)

    def close(self):
        """
        Release the value list. Safe to call more than once; only the first call frees.
        """
        if self._closed:
            return
        self._closed = True
        self._values.allocator.free(self._values)

    def __enter__(self):
        return self

    def __exit__(self, *unused):
        self.close()

    def __repr__(self):
        return "option(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "short_name", self._short_name
        yield "long_name", self._long_name
        yield "type", self._type.value
        yield "allow_multiple", self._allow_multiple
        if not self._closed:
            yield "values", tuple(value.payload for value in self._values)


__all__ = (
    "Option",
    "strip_dashes",
)
