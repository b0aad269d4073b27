"""
Quiver faults and their rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every way a parse or a
  dispatch can fail. Codes are grouped by domain to keep logs/searches predictable.
- CommandException: base type that carries a message plus read-only options
  (code, title, hint and context) and knows how to render itself with rich.
- One subclass per failure kind (unknown command, unknown option, malformed
  value, ...), plus HelpRequested, which is not semantically an error but is
  signalled through the same channel.
- report(): central entry point to print a fault on a console.

Propagation
- The parsing core never raises these across its boundary. Faults are built,
  stored on the object that failed (option.fault, parser.fault) and printed
  with report(). Hosts that prefer exceptions may raise the stored fault.

Styling
- The palette can be overridden by the host with a __styles__ mapping in __main__.
- With colorful=False, no style is applied at all.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

console = Console()


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - routing (111xx)
      • NO_COMMAND_SELECTABLE, UNKNOWN_COMMAND, UNKNOWN_OPTION
    - values (112xx)
      • MALFORMED_VALUE, DUPLICATE_VALUE_REJECTED
    - storage (113xx)
      • CAPACITY_EXCEEDED
    - dispatch (114xx)
      • CALLBACK_FAILED
    - notices (12xxx)
      • HELP_REQUESTED
    """
    # --- routing errors (111xx) ---
    NO_COMMAND_SELECTABLE       = 11101
    UNKNOWN_COMMAND             = 11102
    UNKNOWN_OPTION              = 11111

    # --- value errors (112xx) ---
    MALFORMED_VALUE             = 11201
    DUPLICATE_VALUE_REJECTED    = 11202

    # --- storage errors (113xx) ---
    CAPACITY_EXCEEDED           = 11301

    # --- dispatch errors (114xx) ---
    CALLBACK_FAILED             = 11401

    # --- notices (12xxx) ---
    HELP_REQUESTED              = 12101


class CommandException(Exception):
    """
    base fault: a message plus read-only options.

    well-known options
    - code: FaultCode of the fault.
    - title: short lowercase title.
    - hint: one actionable sentence shown under the message (optional).
    - any context the reporter may want to keep (token, option, command, ...).
    """
    __faultcode__ = Unset
    __faulttitle__ = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = coalesce(message, "")
        self.options = MappingProxyType({
            "code": self.__faultcode__,
            "title": self.__faulttitle__,
        } | options)
        super().__init__(self.message)

    @property
    def code(self):
        return self.options["code"]

    @property
    def title(self):
        return self.options["title"]

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            "error-message": "bold #FF4DA6",  # friendly pinky message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        message = Text(self.message, styler("error-message"))
        if not self.hint:
            return message
        return Text.assemble(message, "\n", Text(" → ", styler("hint-arrow")), Text(self.hint, styler("hint")))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})

    def __repr__(self):
        return "%s(%r, code=%d)" % (type(self).__name__, self.message, self.code)


class NoCommandSelectableError(CommandException):
    __faultcode__ = FaultCode.NO_COMMAND_SELECTABLE
    __faulttitle__ = "no command selectable"


class UnknownCommandError(CommandException):
    __faultcode__ = FaultCode.UNKNOWN_COMMAND
    __faulttitle__ = "unknown command"


class UnknownOptionError(CommandException):
    __faultcode__ = FaultCode.UNKNOWN_OPTION
    __faulttitle__ = "unknown option"


class MalformedValueError(CommandException):
    __faultcode__ = FaultCode.MALFORMED_VALUE
    __faulttitle__ = "malformed value"


class DuplicateValueRejectedError(CommandException):
    __faultcode__ = FaultCode.DUPLICATE_VALUE_REJECTED
    __faulttitle__ = "duplicate value rejected"


class CapacityExceededError(CommandException):
    __faultcode__ = FaultCode.CAPACITY_EXCEEDED
    __faulttitle__ = "capacity exceeded"


class CallbackFailedError(CommandException):
    __faultcode__ = FaultCode.CALLBACK_FAILED
    __faulttitle__ = "callback failed"


class HelpRequested(CommandException):
    __faultcode__ = FaultCode.HELP_REQUESTED
    __faulttitle__ = "help requested"


def report(fault, /, *, console=Unset, colorful=True):
    """
    print a fault on a console.

    contract
    - fault must be a CommandException.
    - console defaults to the module-level stdout console (looked up at call time).
    - colorful is merged into the fault options via copy.replace before rendering.
    """
    if not isinstance(fault, CommandException):
        raise TypeError("report() argument must be a command exception")
    coalesce(console, globals()["console"]).print(copy.replace(fault, colorful=colorful))


__all__ = (
    "FaultCode",
    "CommandException",
    "NoCommandSelectableError",
    "UnknownCommandError",
    "UnknownOptionError",
    "MalformedValueError",
    "DuplicateValueRejectedError",
    "CapacityExceededError",
    "CallbackFailedError",
    "HelpRequested",
    "report",
)
