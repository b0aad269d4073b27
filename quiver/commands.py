"""
Quiver command layer: named groups of options with a callback.

What this module provides
- Command: a named (or anonymous "main") group of Options in declaration order,
  plus an optional callback and the context handed to it.
  • add_option(option) appends to a bounded option list (False when full).
  • get_option(name) finds the first option whose short or long name matches.
  • execute() runs the callback once the parser is done with the command.
- command(...): build a Command from a decorated function, taking the help
  description from its docstring.

Callback contract
- callback(command, context) -> bool
  • True (or None) means success, any other falsy result means failure.
  • the parser never calls it when parsing failed, and calls it at most once
    per parse pass.
  • exceptions raised by the callback are not caught.

Quick start
    from quiver import Option, OptionType, command

    @command("read", Option("b", "book", "Book name", OptionType.STRING))
    def read(command, context):
        "Read a passage"
        print(command.get_option("book").get_first_string())
"""
import inspect

from .options import Option
from .storage import heap
from .utils import *


def _sanitize_metadata(metadata, /):
    """
    Internal: validate command metadata in place.

    - name: None (main command) or a non-empty string that does not start with
      a dash (such a name could never be selected from the command line).
    - description: a string (trimmed).
    - callback: None or a callable.
    - max_options: a positive integer.
    """
    if (name := metadata["name"]) is not None:
        if not isinstance(name, str):
            raise TypeError("command 'name' must be a string or None")
        elif not (name := name.strip()):
            raise ValueError("command 'name' cannot be empty")
        elif name.startswith("-"):
            raise ValueError("command 'name' cannot start with a dash")
        metadata["name"] = name

    if not isinstance(description := metadata["description"], str):
        raise TypeError("command 'description' must be a string")
    metadata["description"] = description.strip()

    if metadata["callback"] is not None and not callable(metadata["callback"]):
        raise TypeError("command 'callback' must be callable")

    if not isinstance(max_options := metadata["max_options"], int) or isinstance(max_options, bool):
        raise TypeError("command 'max_options' must be an integer")
    elif max_options < 1:
        raise ValueError("command 'max_options' must be a positive integer")


class Command:
    """
    Named group of options plus the callback that consumes them.

    Parameters
    - name: str | None
      Selector matched against the first command-line argument. None makes this
      the main command, selected when no command name is given.
    - description: str
      One-line help text.
    - callback: Callable[[Command, Any], bool] | None
      Invoked by execute() with this command and the context.
    - context: Any
      Passed through to the callback untouched.
    - max_options: int
      Capacity of the option list.
    - allocator: Allocator
      Where the option list is allocated from (defaults to the process heap).
    """

    name = mirror("name")
    description = mirror("description")
    callback = mirror("callback")
    max_options = mirror("max_options")
    closed = mirror("closed")

    def __init__(
            self,
            name=None,
            description="",
            callback=None,
            context=None,
            *,
            max_options=10,
            allocator=Unset
    ):
        metadata = {
            "name": name,
            "description": description,
            "callback": callback,
            "context": context,
            "max_options": max_options,
        }
        _sanitize_metadata(metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._options = coalesce(allocator, heap).allocate(self._max_options)
        self._closed = False

    @property
    def context(self):
        # Handed out as-is: the callback may mutate it.
        return self._context

    @property
    def main(self):
        """
        Whether this is the anonymous main command.
        """
        return self._name is None

    @property
    def options(self):
        return tuple(self._options)

    def add_option(self, option, /):
        """
        Append an option; return False when the option list is full.
        """
        if not isinstance(option, Option):
            raise TypeError("add_option() argument must be an option")
        return self._options.append(option)

    def get_option(self, name, /):
        """
        First option whose short or long name matches name (dash-stripped), or None.
        """
        for option in self._options:
            if option.equals(name):
                return option
        return None

    def execute(self):
        """
        Run the callback with this command and its context.

        Returns True when there is no callback.
        """
        if self._callback is None:
            return True
        result = self._callback(self, self._context)
        return result is None or bool(result)

    def close(self):
        """
        Close every option, then release the option list. Only the first call frees.
        """
        if self._closed:
            return
        self._closed = True
        for option in self._options:
            option.close()
        self._options.allocator.free(self._options)

    def __enter__(self):
        return self

    def __exit__(self, *unused):
        self.close()

    def __repr__(self):
        return "command(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self._name
        yield "description", self._description
        if not self._closed:
            yield "options", tuple(self._options)


def command(name=None, /, *options, description=Unset, context=None, max_options=Unset, allocator=Unset):
    """
    Return a decorator that turns a callback into a Command.

    Usage
        @command("read", Option("b", "book", type=OptionType.STRING), description="Read a passage")
        def read(command, context): ...

        @command()  # main command, description from the docstring
        def main(command, context):
            "Look up a verse"

    Parameters
    - name: str | None
      Command name (None for the main command).
    - description: str
      Help text; defaults to the callback's docstring (or "").
    - *options: Option
      Options to register, in declaration order.
    - context: Any
      Passed to the callback.
    - max_options: int
      Capacity of the option list; defaults to the larger of 10 and len(options).
    - allocator: Allocator
      Forwarded to Command.
    """
    capacity = coalesce(max_options, max(10, len(options)))

    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        self = Command(
            name,
            coalesce(description, inspect.getdoc(callback) or ""),
            callback,
            context,
            max_options=capacity,
            allocator=allocator,
        )
        for option in options:
            if not self.add_option(option):
                self.close()
                raise ValueError("@command() received more options than 'max_options' allows")
        return self

    return wrapper


__all__ = (
    "Command",
    "command",
)
