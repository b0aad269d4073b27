"""
Quiver parser: pick a command, scan its options, render help, dispatch.

Invocation grammar
    program [options...]                  → main command (if registered)
    program <command-name> [options...]   → named command
    options: -<short> or --<long>, optionally followed by one value token
             (never for BOOL options)
    -h / --help anywhere in the options   → help for the selected command

Algorithm (one synchronous pass over argv; argv[0] is the program name)
- resolution
  • fewer than two tokens, or argv[1] starts with '-': the main command is the
    target and scanning starts at argv[1]. Without a main command the top-level
    help is printed and parsing fails.
  • otherwise argv[1] must equal a registered command name exactly (first
    match wins); scanning starts at argv[2]. An unknown name prints
    "Unknown command: <name>" plus the top-level help and fails. There is no
    fallback to the main command.
- scanning (fail-fast)
  • "-h"/"--help": print the command help and stop, signalling failure.
  • a dash-prefixed token names an option of the target (dash-stripped match);
    an unknown one prints "Unknown option: <token>" and fails.
  • a value-taking option consumes the next token when there is one and it does
    not start with '-'. A dash-prefixed token is never consumed as a value, not
    even a negative number: it is always read as the next option.
  • a BOOL option is set to True by its presence; a value-taking option without
    an eligible next token stays valueless.
  • tokens that are neither options nor consumed values are ignored.
- dispatch
  • parse_and_execute() runs the selected command's callback after a successful
    parse and maps the outcome to an exit code (0 success, 1 failure).

Output
- Help and diagnostics go to the parser's rich console (stdout by default).
- Every failure is kept in parser.fault; the core never raises them.
"""
import difflib
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from . import faults
from .commands import Command
from .faults import *
from .storage import heap
from .utils import *

HELP_TOKENS = ("--help", "-h")


def _is_option(token):
    return token.startswith("-")


class Parser:
    """
    Command registry plus the parse/dispatch state machine.

    Parameters
    - program_name: str
      Shown in usage lines and hints.
    - max_commands: int
      Capacity of the named-command list.
    - allocator: Allocator
      Where the command list is allocated from (defaults to the process heap).
    - console: rich.console.Console
      Destination for help and diagnostics (defaults to quiver.faults.console).
    - colorful: bool
      Apply the style palette to help and diagnostics.
    - fancy: bool
      Wrap help output in a panel.

    Ownership
    - Registered commands (and their options) belong to the parser from then on;
      close() tears them all down exactly once.
    - Commands are bound by reference: the objects the host registered are the
      ones that receive values.
    """

    program_name = mirror("program_name")
    main_command = mirror("main_command")
    current_command = mirror("current_command")
    fault = mirror("fault")
    colorful = mirror("colorful")
    fancy = mirror("fancy")
    closed = mirror("closed")

    def __init__(
            self,
            program_name,
            /,
            *,
            max_commands=20,
            allocator=Unset,
            console=Unset,
            colorful=True,
            fancy=False
    ):
        if not isinstance(program_name, str):
            raise TypeError("parser 'program_name' must be a string")
        elif not (program_name := program_name.strip()):
            raise ValueError("parser 'program_name' cannot be empty")
        if not isinstance(max_commands, int) or isinstance(max_commands, bool):
            raise TypeError("parser 'max_commands' must be an integer")
        elif max_commands < 1:
            raise ValueError("parser 'max_commands' must be a positive integer")

        self._program_name = program_name
        self._commands = coalesce(allocator, heap).allocate(max_commands)
        self._main_command = None
        self._current_command = None
        self._fault = None
        self._console = console
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._closed = False

    @property
    def console(self):
        # Resolved lazily so the module console can be swapped (e.g. in tests).
        return coalesce(self._console, faults.console)

    @property
    def commands(self):
        return tuple(self._commands)

    def add_command(self, command, /):
        """
        Register a named command; return False when the command list is full.
        """
        if not isinstance(command, Command):
            raise TypeError("add_command() argument must be a command")
        if command.main:
            raise TypeError("add_command() argument must be a named command; use set_main_command()")
        return self._commands.append(command)

    def set_main_command(self, command, /):
        """
        Register the command selected when no command name is given.

        A previous, different main command is closed: the parser owns it.
        """
        if not isinstance(command, Command):
            raise TypeError("set_main_command() argument must be a command")
        if not command.main:
            raise TypeError("set_main_command() argument must be a main command; use add_command()")
        if self._main_command is not None and self._main_command is not command:
            self._main_command.close()
        self._main_command = command

    def find_command(self, name, /):
        """
        First registered command whose name equals name exactly, or None.
        """
        for command in self._commands:
            if command.name == name:
                return command
        return None

    def _report(self, fault):
        self._fault = fault
        report(fault, console=self.console, colorful=self._colorful)

    def _suggest(self, input, candidates, kind):
        suggestions = difflib.get_close_matches(input, candidates, 1)
        if suggestions:
            return "did you mean %r? run '%s --help' to see all %s" % (suggestions[0], self._program_name, kind)
        return "run '%s --help' to see all %s" % (self._program_name, kind)

    def _tokens(self, argv):
        if argv is Unset:
            return list(sys.argv)
        if isinstance(argv, str):
            return [self._program_name, *shlex.split(argv)]
        if not isinstance(argv, Iterable):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens

    def parse(self, argv=Unset, /):
        """
        Resolve the target command and fill its options from argv.

        Parameters
        - argv:
          • Unset: sys.argv.
          • str: split with shlex.split; program_name becomes token 0.
          • Iterable[str]: used as-is; token 0 is the program name.

        Returns
        - True when a command was selected and every option token was accepted.
        - False otherwise (diagnostic or help already printed; see parser.fault).
        """
        tokens = self._tokens(argv)
        self._current_command = None
        self._fault = None

        if len(tokens) < 2 or _is_option(tokens[1]):
            if self._main_command is None:
                self._fault = NoCommandSelectableError(
                    "no main command to run and no command given",
                    hint="run '%s <command>'" % self._program_name,
                )
                self.print_help()
                return False
            target, index = self._main_command, 1
        else:
            target = self.find_command(input := tokens[1])
            if target is None:
                self._report(UnknownCommandError(
                    "Unknown command: %s" % input,
                    token=input,
                    hint=self._suggest(input, [command.name for command in self._commands], "commands"),
                ))
                self.print_help()
                return False
            index = 2

        self._current_command = target

        while index < len(tokens):
            token = tokens[index]

            if token in HELP_TOKENS:
                self._fault = HelpRequested("help requested", token=token, command=target)
                self.print_command_help(target)
                return False

            if not _is_option(token):
                index += 1
                continue

            option = target.get_option(token)
            if option is None:
                names = []
                for candidate in target.options:
                    if candidate.short_name is not None:
                        names.append("-" + candidate.short_name)
                    if candidate.long_name is not None:
                        names.append("--" + candidate.long_name)
                self._report(UnknownOptionError(
                    "Unknown option: %s" % token,
                    token=token,
                    command=target,
                    hint=self._suggest(token, names, "options"),
                ))
                return False

            if option.takes_value and index + 1 < len(tokens) and not _is_option(tokens[index + 1]):
                if not option.add_value(tokens[index + 1], console=self.console, colorful=self._colorful):
                    # Malformed values were already printed by add_value().
                    if isinstance(option.fault, MalformedValueError):
                        self._fault = option.fault
                    else:
                        self._report(option.fault)
                    return False
                index += 2
                continue

            if not option.takes_value and not option.set_bool_value(True):
                self._report(option.fault)
                return False
            index += 1

        return True

    def parse_and_execute(self, argv=Unset, /):
        """
        parse() then run the selected command's callback.

        Returns
        - 0 when parsing succeeded and the callback succeeded (or there is none).
        - 1 otherwise, including help requests.
        """
        if not self.parse(argv):
            return 1
        if not self._current_command.execute():
            # Callbacks report their own failures; nothing is printed here.
            self._fault = CallbackFailedError(
                "command callback failed",
                command=self._current_command,
            )
            return 1
        return 0

    def _styles(self):
        return defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "group-label": "bold #FFFFFF",
            "command-name": "bold #36C5F0",
            "option-name": "bold #00E6FF",
            "flag-name": "bold #22C55E",
            "metavar": "bold #FFD600",
            "argument-description": "#9CA3AF",
            "epilog-section": "#737373",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

    def _render(self, renders, title):
        styles = self._styles()
        renderable = Group(*renders)
        if self._fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", title.upper(), " ]", style=styles["panel-title"] if self._colorful else ""),
                title_align="left",
            )
        self.console.print(renderable)

    def print_help(self):
        """
        Render the top-level help: usage forms, main description, command list.
        """
        styles = self._styles()

        def styler(style):
            return styles[style] if self._colorful else ""

        program = Text(self._program_name, styler("program-name"))
        forms = []
        if self._main_command is not None:
            forms.append(Text.assemble(program, " ", ("[options]", styler("usage-section"))))
        if self._commands or self._main_command is None:
            forms.append(Text.assemble(program, " ", ("<command> [options]", styler("usage-section"))))

        usage = Text.assemble(("Usage", styler("usage-label")), ": ", forms[0])
        for form in forms[1:]:
            usage.append("\n").append(" " * len("Usage: ")).append(form)
        renders = [usage]

        if self._main_command is not None and self._main_command.description:
            renders.append(Text(""))
            renders.append(Text(self._main_command.description, styler("description-section")))

        if self._commands:
            width = max(15, *(len(command.name) for command in self._commands))
            listing = Text.assemble(("Commands", styler("group-label")), ":")
            for command in self._commands:
                listing.append("\n  ")
                listing.append(command.name.ljust(width), styler("command-name"))
                listing.append("  ")
                listing.append(command.description, styler("argument-description"))
            renders.append(Text(""))
            renders.append(listing)

        hints = []
        if self._main_command is not None:
            hints.append("'%s --help'" % self._program_name)
        if self._commands:
            hints.append("'%s <command> --help'" % self._program_name)
        if hints:
            renders.append(Text(""))
            renders.append(Text("Use %s for more information." % " or ".join(hints), styler("epilog-section")))

        self._render(renders, "%s help" % self._program_name)

    def print_command_help(self, command, /):
        """
        Render a command's help: usage, description, then every option in
        declaration order with its description on the following line.
        """
        if not isinstance(command, Command):
            raise TypeError("print_command_help() argument must be a command")
        styles = self._styles()

        def styler(style):
            return styles[style] if self._colorful else ""

        usage = Text.assemble(("Usage", styler("usage-label")), ": ", (self._program_name, styler("program-name")))
        if not command.main:
            usage.append(" ").append(command.name, styler("command-name"))
        usage.append(" ").append("[options]", styler("usage-section"))
        renders = [usage]

        if command.description:
            renders.append(Text(""))
            renders.append(Text(command.description, styler("description-section")))

        if command.options:
            listing = Text.assemble(("Options", styler("group-label")), ":")
            for option in command.options:
                names = []
                if option.short_name is not None:
                    names.append("-" + option.short_name)
                if option.long_name is not None:
                    names.append("--" + option.long_name)
                style = styler("option-name" if option.takes_value else "flag-name")
                listing.append("\n  ")
                listing.append_text(Text(", ").join(Text(name, style) for name in names))
                if option.takes_value:
                    listing.append(" ").append("<value>", styler("metavar"))
                listing.append("\n      ")
                listing.append(option.description, styler("argument-description"))
            renders.append(Text(""))
            renders.append(listing)

        self._render(renders, "%s help" % (command.name or self._program_name))

    def close(self):
        """
        Tear down every registered command and the main command. Only the first call frees.
        """
        if self._closed:
            return
        self._closed = True
        for command in self._commands:
            command.close()
        if self._main_command is not None:
            self._main_command.close()
        self._commands.allocator.free(self._commands)

    def __enter__(self):
        return self

    def __exit__(self, *unused):
        self.close()

    def __repr__(self):
        return "parser(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "program_name", self._program_name
        yield "main_command", self._main_command
        if not self._closed:
            yield "commands", tuple(self._commands)
        yield "current_command", self._current_command


__all__ = (
    "Parser",
    "HELP_TOKENS",
)
