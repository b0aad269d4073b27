"""
Parser module behavioral tests (resolution, scanning, help, dispatch).

Scope
- Command resolution: main command, named commands, unknown names.
- Option scanning: value consumption, dash-prefixed tokens, fail-fast faults.
- Help: top-level and per-command rendering, -h/--help handling.
- parse_and_execute exit codes and callback behavior.
- Teardown of every registered command.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured on an uncolored console backed by a StringIO.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from quiver import Arena, Command, Option, OptionType, Parser
from quiver.faults import (
    CallbackFailedError,
    CapacityExceededError,
    DuplicateValueRejectedError,
    HelpRequested,
    MalformedValueError,
    NoCommandSelectableError,
    UnknownCommandError,
    UnknownOptionError,
)


def capture():
    return Console(file=io.StringIO(), width=120, color_system=None)


class ParserTestCase(TestCase):
    """Shared fixture: a 'reader' program with a main and a 'read' command."""

    def setUp(self):
        self.console = capture()
        self.calls = []
        self.parser = Parser("reader", console=self.console)

        self.book = Option("b", "book", "Book name", OptionType.STRING)
        self.chapter = Option("c", "chapter", "Chapter number", OptionType.INT32)
        self.verbose = Option("v", "verbose", "Print more")
        self.main = Command(None, "Look up a passage", self.record)
        for option in (self.book, self.chapter, self.verbose):
            self.main.add_option(option)
        self.parser.set_main_command(self.main)

        self.level = Option("l", "level", "Detail level", OptionType.INT8)
        self.read = Command("read", "Read a passage", self.record)
        self.read.add_option(self.level)
        self.parser.add_command(self.read)

    def tearDown(self):
        self.parser.close()

    def record(self, command, context):
        self.calls.append(command)
        return True

    @property
    def output(self):
        return self.console.file.getvalue()


class TestResolution(ParserTestCase):
    """Behavioral tests for command selection."""

    def testMainCommandFilled(self):
        self.assertEqual(self.parser.parse_and_execute(["reader", "-b", "John", "-c", "3"]), 0)
        self.assertEqual(self.book.get_first_string(), "John")
        self.assertEqual(self.chapter.get_first_int32(), 3)
        self.assertEqual(self.calls, [self.main])
        self.assertIs(self.parser.current_command, self.main)
        self.assertEqual(self.output, "")

    def testNoArgumentsSelectsMain(self):
        self.assertEqual(self.parser.parse_and_execute(["reader"]), 0)
        self.assertEqual(self.calls, [self.main])

    def testNamedCommandSelected(self):
        self.assertTrue(self.parser.parse(["reader", "read", "-l", "4"]))
        self.assertIs(self.parser.current_command, self.read)
        self.assertEqual(self.level.get_first_int8(), 4)
        self.assertEqual(self.book.values, ())

    def testCommandNamesMatchExactly(self):
        self.assertFalse(self.parser.parse(["reader", "Read"]))
        self.assertIsInstance(self.parser.fault, UnknownCommandError)

    def testUnknownCommandHasNoFallback(self):
        self.assertEqual(self.parser.parse_and_execute(["reader", "unknown-cmd"]), 1)
        self.assertIn("Unknown command: unknown-cmd", self.output)
        self.assertIn("Usage:", self.output)
        self.assertIsInstance(self.parser.fault, UnknownCommandError)
        self.assertEqual(self.calls, [])
        self.assertIsNone(self.parser.current_command)

    def testUnknownCommandSuggestion(self):
        self.parser.parse(["reader", "rea"])
        self.assertIn("did you mean 'read'?", self.output)

    def testFirstRegisteredCommandWins(self):
        shadow = Command("read", "Shadowed", self.record)
        self.parser.add_command(shadow)
        self.parser.parse(["reader", "read"])
        self.assertIs(self.parser.current_command, self.read)

    def testStringArgvIsSplit(self):
        self.assertTrue(self.parser.parse("-b 'Song of Songs' -c 2"))
        self.assertEqual(self.book.get_first_string(), "Song of Songs")
        self.assertEqual(self.chapter.get_first_int32(), 2)

    def testArgvItemsMustBeStrings(self):
        with self.assertRaises(TypeError):
            self.parser.parse(["reader", 3])


class TestWithoutMainCommand(TestCase):
    """Behavioral tests for a parser that only has named commands."""

    def setUp(self):
        self.console = capture()
        self.parser = Parser("tool", console=self.console)
        self.parser.add_command(Command("build", "Build things"))

    def tearDown(self):
        self.parser.close()

    def testDashTokenPrintsHelp(self):
        self.assertFalse(self.parser.parse(["tool", "--verbose"]))
        output = self.console.file.getvalue()
        self.assertIn("Usage: tool <command> [options]", output)
        self.assertIn("build", output)
        self.assertIsInstance(self.parser.fault, NoCommandSelectableError)

    def testNoArgumentsPrintsHelp(self):
        self.assertEqual(self.parser.parse_and_execute(["tool"]), 1)
        self.assertIn("Commands:", self.console.file.getvalue())


class TestScanning(ParserTestCase):
    """Behavioral tests for option scanning."""

    def testDashTokenNeverConsumedAsValue(self):
        self.assertTrue(self.parser.parse(["reader", "-c", "-v"]))
        self.assertIsNone(self.chapter.get_first_int32())
        self.assertIs(self.verbose.get_first_bool(), True)

    def testNegativeNumberReadAsOption(self):
        self.assertFalse(self.parser.parse(["reader", "-c", "-5"]))
        self.assertIn("Unknown option: -5", self.output)
        self.assertEqual(self.chapter.values, ())

    def testTrailingValueOptionStaysValueless(self):
        self.assertTrue(self.parser.parse(["reader", "-b"]))
        self.assertEqual(self.book.values, ())

    def testFlagNeverConsumesNextToken(self):
        self.assertTrue(self.parser.parse(["reader", "-v", "stray", "-b", "John"]))
        self.assertIs(self.verbose.get_first_bool(), True)
        self.assertEqual(self.book.get_first_string(), "John")

    def testStrayTokensIgnored(self):
        self.assertTrue(self.parser.parse(["reader", "read", "stray", "-l", "1", "other"]))
        self.assertEqual(self.level.get_first_int8(), 1)

    def testUnknownOptionFailsFast(self):
        self.assertFalse(self.parser.parse(["reader", "--nope", "-b", "John"]))
        self.assertIn("Unknown option: --nope", self.output)
        self.assertIsInstance(self.parser.fault, UnknownOptionError)
        self.assertEqual(self.book.values, ())

    def testUnknownOptionSuggestion(self):
        self.parser.parse(["reader", "--boo", "John"])
        self.assertIn("did you mean '--book'?", self.output)

    def testMalformedValue(self):
        self.assertEqual(self.parser.parse_and_execute(["reader", "read", "-l", "200"]), 1)
        self.assertIn("Failed to parse value: 200 for option: level", self.output)
        self.assertEqual(self.output.count("Failed to parse value"), 1)
        self.assertIsInstance(self.parser.fault, MalformedValueError)
        self.assertEqual(self.calls, [])

    def testOverlongNumeralReported(self):
        self.assertEqual(self.parser.parse_and_execute(["reader", "-c", "1" * 5000]), 1)
        self.assertIn("Failed to parse value:", self.output)
        self.assertIn("chapter", self.output)
        self.assertIsInstance(self.parser.fault, MalformedValueError)
        self.assertEqual(self.calls, [])

    def testCapacityExceededReported(self):
        tag = Option("t", "tag", "Tag", OptionType.STRING, allow_multiple=True, max_values=1)
        self.main.add_option(tag)
        self.assertEqual(self.parser.parse_and_execute(["reader", "-t", "a", "-t", "b"]), 1)
        self.assertIsInstance(self.parser.fault, CapacityExceededError)
        self.assertIn("option 'tag' cannot hold more than 1 values", self.output)
        self.assertEqual(tag.get_all_strings(), ("a",))
        self.assertEqual(self.calls, [])

    def testSingleValueOptionRepeated(self):
        self.assertFalse(self.parser.parse(["reader", "-b", "John", "-b", "Mark"]))
        self.assertIsInstance(self.parser.fault, DuplicateValueRejectedError)
        self.assertIn("accepts a single value", self.output)
        self.assertEqual(self.book.get_all_strings(), ("John",))

    def testMultipleValuesCollected(self):
        verse = Option("s", "verse", "Verse number", OptionType.UINT16, allow_multiple=True)
        self.main.add_option(verse)
        self.assertTrue(self.parser.parse(["reader", "-s", "1", "--verse", "16"]))
        self.assertEqual(tuple(value.payload for value in verse.values), (1, 16))


class TestHelp(ParserTestCase):
    """Behavioral tests for help requests and rendering."""

    def testHelpForMainCommand(self):
        self.assertEqual(self.parser.parse_and_execute(["reader", "--help"]), 1)
        self.assertIn("Usage: reader [options]", self.output)
        self.assertIn("-b, --book <value>", self.output)
        self.assertIn("      Book name", self.output)
        self.assertIsInstance(self.parser.fault, HelpRequested)
        self.assertEqual(self.calls, [])

    def testShortHelpForNamedCommand(self):
        self.assertFalse(self.parser.parse(["reader", "read", "-h"]))
        self.assertIn("Usage: reader read [options]", self.output)
        self.assertIn("Read a passage", self.output)
        self.assertIn("-l, --level <value>", self.output)

    def testHelpStopsScanning(self):
        self.assertFalse(self.parser.parse(["reader", "-b", "John", "--help", "-c", "3"]))
        self.assertEqual(self.book.get_first_string(), "John")
        self.assertEqual(self.chapter.values, ())

    def testOptionsListedInDeclarationOrder(self):
        self.parser.print_command_help(self.main)
        self.assertLess(self.output.index("--book"), self.output.index("--chapter"))
        self.assertLess(self.output.index("--chapter"), self.output.index("--verbose"))

    def testFlagsShownWithoutValuePlaceholder(self):
        self.parser.print_command_help(self.main)
        self.assertIn("-v, --verbose\n", self.output)
        self.assertNotIn("--verbose <value>", self.output)

    def testTopLevelHelp(self):
        self.parser.print_help()
        self.assertIn("Usage: reader [options]", self.output)
        self.assertIn("       reader <command> [options]", self.output)
        self.assertIn("Look up a passage", self.output)
        self.assertIn("Commands:", self.output)
        self.assertIn("  read             Read a passage", self.output)
        self.assertIn("Use 'reader --help' or 'reader <command> --help' for more information.", self.output)

    def testFancyHelpStillReadable(self):
        parser = Parser("reader", console=self.console, fancy=True)
        parser.set_main_command(Command(None, "Look up a passage"))
        parser.print_help()
        self.assertIn("Usage: reader [options]", self.output)
        self.assertIn("READER HELP", self.output)
        parser.close()


class TestDispatch(ParserTestCase):
    """Behavioral tests for parse_and_execute."""

    def testCallbackFailureIsSilent(self):
        failing = Command("fail", "Always fails", lambda command, context: False)
        self.parser.add_command(failing)
        self.assertEqual(self.parser.parse_and_execute(["reader", "fail"]), 1)
        self.assertIsInstance(self.parser.fault, CallbackFailedError)
        self.assertEqual(self.output, "")

    def testCallbackSeesParsedValues(self):
        seen = []
        command = Command("peek", callback=lambda command, context: seen.append(command.get_option("n").get_first_uint8()))
        command.add_option(Option("n", type=OptionType.UINT8))
        self.parser.add_command(command)
        self.assertEqual(self.parser.parse_and_execute(["reader", "peek", "-n", "9"]), 0)
        self.assertEqual(seen, [9])


class TestRegistry(TestCase):
    """Behavioral tests for registration and teardown."""

    def testMainCommandRejectedByAddCommand(self):
        with Parser("tool") as parser:
            with self.assertRaises(TypeError):
                parser.add_command(Command())

    def testNamedCommandRejectedAsMain(self):
        with Parser("tool") as parser:
            named = Command("run")
            with self.assertRaises(TypeError):
                parser.set_main_command(named)
            self.assertIsNone(parser.main_command)
            named.close()

    def testReplacedMainCommandIsClosed(self):
        arena = Arena()
        parser = Parser("tool", allocator=arena)
        first = Command(allocator=arena)
        second = Command(allocator=arena)
        parser.set_main_command(first)
        parser.set_main_command(first)
        self.assertFalse(first.closed)
        parser.set_main_command(second)
        self.assertTrue(first.closed)
        self.assertIs(parser.main_command, second)
        parser.close()
        self.assertEqual(arena.live, 0)

    def testCommandListIsBounded(self):
        with Parser("tool", max_commands=1) as parser:
            self.assertTrue(parser.add_command(Command("a")))
            self.assertFalse(parser.add_command(Command("b")))

    def testCloseTearsDownEverythingOnce(self):
        arena = Arena()
        parser = Parser("tool", allocator=arena)
        main = Command(allocator=arena)
        main.add_option(Option("x", allocator=arena))
        named = Command("run", allocator=arena)
        named.add_option(Option("y", allocator=arena))
        parser.set_main_command(main)
        parser.add_command(named)
        self.assertEqual(arena.live, 5)
        parser.close()
        parser.close()
        self.assertEqual(arena.live, 0)
        self.assertTrue(main.closed and named.closed)


if __name__ == "__main__":
    unittest.main()
