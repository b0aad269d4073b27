import sys

from rich.console import Console
from rich.pretty import pprint

from quiver import *


@command(
    None,
    Option("b", "book", "Book to read from", OptionType.STRING),
    Option("c", "chapter", "Chapter number", OptionType.INT32),
    Option("v", "verse", "Verse number (may be repeated)", OptionType.UINT16, allow_multiple=True),
    Option(None, "raw", "Print the parsed command as-is", OptionType.BOOL),
    context=Console(),
)
def read(command, console):
    """Look up a passage"""
    book = command.get_option("book").get_first_string()
    chapter = command.get_option("chapter").get_first_int32()
    if book is None or chapter is None:
        console.print("both --book and --chapter are required")
        return False
    if command.get_option("raw").get_first_bool():
        pprint(command)
        return True
    verses = [value.payload for value in command.get_option("verse").get_all_values()]
    console.print("%s %d%s" % (book, chapter, ":" + ",".join(map(str, verses)) if verses else ""))
    return True


@command("books", context=Console())
def books(command, console):
    """List the books that can be read"""
    console.print(", ".join(("Genesis", "Exodus", "Psalms", "John")))


if __name__ == '__main__':
    with Arena() as arena, Parser("reader", allocator=arena) as parser:
        parser.set_main_command(read)
        parser.add_command(books)
        sys.exit(parser.parse_and_execute())
