"""
Typed commands and the parser for one line of user input.

Grammar: ``verb [ws argument]``. Verbs are lower-case and case-sensitive;
anything after the first argument is ignored. ``parse`` is pure: no I/O,
no state, and it reports failures as ``CommandError`` subclasses carrying
the original input.
"""

from dataclasses import dataclass
from typing import List, Union

from hackernews_cli.errors import InvalidArgument, MissingArgument, UnknownVerb
from hackernews_cli.models import Category


@dataclass(frozen=True)
class CategoryCommand:
    category: Category
    count: int


@dataclass(frozen=True)
class ItemCommand:
    item_id: int


@dataclass(frozen=True)
class HelpCommand:
    pass


@dataclass(frozen=True)
class ExitCommand:
    pass


Command = Union[CategoryCommand, ItemCommand, HelpCommand, ExitCommand]

CATEGORY_VERBS = {
    "top": Category.TOP,
    "new": Category.NEW,
    "show": Category.SHOW,
    "ask": Category.ASK,
    "jobs": Category.JOBS,
}
HELP_VERBS = ("help", "?")
EXIT_VERBS = ("exit", "quit")


def _unsigned(line: str, verb: str, args: List[str]) -> int:
    if not args:
        raise MissingArgument(line, verb)
    token = args[0]
    # isdigit alone accepts things like '²' that int() rejects
    if not (token.isascii() and token.isdigit()):
        raise InvalidArgument(line, verb, token)
    return int(token)


def parse(line: str) -> Command:
    tokens = line.split()
    if not tokens:
        raise UnknownVerb(line, "")
    verb, args = tokens[0], tokens[1:]

    if verb in CATEGORY_VERBS:
        return CategoryCommand(CATEGORY_VERBS[verb], _unsigned(line, verb, args))
    if verb == "item":
        return ItemCommand(_unsigned(line, verb, args))
    if verb in HELP_VERBS:
        return HelpCommand()
    if verb in EXIT_VERBS:
        return ExitCommand()
    raise UnknownVerb(line, verb)
