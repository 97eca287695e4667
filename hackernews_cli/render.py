import html
import re
import textwrap
from typing import Iterable, List, Sequence

from colorama import Fore, Style

from hackernews_cli.errors import CommandError, HackerNewsError
from hackernews_cli.models import Item, ThreadEntry

MAX_TITLE_WIDTH = 120
INDENT = "    "

_PARAGRAPH = re.compile(r"<p>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")

HELP_LINES = [
    ("top <count>", "Print the top <count> stories"),
    ("new <count>", "Print the newest <count> stories"),
    ("show <count>", "Print the top <count> Show HN stories"),
    ("ask <count>", "Print the top <count> Ask HN stories"),
    ("jobs <count>", "Print the top <count> job stories"),
    ("item <id>", "Show the item with the given <id> and its comments"),
    ("help", "Show this help (or ?)"),
    ("exit", "Quit the application (or quit)"),
]


def paint(text: str, color: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}"


def html_to_text(text: str) -> str:
    """HN item text is HTML: paragraphs become blank lines, other tags are dropped."""
    text = _PARAGRAPH.sub("\n\n", text)
    return html.unescape(_TAG.sub("", text)).strip()


def _margin(width: int) -> str:
    return " " * max(0, (width - MAX_TITLE_WIDTH) // 2)


def welcome() -> str:
    return "\n".join([
        "Welcome to Hacker News CLI!",
        paint("Type 'help' (or ?) for usage.", Fore.YELLOW),
    ])


def help_text() -> str:
    lines = ["Available commands:"]
    lines.extend(f"  {usage:<13} - {meaning}" for usage, meaning in HELP_LINES)
    return "\n".join(lines)


def _meta(item: Item) -> str:
    parts = []
    if item.score is not None:
        parts.append(f"{item.score} points")
    if item.by:
        parts.append(f"by {item.by}")
    if item.descendants is not None:
        parts.append(f"{item.descendants} comments")
    parts.append(f"id {item.id}")
    return " | ".join(parts)


def format_stories(items: Sequence[Item], width: int = MAX_TITLE_WIDTH) -> str:
    margin = _margin(width)
    body = min(width, MAX_TITLE_WIDTH)
    lines: List[str] = []
    for rank, item in enumerate(items, 1):
        lines.append(margin + paint(f"{rank}. {item.title or '(untitled)'}", Fore.YELLOW))
        if item.url:
            lines.append(margin + paint(item.url, Fore.BLUE))
        elif item.text:
            for line in textwrap.wrap(html_to_text(item.text), body) or [""]:
                lines.append(margin + paint(line, Fore.GREEN))
        lines.append(margin + paint(_meta(item), Style.DIM))
        lines.append("")
    if not lines:
        return paint("No items.", Style.DIM)
    return "\n".join(lines).rstrip("\n")


def _wrap_paragraphs(text: str, width: int, prefix: str) -> Iterable[str]:
    for paragraph in html_to_text(text).split("\n\n"):
        for line in textwrap.wrap(paragraph, max(20, width - len(prefix))) or [""]:
            yield prefix + line


def format_thread(entries: Sequence[ThreadEntry], width: int = MAX_TITLE_WIDTH) -> str:
    if not entries:
        return paint("No items.", Style.DIM)
    body = min(width, MAX_TITLE_WIDTH)
    root = entries[0].item
    lines: List[str] = []
    if root.title:
        # stories head the page; their replies start flush left
        lines.append(format_stories([root], width))
        if root.text and root.url:
            lines.extend(_wrap_paragraphs(root.text, body, ""))
        lines.append("")
        offset = -1
    else:
        lines.extend(_comment_lines(root, body, ""))
        offset = 0

    for entry in entries[1:]:
        lines.extend(_comment_lines(entry.item, body, INDENT * (entry.depth + offset)))
    return "\n".join(lines).rstrip("\n")


def _comment_lines(item: Item, width: int, prefix: str) -> List[str]:
    if not item.visible:
        return [prefix + paint("[deleted]" if item.deleted else "[dead]", Style.DIM), ""]
    lines = [prefix + paint(item.by or "?", Fore.BLUE)]
    if item.text:
        lines.extend(paint(line, Fore.GREEN) for line in _wrap_paragraphs(item.text, width, prefix))
    lines.append("")
    return lines


def format_error(error: HackerNewsError) -> str:
    if isinstance(error, CommandError):
        return "\n".join([
            paint("> ", Fore.BLUE) + error.input_text,
            paint(f"Error: {error.detail}.", Fore.RED),
            paint("Type 'help' (or ?) for usage.", Fore.YELLOW),
        ])
    return paint(f"Error: command failed: {error}", Fore.RED)
