"""
Interactive loop: read a line, parse it, evaluate it, print the result.

One command is evaluated completely before the next line is read. Command
errors are echoed back with a usage hint; fetch errors fail only the current
command. The loop ends on ``exit``/``quit``, EOF or Ctrl-C.
"""

import logging
import shutil
import sys
from typing import Callable, Optional, TextIO

import colorama
from colorama import Fore

from hackernews_cli import render
from hackernews_cli.client import HackerNewsClient
from hackernews_cli.commands import CategoryCommand, ExitCommand, HelpCommand, ItemCommand, parse
from hackernews_cli.config import Settings
from hackernews_cli.errors import CommandError, FetchError
from hackernews_cli.orchestrator import FetchOrchestrator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def configure_logging(level: str = "WARNING", stream: Optional[TextIO] = None) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    root = logging.getLogger()
    root.setLevel(numeric)
    root.handlers = [handler]
    # urllib3 is chatty at DEBUG; keep it one notch quieter than us
    logging.getLogger("urllib3").setLevel(max(numeric, logging.INFO))


class Terminal:
    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        read_line: Callable[[str], str] = input,
        out: Optional[TextIO] = None,
        width: Optional[int] = None,
    ):
        self.orchestrator = orchestrator
        self.read_line = read_line
        self.out = out or sys.stdout
        self.width = width
        self.should_quit = False

    def _write(self, text: str) -> None:
        self.out.write(text + "\n")
        self.out.flush()

    def _width(self) -> int:
        return self.width or shutil.get_terminal_size().columns

    def run(self) -> None:
        self._write(render.welcome())
        while not self.should_quit:
            try:
                line = self.read_line(render.paint("> ", Fore.BLUE))
            except (EOFError, KeyboardInterrupt):
                break
            try:
                self.evaluate(line)
            except KeyboardInterrupt:
                # Ctrl-C mid-fetch ends the session like exit
                logger.debug("interrupted while evaluating %r", line)
                break
        self._write("Goodbye.")

    def evaluate(self, line: str) -> None:
        line = line.strip()
        if line.startswith(":"):
            line = line[1:].strip()
        if not line:
            return

        try:
            command = parse(line)
        except CommandError as e:
            logger.debug("rejected input %r: %s", e.input_text, e.detail)
            self._write(render.format_error(e))
            return

        if isinstance(command, ExitCommand):
            self.should_quit = True
        elif isinstance(command, HelpCommand):
            self._write(render.help_text())
        else:
            try:
                self._write(self._fetch(command))
            except FetchError as e:
                self._write(render.format_error(e))

    def _fetch(self, command) -> str:
        if isinstance(command, CategoryCommand):
            items = self.orchestrator.fetch_category(command.category, command.count)
            return render.format_stories(items, self._width())
        if isinstance(command, ItemCommand):
            entries = self.orchestrator.fetch_thread(command.item_id)
            return render.format_thread(entries, self._width())
        raise TypeError(f"Unhandled command: {command!r}")


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    colorama.init()
    client = HackerNewsClient.from_settings(settings)
    try:
        with FetchOrchestrator(
            client,
            max_workers=settings.max_workers,
            thread_depth=settings.thread_depth,
            thread_limit=settings.thread_limit,
        ) as orchestrator:
            Terminal(orchestrator).run()
    finally:
        client.close()
