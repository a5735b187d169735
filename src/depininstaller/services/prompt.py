"""Yes/no prompting for depininstaller."""

import sys
from typing import Callable, Optional, TextIO

from rich.console import Console
from rich.prompt import Confirm
from rich.text import TextType

TTY_PATH = "/dev/tty"


class TtyConfirm(Confirm):
    """Confirm prompt that accepts an empty line read from a stream as the default."""

    @classmethod
    def get_input(
        cls,
        console: Console,
        prompt: TextType,
        password: bool,
        stream: Optional[TextIO] = None,
    ) -> str:
        return super().get_input(console, prompt, password, stream=stream).rstrip("\r\n")


class TtyPrompter:
    """Asks questions on the controlling terminal.

    Answers are read from ``/dev/tty`` so the installer still prompts when
    it is piped into a shell. Interactivity follows stderr, which is where
    the questions are written.
    """

    def __init__(
        self,
        console: Console,
        tty_path: str = TTY_PATH,
        isatty: Callable[[], bool] = sys.stderr.isatty,
    ):
        self.console = console
        self.tty_path = tty_path
        self._isatty = isatty

    def is_interactive(self) -> bool:
        return bool(self._isatty())

    def confirm(self, question: str, default: bool) -> bool:
        with open(self.tty_path, "r", encoding="utf-8") as stream:
            return TtyConfirm.ask(question, console=self.console, default=default, stream=stream)
