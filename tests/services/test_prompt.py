import io

import pytest
from rich.console import Console

from depininstaller.services.prompt import TtyPrompter


def _prompter(tmp_path, answer_text, isatty=lambda: True):
    tty = tmp_path / "tty"
    tty.write_text(answer_text, encoding="utf-8")
    return TtyPrompter(Console(file=io.StringIO()), tty_path=str(tty), isatty=isatty)


@pytest.mark.parametrize(
    "answer_text,default,expected",
    [
        ("y\n", False, True),
        ("n\n", True, False),
        ("\n", True, True),
        ("\n", False, False),
        ("maybe\nY\n", False, True),
    ],
)
def test_confirm_reads_answer_from_terminal(tmp_path, answer_text, default, expected):
    prompter = _prompter(tmp_path, answer_text)

    assert prompter.confirm("Continue?", default=default) is expected


def test_interactivity_follows_isatty(tmp_path):
    assert _prompter(tmp_path, "", isatty=lambda: False).is_interactive() is False
    assert _prompter(tmp_path, "", isatty=lambda: True).is_interactive() is True
