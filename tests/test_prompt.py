"""Tests for yes/no prompts"""

import pytest

from canary_installer.lib.prompt import ask_yes_no


def _answer(text):
    return lambda _prompt: text


@pytest.mark.parametrize(
    "answer,default,expected",
    [
        ("", False, False),
        ("", True, True),
        ("y", False, True),
        ("Yes", False, True),
        ("n", False, False),
        ("x", False, False),
        ("n", True, False),
        ("No", True, False),
        ("x", True, True),
        ("  y  ", False, True),
    ],
)
def test_answers(answer, default, expected):
    assert ask_yes_no("Continue?", default=default, input_fn=_answer(answer)) is expected


def test_suffix_shows_default():
    seen = []

    def _input(prompt):
        seen.append(prompt)
        return ""

    ask_yes_no("Continue without GPU acceleration?", default=False, input_fn=_input)
    ask_yes_no("Start the service now?", default=True, input_fn=_input)

    assert seen == [
        "Continue without GPU acceleration? (y/N): ",
        "Start the service now? (Y/n): ",
    ]


def test_eof_uses_default():
    def _eof(_prompt):
        raise EOFError

    assert ask_yes_no("Start?", default=True, input_fn=_eof) is True
    assert ask_yes_no("Continue?", default=False, input_fn=_eof) is False
