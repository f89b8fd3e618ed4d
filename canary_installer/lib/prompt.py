from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


def ask_yes_no(question: str, *, default: bool, input_fn: InputFn = input) -> bool:
    """Ask a yes/no question; only the first character of the answer counts.

    Empty input (or EOF on a closed stdin) returns the default.
    """

    suffix = "(Y/n)" if default else "(y/N)"
    try:
        answer = input_fn(f"{question} {suffix}: ").strip()
    except EOFError:
        answer = ""

    if not answer:
        result = default
    elif default:
        result = answer[0] not in "nN"
    else:
        result = answer[0] in "yY"

    logger.debug("Prompt %r answered %r -> %s", question, answer, result)
    return result
