"""Run-time assertions that report a formatted message and can break or be silenced."""

from __future__ import annotations

import enum
import sys
from typing import Callable, Optional

__all__ = [
    "AssertResponse",
    "AssertionBreak",
    "AssertionSite",
    "format_assertion_message",
    "BUFFER_SIZE",
    "PROMPT",
]

BUFFER_SIZE = 512

PROMPT = (
    "Do you want to break into the debugger?"
    ' Choose "Yes" to break, "No" to continue,'
    ' or "Cancel" to disable this assertion until the program exits.'
)


class AssertResponse(enum.Enum):
    """What the user chose when shown a failed assertion."""

    BREAK = "yes"
    CONTINUE = "no"
    IGNORE = "cancel"


class AssertionBreak(AssertionError):
    """Raised when a failed assertion asks to stop the program."""


def format_assertion_message(line_number: int, file: str, message: str = "", *args: object) -> str:
    """Build the text shown for an assertion that failed at ``file``:``line_number``."""
    parts = [f"An assertion failed on line {line_number} of {file}"]
    try:
        formatted: Optional[str] = message % args
    except (TypeError, ValueError, KeyError):
        formatted = None

    if formatted is None:
        parts.append(":\n\n")
        parts.append(f'An encoding error occurred! The unformatted message is: "{message}"!')
    elif formatted:
        parts.append(":\n\n")
        parts.append(formatted[: BUFFER_SIZE - 1])
        if len(formatted) >= BUFFER_SIZE:
            parts.append(
                f"\n\n(The internal buffer of size {BUFFER_SIZE}"
                f" was not big enough to hold the formatted message of length {len(formatted) + 1})"
            )
    else:
        parts.append("!")
    return "".join(parts)


def _prompt_on_stderr(message: str) -> AssertResponse:
    sys.stderr.write(f"{message}\n\n{PROMPT}\n")
    sys.stderr.flush()
    return AssertResponse.BREAK


Handler = Callable[[str], Optional[AssertResponse]]


class AssertionSite:
    """One place in the code that asserts; it remembers whether it has been silenced."""

    def __init__(self, line_number: int, file: str, handler: Optional[Handler] = None) -> None:
        self.line_number = line_number
        self.file = file
        self.handler: Handler = handler if handler is not None else _prompt_on_stderr
        self.ignored = False

    def check(self, condition: object, message: str = "", *args: object) -> bool:
        """Return whether ``condition`` holds, reporting to the handler when it does not.

        Raises AssertionBreak when the handler asks to break, or gives no answer.
        """
        holds = bool(condition)
        if holds or self.ignored or not __debug__:
            return holds
        text = format_assertion_message(self.line_number, self.file, message, *args)
        response = self.handler(text)
        if response is AssertResponse.IGNORE:
            self.ignored = True
        elif response is not AssertResponse.CONTINUE:
            raise AssertionBreak(text)
        return False