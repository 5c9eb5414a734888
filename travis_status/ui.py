from __future__ import annotations

import asyncio
import io
import re
import sys
from collections.abc import Callable
from typing import Any, Protocol, TextIO

import questionary
from prompt_toolkit.output import create_output
from rich.console import Console
from rich.text import Text

from .errors import InputExhaustedError
from .models import StatusResult, result_number, result_state
from .states import state_color

AGREE_RE = re.compile(r"no?$|^y(?:es)?", re.IGNORECASE)
AGREE_NOT_VALID = 'Please enter "yes" or "no".'
_TRAILING_SPACE_RE = re.compile(r"\s*$")


class Prompter(Protocol):
    """Line-based question/answer primitives used to confirm a detected slug."""

    async def agree(self, question: str) -> bool: ...

    async def ask(
        self,
        question: str,
        *,
        default: str | None = None,
        validate: re.Pattern[str] | None = None,
        not_valid: str | None = None,
        trim: bool = False,
        convert: Callable[[str], Any] | None = None,
    ) -> Any: ...


def _with_default(question: str, default: str) -> str:
    match = _TRAILING_SPACE_RE.search(question)
    assert match is not None
    padding = match.group(0) or " "
    return f"{question[: match.start()]} |{default}|{padding}"


def _plain(question: str) -> str:
    # questionary applies its own style; drop any ANSI codes in the text.
    return Text.from_ansi(question).plain.rstrip()


def styled(text: str, style: str, colored: bool) -> str:
    """Return ``text`` with ANSI codes for ``style`` when ``colored``."""
    if not colored:
        return text
    console = Console(file=io.StringIO(), force_terminal=True, color_system="standard")
    with console.capture() as capture:
        console.print(Text(text, style=style), end="")
    return capture.get()


class LinePrompter:
    """Prompts on one text stream and reads answers, a line at a time, from another."""

    def __init__(self, input: TextIO, output: TextIO) -> None:
        self._input = input
        self._output = output
        self._exhausted = False

    async def prompt(self, text: str) -> str:
        """Write ``text`` and return the next line of input without its newline."""
        self._output.write(text)
        self._output.flush()
        if self._exhausted:
            raise InputExhaustedError()
        line = await asyncio.to_thread(self._input.readline)
        if not line.endswith("\n"):
            self._exhausted = True
            raise InputExhaustedError()
        return line[:-1]

    async def ask(
        self,
        question: str,
        *,
        default: str | None = None,
        validate: re.Pattern[str] | None = None,
        not_valid: str | None = None,
        trim: bool = False,
        convert: Callable[[str], Any] | None = None,
    ) -> Any:
        full_question = _with_default(question, default) if default else question
        while True:
            answer = await self.prompt(full_question)
            if default and not answer:
                answer = default
            if trim:
                answer = answer.rstrip()
            if validate is None or validate.search(answer):
                return convert(answer) if convert is not None else answer
            response = not_valid or f"Your answer isn't valid (must match {validate.pattern})."
            self._output.write(f"{response}\n")

    async def agree(self, question: str) -> bool:
        answer = await self.ask(question, validate=AGREE_RE, not_valid=AGREE_NOT_VALID)
        return answer[:1].lower() == "y"


class QuestionaryPrompter:
    """Prompter for interactive terminals."""

    def __init__(self, output: TextIO | None = None) -> None:
        self._output = None
        if output is not None:
            try:
                self._output = create_output(stdout=output)
            except Exception:
                self._output = None

    async def agree(self, question: str) -> bool:
        try:
            answer = await questionary.confirm(
                _plain(question), default=True, output=self._output
            ).unsafe_ask_async()
        except EOFError as exc:
            raise InputExhaustedError() from exc
        return bool(answer)

    async def ask(
        self,
        question: str,
        *,
        default: str | None = None,
        validate: re.Pattern[str] | None = None,
        not_valid: str | None = None,
        trim: bool = False,
        convert: Callable[[str], Any] | None = None,
    ) -> Any:
        def _validate(text: str) -> bool | str:
            value = text.rstrip() if trim else text
            if validate is None or validate.search(value or default or ""):
                return True
            return not_valid or f"Must match {validate.pattern}"

        try:
            answer = await questionary.text(
                _plain(question),
                default=default or "",
                validate=_validate,
                output=self._output,
            ).unsafe_ask_async()
        except EOFError as exc:
            raise InputExhaustedError() from exc
        answer = answer or default or ""
        if trim:
            answer = answer.rstrip()
        return convert(answer) if convert is not None else answer


def default_prompter(input: TextIO, output: TextIO) -> Prompter:
    """Use questionary on a terminal and plain line prompts otherwise."""
    if input is sys.stdin and input.isatty() and output.isatty():
        return QuestionaryPrompter(output)
    return LinePrompter(input, output)


def make_console(file: TextIO, colored: bool) -> Console:
    return Console(
        file=file,
        force_terminal=colored,
        color_system="standard" if colored else None,
        highlight=False,
        soft_wrap=True,
    )


def format_status(result: StatusResult) -> Text:
    """``build #<number> <state>`` with the state in its color."""
    state = result_state(result)
    text = Text(f"build #{result_number(result)} ")
    text.append(str(state), style=state_color(state))
    return text
