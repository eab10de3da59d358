"""Command grammar: turns one line of operator input into a command."""
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Union

from gaugeshell.series import Metric

WHITESPACE = " \t\r\n"
IDENTIFIER = re.compile(r"[A-Za-z]+")
NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
ESCAPES = {'"': '"', "\\": "\\"}


class ParseError(ValueError):
    """Raised when a non-blank line matches no command."""

    def __init__(self, line: str, column: int):
        self.line = line
        self.column = column
        super().__init__(f"failed to parse: unexpected input at column {column + 1}")


@dataclass(frozen=True)
class SetCommand:
    metric: Metric
    value: float


@dataclass(frozen=True)
class GetCommand:
    metric: Metric


@dataclass(frozen=True)
class DelCommand:
    metric: Metric


@dataclass(frozen=True)
class ExitCommand:
    pass


@dataclass(frozen=True)
class HelpCommand:
    pass


@dataclass(frozen=True)
class EmptyCommand:
    pass


Command = Union[SetCommand, GetCommand, DelCommand, ExitCommand, HelpCommand, EmptyCommand]


class _Mismatch(Exception):
    """Internal signal that an alternative failed at a position."""

    def __init__(self, pos: int):
        super().__init__(pos)
        self.pos = pos


class _Cursor:
    """Recursive-descent reader over a single line."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def fail(self):
        raise _Mismatch(self.pos)

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos:self.pos + 1]

    def keyword(self, word: str):
        if not self.text.startswith(word, self.pos):
            self.fail()
        self.pos += len(word)

    def char(self, ch: str):
        if self.peek() != ch:
            self.fail()
        self.pos += 1

    def spaces(self, minimum: int = 0):
        start = self.pos
        while not self.at_end() and self.text[self.pos] in WHITESPACE:
            self.pos += 1
        if self.pos - start < minimum:
            self.fail()

    def match(self, pattern: re.Pattern) -> str:
        found = pattern.match(self.text, self.pos)
        if not found:
            self.fail()
        self.pos = found.end()
        return found.group()

    def identifier(self) -> str:
        return self.match(IDENTIFIER)

    def number(self) -> float:
        return float(self.match(NUMBER))

    def string(self) -> str:
        self.char('"')
        chars: List[str] = []
        while True:
            if self.at_end():
                self.fail()
            ch = self.text[self.pos]
            if ch == '"':
                self.pos += 1
                return "".join(chars)
            if ch == "\\":
                escaped = self.text[self.pos + 1:self.pos + 2]
                if escaped not in ESCAPES:
                    self.pos += 1
                    self.fail()
                chars.append(ESCAPES[escaped])
                self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1

    def tags(self) -> Dict[str, str]:
        self.char("[")
        tags: Dict[str, str] = {}
        if self.peek() == "]":
            self.pos += 1
            return tags
        while True:
            key = self.identifier()
            self.spaces()
            self.char("=")
            self.spaces()
            tags[key] = self.string()
            if self.peek() != ",":
                break
            self.pos += 1
        self.char("]")
        return tags

    def metric(self) -> Metric:
        name = self.identifier()
        tags = self.tags() if self.peek() == "[" else {}
        return Metric(name, tags)


def _set_command(cursor: _Cursor) -> Command:
    cursor.keyword("set")
    cursor.spaces(minimum=1)
    metric = cursor.metric()
    cursor.spaces()
    cursor.char("=")
    cursor.spaces()
    return SetCommand(metric, cursor.number())


def _del_command(cursor: _Cursor) -> Command:
    cursor.keyword("del")
    cursor.spaces(minimum=1)
    return DelCommand(cursor.metric())


def _get_command(cursor: _Cursor) -> Command:
    cursor.keyword("get")
    cursor.spaces(minimum=1)
    return GetCommand(cursor.metric())


def _exit_command(cursor: _Cursor) -> Command:
    if cursor.text.startswith("quit", cursor.pos):
        cursor.keyword("quit")
    else:
        cursor.keyword("exit")
    return ExitCommand()


def _help_command(cursor: _Cursor) -> Command:
    cursor.keyword("help")
    return HelpCommand()


# Order matters: the first alternative consuming the whole line wins.
ALTERNATIVES: List[Callable[[_Cursor], Command]] = [
    _set_command,
    _del_command,
    _get_command,
    _exit_command,
    _help_command,
]


def parse_command(line: str) -> Command:
    """
    Parse one line into a command.

    Blank or whitespace-only lines yield EmptyCommand. Anything else must be
    consumed entirely by one of the command alternatives.

    Raises:
        ParseError: if no alternative matches the whole line
    """
    if all(ch in WHITESPACE for ch in line):
        return EmptyCommand()

    furthest = 0
    for alternative in ALTERNATIVES:
        cursor = _Cursor(line)
        try:
            command = alternative(cursor)
            if not cursor.at_end():
                cursor.fail()
            return command
        except _Mismatch as e:
            furthest = max(furthest, e.pos)

    raise ParseError(line, furthest)
