"""Executes parsed commands against the dynamic registry."""
import logging
from dataclasses import dataclass
from typing import Optional

from gaugeshell.grammar import (
    Command, DelCommand, EmptyCommand, ExitCommand, GetCommand, HelpCommand,
    ParseError, SetCommand, parse_command,
)
from gaugeshell.registry import DynamicRegistry, RegistryError

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Commands:
  set NAME[TAGS] = VALUE   create or update a gauge series
  get NAME[TAGS]           print the current value of a series
  del NAME[TAGS]           delete a series; the gauge goes away with its last series
  help                     show this text
  exit, quit               leave the shell (Ctrl-D works too)

NAME and tag keys are letters only. TAGS is optional, with no space after commas:
  [key="value",other="value"]
Inside tag values only \\" and \\\\ are escapes.

The first set of a name fixes its tag keys. Later commands on that name
must use the same keys; a missing key is treated as "" so different
tag sets may end up on the same series.

Examples:
  set requests[method="GET",path="/"] = 42
  get requests[method="GET",path="/"]
  del requests[method="GET",path="/"]"""


COMMAND_NAMES = {
    SetCommand: "set",
    GetCommand: "get",
    DelCommand: "del",
    HelpCommand: "help",
    ExitCommand: "exit",
}


# Integral floats beyond this lose precision when shown as int
MAX_EXACT_INT = 2 ** 53


def format_value(value: float) -> str:
    """Render a gauge value, dropping the fraction of whole numbers."""
    if value.is_integer() and abs(value) <= MAX_EXACT_INT:
        return str(int(value))
    return str(value)


@dataclass
class Outcome:
    """Result of one command: text to print, a warning, or a request to exit."""
    output: Optional[str] = None
    error: Optional[str] = None
    exit: bool = False


class Interpreter:
    """Binds commands to registry calls."""

    def __init__(self, registry: DynamicRegistry, self_metrics=None):
        self.registry = registry
        self.self_metrics = self_metrics

    def run_line(self, line: str) -> Outcome:
        """Parse and execute one line of input."""
        try:
            command = parse_command(line)
        except ParseError as e:
            if self.self_metrics:
                self.self_metrics.record_error("parse")
            return Outcome(error=str(e))
        return self.execute(command)

    def execute(self, command: Command) -> Outcome:
        """Execute one command; registry failures come back as an error outcome."""
        if isinstance(command, EmptyCommand):
            return Outcome()

        if self.self_metrics:
            self.self_metrics.record_command(COMMAND_NAMES[type(command)])

        try:
            if isinstance(command, SetCommand):
                self.registry.add(command.metric, command.value)
                return Outcome()
            elif isinstance(command, DelCommand):
                self.registry.remove(command.metric)
                return Outcome()
            elif isinstance(command, GetCommand):
                return Outcome(output=format_value(self.registry.get(command.metric)))
            elif isinstance(command, HelpCommand):
                return Outcome(output=HELP_TEXT)
            elif isinstance(command, ExitCommand):
                return Outcome(exit=True)
        except RegistryError as e:
            logger.debug(f"Command {command} failed: {e}")
            if self.self_metrics:
                self.self_metrics.record_error("registry")
            return Outcome(error=str(e))

        raise TypeError(f"Unknown command: {command!r}")
