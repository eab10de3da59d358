"""Interactive line source with persisted history and command completion."""
import logging
import os
import readline
from typing import Callable, Iterator, List, Optional

logger = logging.getLogger(__name__)

COMMANDS = ("set ", "del ", "get ", "help", "quit", "exit")


def default_history_file() -> str:
    """Per-user cache location for the shell history."""
    cache_home = os.getenv("XDG_CACHE_HOME") or os.path.join(os.path.expanduser("~"), ".cache")
    return os.path.join(cache_home, "gaugeshell", "history")


def command_completions(prefix: str) -> List[str]:
    """Commands starting with the given prefix."""
    return [command for command in COMMANDS if command.startswith(prefix)]


class Shell:
    """
    Yields operator input one line at a time.

    History is read when the shell is created and written by close(). End of
    input and Ctrl-C at the prompt both end the iteration.
    """

    def __init__(
        self,
        prompt: str = "gsh> ",
        history_file: Optional[str] = None,
        history_length: int = 1000,
        input_func: Callable[[str], str] = input
    ):
        self.prompt = prompt
        self.history_file = history_file or default_history_file()
        self.history_length = history_length
        self._input = input_func
        self._closed = False

        readline.set_auto_history(False)
        readline.set_completer(self._complete)
        readline.parse_and_bind("tab: complete")
        self.load_history()

    def _complete(self, text: str, state: int) -> Optional[str]:
        # Only the command word is completed
        if readline.get_begidx() != 0:
            return None
        matches = command_completions(text)
        return matches[state] if state < len(matches) else None

    def load_history(self) -> bool:
        """Load history; a missing or unreadable file leaves it empty."""
        try:
            readline.read_history_file(self.history_file)
        except FileNotFoundError:
            logger.debug(f"No history at {self.history_file}")
            return False
        except OSError as e:
            logger.warning(f"Failed to load history from {self.history_file}: {e}")
            return False
        return True

    def save_history(self) -> bool:
        """Write history; failure only costs the history."""
        try:
            history_dir = os.path.dirname(self.history_file)
            if history_dir:
                os.makedirs(history_dir, exist_ok=True)
            readline.set_history_length(self.history_length)
            readline.write_history_file(self.history_file)
        except OSError as e:
            logger.warning(f"Failed to save history to {self.history_file}: {e}")
            return False
        return True

    def _remember(self, line: str):
        if line.strip() and not line.startswith(" "):
            readline.add_history(line)

    def __iter__(self) -> Iterator[str]:
        while True:
            try:
                line = self._input(self.prompt)
            except EOFError:
                print()
                return
            except KeyboardInterrupt:
                print()
                logger.info("Interrupted")
                return
            self._remember(line)
            yield line

    def close(self):
        """Save history once."""
        if self._closed:
            return
        self._closed = True
        self.save_history()

    def __enter__(self) -> "Shell":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
