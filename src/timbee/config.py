"""Runtime settings for the shell.

There is deliberately no configuration file.  Settings come from
environment variables, overridden by command-line options::

    TIMBEE_PROMPT           prompt template, ``{cwd}`` = working directory
    TIMBEE_BUFFER_CAPACITY  initial size of line buffers
    TIMBEE_PRINT_HISTORY    print the session history on exit (1/true/yes/on)
    TIMBEE_LOG_FILE         append the session log to this file
    TIMBEE_LOG_LEVEL        debug / info / warning / error
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace

from timbee.buffer import DEFAULT_CAPACITY
from timbee.display import DEFAULT_PROMPT
from timbee.logging import LogLevel

ENV_PREFIX = "TIMBEE_"
_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})


class ConfigError(ValueError):
    """Raise when a setting has an invalid value."""


@dataclass(frozen=True)
class ShellConfig:
    """All tunable settings of a shell session.

    Attributes:
        prompt: Prompt template.
        capacity: Initial capacity of the line, clipboard and search buffers.
        print_history: Print every history entry to stdout on exit.
        log_file: Path of the session log, or ``None`` for no file.
        log_level: Minimum level recorded in the log.

    """

    prompt: str = DEFAULT_PROMPT
    capacity: int = DEFAULT_CAPACITY
    print_history: bool = False
    log_file: str | None = None
    log_level: LogLevel = LogLevel.INFO

    def __post_init__(self) -> None:
        """Validate field values."""
        if self.capacity <= 0:
            msg = f"Buffer capacity must be positive, got {self.capacity}"
            raise ConfigError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "ShellConfig":
        """Build settings from ``TIMBEE_*`` variables in *environ*.

        Raises:
            ConfigError: If a variable holds an invalid value.

        """
        defaults = cls()
        capacity_text = environ.get(f"{ENV_PREFIX}BUFFER_CAPACITY")
        level_text = environ.get(f"{ENV_PREFIX}LOG_LEVEL")
        history_text = environ.get(f"{ENV_PREFIX}PRINT_HISTORY")
        return cls(
            prompt=environ.get(f"{ENV_PREFIX}PROMPT", defaults.prompt),
            capacity=defaults.capacity if capacity_text is None else parse_capacity(capacity_text),
            print_history=(
                defaults.print_history if history_text is None else parse_flag(history_text)
            ),
            log_file=environ.get(f"{ENV_PREFIX}LOG_FILE") or defaults.log_file,
            log_level=defaults.log_level if level_text is None else parse_level(level_text),
        )

    def with_overrides(self, **changes: object) -> "ShellConfig":
        """Return a copy with every non-``None`` value in *changes* applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def parse_capacity(text: str) -> int:
    """Parse a positive integer capacity.

    Raises:
        ConfigError: If *text* is not a positive integer.

    """
    try:
        value = int(text)
    except ValueError:
        msg = f"Buffer capacity must be an integer, got {text!r}"
        raise ConfigError(msg) from None
    if value <= 0:
        msg = f"Buffer capacity must be positive, got {value}"
        raise ConfigError(msg)
    return value


def parse_level(text: str) -> LogLevel:
    """Parse a log level name.

    Raises:
        ConfigError: If *text* is not a level name.

    """
    try:
        return LogLevel.parse(text)
    except ValueError as e:
        raise ConfigError(str(e)) from None


def parse_flag(text: str) -> bool:
    """Return True for ``1``/``true``/``yes``/``on`` (any case)."""
    return text.strip().lower() in _TRUE_WORDS
