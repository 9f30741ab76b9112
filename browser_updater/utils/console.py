"""Colorful console logging for browser_updater."""

import logging
import re
import sys
from datetime import datetime

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "white": "\033[37m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Longest prefix first
COMPONENT_COLORS = {
    "browser_updater.services.pool": COLORS["bright_magenta"],
    "browser_updater.services.fetcher": COLORS["bright_blue"],
    "browser_updater.services.batch": COLORS["bright_cyan"],
    "browser_updater.services": COLORS["cyan"],
    "browser_updater.config": COLORS["green"],
    "browser_updater.server": COLORS["bright_cyan"],
    "browser_updater.tools": COLORS["bright_blue"],
    "default": COLORS["white"],
}

OUTCOME_COLORS = {
    "Updated": COLORS["bright_green"],
    "Already current": COLORS["green"],
    "Needs restart": COLORS["bright_yellow"],
    "Failed": COLORS["bright_red"],
    "Unreachable": COLORS["red"],
    "Unknown": COLORS["yellow"],
}

NOISY_LOGGERS = (
    "asyncssh",
    "httpx",
    "httpcore",
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "fastmcp",
    "starlette",
)

_VERSION_PATTERN = re.compile(r"(?<![\w.])(\d+\.\d+(?:\.\d+)*)(?![\w.])")
_OUTCOME_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(label) for label in OUTCOME_COLORS) + r")\b"
)


class ColorfulFormatter(logging.Formatter):
    """Log formatter with level colours, component colours and highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created).astimezone()
        return f"{dt:%H:%M:%S}.{int(record.msecs):03d} {dt:%m/%d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, COLORS["white"])
        return self._colorize(f"{record.levelname:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix("browser_updater.")
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def _highlight_message(self, message: str) -> str:
        """Highlight versions and outcome labels."""
        if not self.use_colors:
            return message

        message = _VERSION_PATTERN.sub(
            f"{COLORS['bright_blue']}\\1{COLORS['reset']}", message
        )
        return _OUTCOME_PATTERN.sub(
            lambda m: f"{OUTCOME_COLORS[m.group(1)]}{m.group(1)}{COLORS['reset']}",
            message,
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "INFO", use_colors: bool = True) -> None:
    """Install the colorful handler on the browser_updater logger.

    Colours are turned off when stderr is not a TTY. Calling this again only
    updates the level.

    Args:
        level: Log level name
        use_colors: Whether to use ANSI colours on a TTY
    """
    if not sys.stderr.isatty():
        use_colors = False

    app_logger = logging.getLogger("browser_updater")
    app_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        app_logger.addHandler(handler)
        app_logger.propagate = False

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)
