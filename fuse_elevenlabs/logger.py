import logging
import re

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from fuse_elevenlabs.utils.execution_id import get_execution_id

# Custom theme for node execution logs
custom_theme = Theme(
    {
        "info": "dim cyan",
        "warning": "magenta",
        "error": "bold red",
        "node": "bold blue",
        "item": "bold yellow",
        "api": "bold green",
    }
)

# Logs go to stderr so command output on stdout stays machine readable
console = Console(theme=custom_theme, stderr=True)

LOGGER_NAME = "fuse_elevenlabs"


class CompactFilter(logging.Filter):
    """Filters log messages to shorten UUIDs and float numbers and hide API keys."""

    # Regex for UUID (standard 8-4-4-4-12 format)
    UUID_PATTERN = re.compile(
        r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.I
    )
    # Regex for long floats (4+ decimal places)
    FLOAT_PATTERN = re.compile(r"(\d+\.\d{4,})")
    # xi-api-key header values or sk_ style keys that end up in messages
    API_KEY_PATTERN = re.compile(r"(xi-api-key['\"]?\s*[:=]\s*['\"]?)([^'\",\s}]+)|\bsk_[A-Za-z0-9]{8,}\b", re.I)

    def filter(self, record):
        if not isinstance(record.msg, str):
            return True

        msg = record.msg.replace("fuse_elevenlabs.integrations.elevenlabs.", "elevenlabs.")
        msg = msg.replace("fuse_elevenlabs.workflows.engine.", "engine.")

        # 1. Redact secrets before anything else touches the message
        def redact(match):
            if match.group(1):
                return f"{match.group(1)}***"
            return "sk_***"

        msg = self.API_KEY_PATTERN.sub(redact, msg)

        # 2. Shorten UUIDs: a1e9166a-15f5-4ccf-b2ff-a6a92c37e645 -> a1e9..
        def shorten_uuid(match):
            val = match.group(0)
            return f"{val[:4]}.."

        # 3. Shorten Floats: 0.012413125... -> 0.012
        def shorten_float(match):
            val = float(match.group(0))
            return f"{val:.3f}"

        msg = self.UUID_PATTERN.sub(shorten_uuid, msg)
        msg = self.FLOAT_PATTERN.sub(shorten_float, msg)

        # 4. Add execution ID prefix if available
        execution_id = get_execution_id()
        if execution_id:
            msg = f"[{execution_id[:8]}] {msg}"

        record.msg = msg
        return True


def setup_global_logger(log_level: str = "INFO"):
    """
    Configures the package logger using Rich for readable output.
    """
    logger = logging.getLogger(LOGGER_NAME)

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if not logger.handlers:
        rich_handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            markup=False,
            show_path=False,  # Compact: don't show the file path
            show_time=True,
            omit_repeated_times=True,
            keywords=[
                "node",
                "item",
                "elevenlabs",
                "DEBUG",
                "INFO",
                "WARNING",
                "ERROR",
            ],
        )

        # Simple format for message only
        formatter = logging.Formatter("%(message)s", datefmt="[%X]")
        rich_handler.setFormatter(formatter)
        rich_handler.addFilter(CompactFilter())
        logger.addHandler(rich_handler)

    return logger


# Export a module-level logger for simple imports
logger = logging.getLogger(LOGGER_NAME)
