"""Logging configuration with secret redaction.

Log records go to stderr so that the summary printed on stdout stays clean.
"""

import json
import logging
import re
from typing import ClassVar

from rich.console import Console
from rich.logging import RichHandler


class SecretRedactingFilter(logging.Filter):
    """Filter that redacts GitHub credentials from log messages."""

    SECRET_PATTERNS: ClassVar[list[tuple[re.Pattern[str], str]]] = [
        # Prefixed tokens: personal, OAuth, user-to-server, server-to-server, refresh
        (re.compile(r"gh[pousr]_[A-Za-z0-9]{20,}"), "[REDACTED_GH_TOKEN]"),
        (re.compile(r"github_pat_[A-Za-z0-9_]+"), "[REDACTED_GH_PAT]"),
        (re.compile(r"(Authorization:\s*)[^\s,\]]+(\s+[^\s,\]]+)?", re.IGNORECASE), r"\1[REDACTED]"),
        (re.compile(r"Bearer\s+[A-Za-z0-9_\-\.]+"), "Bearer [REDACTED]"),
        (re.compile(r"(token[=:]\s*)[^\s,\]]+", re.IGNORECASE), r"\1[REDACTED]"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact secrets from the message and its string arguments."""
        record.msg = self.redact(str(record.msg))
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: self.redact(value) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            else:
                record.args = tuple(
                    self.redact(arg) if isinstance(arg, str) else arg for arg in record.args
                )
        return True

    def redact(self, text: str) -> str:
        for pattern, replacement in self.SECRET_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


class JsonLineFormatter(logging.Formatter):
    """Format each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(verbose: bool = False, json_format: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: Enable debug level logging.
        json_format: Emit one JSON object per line instead of rich output.
    """
    level = logging.DEBUG if verbose else logging.INFO

    handler: logging.Handler
    if json_format:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonLineFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=verbose,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))

    handler.addFilter(SecretRedactingFilter())
    logging.basicConfig(level=level, handlers=[handler], force=True)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
