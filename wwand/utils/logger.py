"""
Logger utility for wwand
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str = None, fmt: str = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (defaults to 'wwand').
        fmt:  Log format string.  Defaults to the standard timestamped format.
              Pass ``"%(message)s"`` to emit the bare message when journald
              already adds timestamp and source information.
    """
    logger = logging.getLogger(name or "wwand")

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger


def setup_logging(level: str = "INFO", fmt: str = None) -> logging.Logger:
    """Configure the package root logger and return it."""
    logger = get_logger("wwand", fmt)
    logger.setLevel(level.upper())
    return logger


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Appends correlation fields as ``key=value`` pairs to every message."""

    def process(self, msg, kwargs):
        fields = self.extra or {}
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("context", dict(fields))
        kwargs["extra"] = extra
        if fields:
            suffix = " ".join(f"{k}={v}" for k, v in fields.items())
            msg = f"{msg} [{suffix}]"
        return msg, kwargs


@dataclass(frozen=True)
class LogContext:
    """
    Immutable bag of correlation fields threaded through every call.

    Scopes add fields with with_fields(), which returns a new context and
    leaves the parent untouched.
    """

    fields: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def root(cls, **fields: Any) -> "LogContext":
        return cls().with_fields(**fields)

    def with_fields(self, **fields: Any) -> "LogContext":
        merged = dict(self.fields)
        merged.update(fields)
        return LogContext(tuple(merged.items()))

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.fields)

    def logger(self, name: Optional[str] = None) -> ContextLoggerAdapter:
        return ContextLoggerAdapter(logging.getLogger(name or "wwand"), self.as_dict())

