"""Shared utilities."""

from .exception_logger import ExceptionLogger, log_exception

__all__ = ["ExceptionLogger", "log_exception"]
