"""Utility modules for the reminder skill."""

from .log_sanitizer import sanitize_log, sanitize_for_log

__all__ = ["sanitize_log", "sanitize_for_log"]
