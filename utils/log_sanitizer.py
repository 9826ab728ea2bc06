"""Log sanitizer - redacts sensitive fragments of reminder text.

Reminder titles and messages are free-form user text and end up in the
server and worker log files.
"""

import re
from typing import Optional

# Patterns to detect and redact sensitive data
SENSITIVE_PATTERNS = [
    # Email addresses
    (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b', '[EMAIL]'),

    # Phone numbers with an international or trunk prefix
    (r'(?:\+\d{1,3}|\b0)[\s.-]?\d{2,4}[\s.-]?\d{3,4}[\s.-]?\d{3,4}\b', '[PHONE]'),

    # Passwords, tokens and keys in key=value or key: value form
    (r'(password|passcode|pin|secret|token|api_key|apikey)["\s:=]+[^\s,}"\']{4,}',
     r'\1=[REDACTED]'),
]

_COMPILED_PATTERNS = [(re.compile(p, re.IGNORECASE), r) for p, r in SENSITIVE_PATTERNS]


def sanitize_log(text: str) -> str:
    """Replace sensitive fragments of text with placeholders."""
    for pattern, replacement in _COMPILED_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def sanitize_for_log(text: Optional[str], max_length: int = 120) -> str:
    """Redact a reminder title or message and cut it to fit one log line."""
    if text is None:
        return "<None>"

    text = sanitize_log(text)
    if len(text) > max_length:
        return f"{text[:max_length]}... ({len(text)} chars)"
    return text
