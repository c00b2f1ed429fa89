"""Utilities for redacting sensitive data from strings."""

import re

# Patterns for sensitive data that should be redacted
SENSITIVE_PATTERNS = [
    # key=value, key: value and Omnibus-style `artifactory_password  'x'`
    (r'(password|passphrase|token|secret|api[_-]?key)([=:"\s]+)\S+', r"\1\2REDACTED"),
    # Basic auth embedded in URLs
    (r"(https?://[^:/\s]+:)[^@\s]+@", r"\1REDACTED@"),
    # Bearer tokens
    (r"Bearer\s+\S+", "Bearer REDACTED"),
]


def redact_sensitive(text: str) -> str:
    """
    Redact sensitive data from text using pattern matching.

    Args:
        text: Text potentially containing sensitive data

    Returns:
        Text with sensitive data replaced with REDACTED markers

    Example:
        >>> redact_sensitive("password=hunter2")
        'password=REDACTED'
    """
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
    return result
