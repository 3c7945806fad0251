"""Error sanitization utilities to prevent information leakage."""

import re
from typing import Any


# Certificates and keys embedded in API error text
PEM_PATTERN = r"-----BEGIN [A-Z ]+-----[\s\S]*?-----END [A-Z ]+-----"

# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"(bearer\s+)[A-Za-z0-9\-_\.=]+",
    r"(\"?caBundle\"?\s*[:=]\s*\"?)[A-Za-z0-9/+=]{16,}",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "cabundle",
    "ca_bundle",
    "password",
    "secret",
    "token",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = re.sub(PEM_PATTERN, "[REDACTED PEM]", message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1[REDACTED]", sanitized, flags=re.IGNORECASE)
    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize a resource body by redacting sensitive fields.

    Lists of objects, such as webhook entries, are sanitized element by element.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional lowercase keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized copy with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        if key.lower() in all_sensitive:
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized
