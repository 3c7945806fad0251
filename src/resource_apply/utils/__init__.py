"""Utility functions for resource apply."""

from .errors import sanitize_dict, sanitize_error_message, sanitize_exception
from .events import EventRecorder, describe_object, emit_event
from .rate_limit import is_rate_limit_error, rate_limit_k8s

__all__ = [
    "EventRecorder",
    "describe_object",
    "emit_event",
    "sanitize_dict",
    "sanitize_error_message",
    "sanitize_exception",
    "is_rate_limit_error",
    "rate_limit_k8s",
]
