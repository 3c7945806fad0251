"""Helpers for unstructured Kubernetes object bodies.

Objects are handled as plain ``dict`` bodies exactly as the API returns
them. Accessors tolerate missing ``metadata`` so that freshly built bodies
can be used directly.
"""

from __future__ import annotations

import copy
import hashlib
import json
from typing import Any

from .constants import ANNOTATION_SPEC_HASH
from .exceptions import ConversionError

_MISSING = object()


def deep_copy(obj: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of an object body."""
    return copy.deepcopy(obj)


def _metadata(obj: dict[str, Any]) -> dict[str, Any]:
    meta = obj.get("metadata")
    if meta is None:
        meta = obj["metadata"] = {}
    elif not isinstance(meta, dict):
        raise ConversionError(f"metadata must be a mapping, got {type(meta).__name__}")
    return meta


def get_name(obj: dict[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("name") or ""


def get_namespace(obj: dict[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("namespace") or ""


def get_labels(obj: dict[str, Any]) -> dict[str, str]:
    return dict((obj.get("metadata") or {}).get("labels") or {})


def get_annotations(obj: dict[str, Any]) -> dict[str, str]:
    return dict((obj.get("metadata") or {}).get("annotations") or {})


def get_generation(obj: dict[str, Any]) -> int:
    return int((obj.get("metadata") or {}).get("generation") or 0)


def _set_string(obj: dict[str, Any], key: str, value: str) -> None:
    meta = _metadata(obj)
    if value:
        meta[key] = value
    else:
        meta.pop(key, None)


def _set_map(obj: dict[str, Any], key: str, value: dict[str, str]) -> None:
    meta = _metadata(obj)
    if value:
        meta[key] = dict(value)
    else:
        meta.pop(key, None)


def set_name(obj: dict[str, Any], name: str) -> None:
    _set_string(obj, "name", name)


def set_namespace(obj: dict[str, Any], namespace: str) -> None:
    _set_string(obj, "namespace", namespace)


def set_labels(obj: dict[str, Any], labels: dict[str, str]) -> None:
    _set_map(obj, "labels", labels)


def set_annotations(obj: dict[str, Any], annotations: dict[str, str]) -> None:
    _set_map(obj, "annotations", annotations)


def nested_field(obj: dict[str, Any], *fields: str) -> tuple[Any, bool]:
    """Look up a nested field.

    Returns:
        Tuple of a deep copy of the value (None when absent) and whether it was found

    Raises:
        ConversionError: If an intermediate value is not a mapping
    """
    current: Any = obj
    for depth, field in enumerate(fields):
        if not isinstance(current, dict):
            path = ".".join(fields[:depth])
            raise ConversionError(f"{path} is of type {type(current).__name__}, expected a mapping")
        current = current.get(field, _MISSING)
        if current is _MISSING:
            return None, False
    return copy.deepcopy(current), True


def set_nested_field(obj: dict[str, Any], value: Any, *fields: str) -> None:
    """Set a nested field, creating intermediate mappings as needed."""
    current = obj
    for depth, field in enumerate(fields[:-1]):
        current = current.setdefault(field, {})
        if not isinstance(current, dict):
            path = ".".join(fields[: depth + 1])
            raise ConversionError(f"{path} is of type {type(current).__name__}, expected a mapping")
    current[fields[-1]] = copy.deepcopy(value)


def spec_hash(spec: Any) -> str:
    """Hash a spec payload.

    The payload is encoded as compact JSON with sorted keys, so equal payloads
    always produce the same digest.
    """
    try:
        encoded = json.dumps(spec, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ConversionError(f"Spec cannot be encoded as JSON: {e}") from e
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def set_spec_hash_annotation(obj: dict[str, Any], spec: Any) -> str:
    """Store the hash of ``spec`` in the spec-hash annotation of ``obj``."""
    digest = spec_hash(spec)
    annotations = get_annotations(obj)
    annotations[ANNOTATION_SPEC_HASH] = digest
    set_annotations(obj, annotations)
    return digest
