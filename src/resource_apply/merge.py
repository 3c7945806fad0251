"""Conservative merging of object metadata.

Identity fields are only ever set, never cleared, and labels and annotations
are merged key by key so that keys owned by other actors survive.
"""

from __future__ import annotations

from typing import Any, Mapping

from .unstructured import (
    get_annotations,
    get_labels,
    get_name,
    get_namespace,
    set_annotations,
    set_labels,
    set_name,
    set_namespace,
)


def set_string_if_set(existing: str, required: str) -> tuple[str, bool]:
    """Return ``required`` when it is non-empty, otherwise keep ``existing``.

    Returns:
        Tuple of the resulting value and whether it differs from ``existing``
    """
    if required and required != existing:
        return required, True
    return existing, False


def merge_map(existing: Mapping[str, str] | None, required: Mapping[str, str] | None) -> tuple[dict[str, str], bool]:
    """Merge ``required`` into a copy of ``existing``.

    Every key of ``required`` is written, required values win on collision and
    keys only present in ``existing`` are kept.

    Returns:
        Tuple of the merged map and whether any key was added or changed
    """
    merged = dict(existing or {})
    changed = False
    for key, value in (required or {}).items():
        if key not in merged or merged[key] != value:
            merged[key] = value
            changed = True
    return merged, changed


def ensure_object_meta(existing: dict[str, Any], required: dict[str, Any]) -> bool:
    """Merge the metadata of ``required`` into ``existing`` in place.

    Args:
        existing: Object body to update
        required: Object body holding the desired metadata

    Returns:
        True if namespace, name, labels or annotations changed value
    """
    namespace, namespace_changed = set_string_if_set(get_namespace(existing), get_namespace(required))
    name, name_changed = set_string_if_set(get_name(existing), get_name(required))
    labels, labels_changed = merge_map(get_labels(existing), get_labels(required))
    annotations, annotations_changed = merge_map(get_annotations(existing), get_annotations(required))

    set_namespace(existing, namespace)
    set_name(existing, name)
    set_labels(existing, labels)
    set_annotations(existing, annotations)

    return namespace_changed or name_changed or labels_changed or annotations_changed
