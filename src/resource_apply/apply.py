"""Generic create-or-update of unstructured objects.

``apply_unstructured`` converges the object stored by the API toward a
required body. Metadata is merged additively, because labels and
annotations may be co-owned by other controllers, while the caller-owned
payload field (``spec`` by default) is replaced as a whole. A spec-hash
annotation on the written object records the caller's intent.

The object is written only when the merged metadata differs or the stored
generation differs from the generation the caller last observed.
"""

from __future__ import annotations

import logging
from typing import Any, NamedTuple

import jsonpatch

from . import metrics
from .client import ResourceClient
from .constants import (
    CONTROLLER_NAME,
    OPERATION_CREATE,
    OPERATION_NOOP,
    OPERATION_UPDATE,
    SPEC_FIELD,
)
from .exceptions import ConversionError, ResourceNotFoundError, WriteFailedError
from .logging import log_resource_event
from .merge import ensure_object_meta
from .unstructured import (
    deep_copy,
    get_generation,
    get_name,
    get_namespace,
    nested_field,
    set_nested_field,
    set_spec_hash_annotation,
)
from .utils.errors import sanitize_dict, sanitize_exception
from .utils.events import EventRecorder

logger = logging.getLogger(__name__)


class ApplyResult(NamedTuple):
    """Outcome of an apply call."""

    object: dict[str, Any]
    changed: bool


def validate_body(obj: Any) -> None:
    """Check that ``obj`` is an object body the apply functions can handle.

    Raises:
        ConversionError: If the body is not a mapping or has no name
    """
    if not isinstance(obj, dict):
        raise ConversionError(f"Object must be a mapping, got {type(obj).__name__}")
    meta = obj.get("metadata")
    if not isinstance(meta, dict):
        raise ConversionError("Object has no metadata mapping")
    if not meta.get("name"):
        raise ConversionError("Object has no metadata.name")


def apply_unstructured(
    resource_client: ResourceClient,
    kind: str,
    recorder: EventRecorder | None,
    required_original: dict[str, Any],
    expected_generation: int,
    spec_field: str = SPEC_FIELD,
) -> ApplyResult:
    """Ensure the form of ``required_original`` is present in the API.

    If the object does not exist it is created. Otherwise the metadata of the
    required object is merged into the existing object and, unless nothing
    changed since ``expected_generation``, the required ``spec_field`` replaces
    the stored one in a single update.

    Create and update errors are not re-raised as the transport raised them:
    they are wrapped in ``WriteFailedError`` (original as ``.error`` and
    ``__cause__``), so retry wrappers must catch ``WriteFailedError`` and
    check ``retriable`` rather than catching ``ApiException``. Read errors
    other than not-found propagate unchanged. Event sink failures are logged
    and never change the outcome.

    Args:
        resource_client: Transport for the object's resource type
        kind: Resource kind, used in logs and metrics
        recorder: Event sink for create and update outcomes, may be None
        required_original: Required object body, never modified
        expected_generation: Generation observed after the last successful apply
        spec_field: Top-level field owned exclusively by the caller

    Returns:
        ApplyResult with the stored object and whether a write was performed

    Raises:
        ConversionError: If the required body is malformed
        WriteFailedError: If a create or update was attempted and failed
        ApiException: If reading the existing object failed
    """
    validate_body(required_original)
    required = deep_copy(required_original)

    required_spec, has_spec = nested_field(required, spec_field)
    set_spec_hash_annotation(required, required_spec)

    name = get_name(required)
    namespace = get_namespace(required)

    try:
        existing = resource_client.get(name)
    except ResourceNotFoundError:
        return _create(resource_client, kind, recorder, required)

    existing_copy = deep_copy(existing)
    modified = ensure_object_meta(existing_copy, required)

    if not modified and get_generation(existing_copy) == expected_generation:
        metrics.apply_total.labels(kind=kind, operation=OPERATION_NOOP, result="success").inc()
        return ApplyResult(existing_copy, False)

    if not has_spec:
        # Nothing the caller owns to write
        metrics.apply_total.labels(kind=kind, operation=OPERATION_NOOP, result="success").inc()
        return ApplyResult(existing_copy, False)

    to_write = existing_copy
    set_nested_field(to_write, required_spec, spec_field)

    if logger.isEnabledFor(logging.DEBUG):
        changes = jsonpatch.make_patch(sanitize_dict(existing), sanitize_dict(to_write))
        logger.debug(f"{kind} {namespace + '/' + name!r} changes: {changes.to_string()}")

    try:
        actual = resource_client.update(to_write)
    except Exception as e:
        metrics.apply_total.labels(kind=kind, operation=OPERATION_UPDATE, result="error").inc()
        _report(recorder, "report_update", required, e)
        raise WriteFailedError(OPERATION_UPDATE, kind, name, e) from e

    metrics.apply_total.labels(kind=kind, operation=OPERATION_UPDATE, result="success").inc()
    _report(recorder, "report_update", required, None)
    _log_write(kind, name, namespace, "updated", generation=get_generation(actual))
    return ApplyResult(actual, True)


def _create(
    resource_client: ResourceClient,
    kind: str,
    recorder: EventRecorder | None,
    required: dict[str, Any],
) -> ApplyResult:
    name = get_name(required)
    try:
        actual = resource_client.create(required)
    except Exception as e:
        metrics.apply_total.labels(kind=kind, operation=OPERATION_CREATE, result="error").inc()
        _report(recorder, "report_create", required, e)
        raise WriteFailedError(OPERATION_CREATE, kind, name, e) from e

    metrics.apply_total.labels(kind=kind, operation=OPERATION_CREATE, result="success").inc()
    _report(recorder, "report_create", required, None)
    _log_write(kind, name, get_namespace(required), "created", generation=get_generation(actual))
    return ApplyResult(actual, True)


def _report(
    recorder: EventRecorder | None,
    method: str,
    obj: dict[str, Any],
    error: Exception | None,
) -> None:
    """Hand an outcome to the event sink. Sink failures are logged and dropped."""
    if recorder is None:
        return
    try:
        getattr(recorder, method)(obj, error)
    except Exception as e:
        metrics.event_failures_total.labels(reason=method).inc()
        logger.warning(f"Event sink {method} failed for {get_name(obj)!r}: {sanitize_exception(e)}")


def _log_write(kind: str, name: str, namespace: str, event: str, **kwargs: Any) -> None:
    log_resource_event(
        logger,
        controller=CONTROLLER_NAME,
        resource_kind=kind,
        resource_name=name,
        namespace=namespace,
        event=event,
        reason=f"{kind}{event.capitalize()}",
        message=f"{kind} {name} {event}",
        **kwargs,
    )
