"""Utilities for emitting Kubernetes events about applied resources."""

from __future__ import annotations

import logging
from typing import Any

import kopf

from .. import metrics
from ..constants import CONTROLLER_NAME, EVENT_TYPE_NORMAL, EVENT_TYPE_WARNING
from ..logging import log_resource_event
from .errors import sanitize_exception

logger = logging.getLogger(__name__)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = EVENT_TYPE_NORMAL,
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Involved object (apiVersion, kind and metadata)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def describe_object(obj: dict[str, Any]) -> str:
    """Render ``Kind.group/namespace/name`` for event messages."""
    kind = obj.get("kind", "Object")
    api_version = obj.get("apiVersion", "")
    group = api_version.rsplit("/", 1)[0] if "/" in api_version else ""
    meta = obj.get("metadata") or {}
    name = meta.get("name", "")
    namespace = meta.get("namespace")

    resource = f"{kind}.{group}" if group else kind
    if namespace:
        return f"{resource}/{namespace}/{name}"
    return f"{resource}/{name}"


class EventRecorder:
    """Event sink reporting create and update outcomes.

    Reporting is fire-and-forget: a failure to post an event is logged and
    never reaches the caller.
    """

    def __init__(
        self,
        involved_object: dict[str, Any] | None = None,
        controller: str = CONTROLLER_NAME,
    ):
        """Initialize the recorder.

        Args:
            involved_object: Object events are attached to. When omitted the
                applied object itself is used.
            controller: Controller name used in structured logs
        """
        self.involved_object = involved_object
        self.controller = controller

    def report_create(self, obj: dict[str, Any], error: Exception | None = None) -> None:
        """Report the outcome of a create call."""
        kind = obj.get("kind", "Object")
        if error is None:
            self._record(obj, f"{kind}Created", f"Created {describe_object(obj)} because it was missing")
        else:
            self._record(
                obj,
                f"{kind}CreateFailed",
                f"Failed to create {describe_object(obj)}: {sanitize_exception(error)}",
                type_=EVENT_TYPE_WARNING,
            )

    def report_update(self, obj: dict[str, Any], error: Exception | None = None) -> None:
        """Report the outcome of an update call."""
        kind = obj.get("kind", "Object")
        if error is None:
            self._record(obj, f"{kind}Updated", f"Updated {describe_object(obj)} because it changed")
        else:
            self._record(
                obj,
                f"{kind}UpdateFailed",
                f"Failed to update {describe_object(obj)}: {sanitize_exception(error)}",
                type_=EVENT_TYPE_WARNING,
            )

    def _record(self, obj: dict[str, Any], reason: str, message: str, type_: str = EVENT_TYPE_NORMAL) -> None:
        meta = obj.get("metadata") or {}
        log_resource_event(
            logger,
            controller=self.controller,
            resource_kind=obj.get("kind", "Object"),
            resource_name=meta.get("name", "unknown"),
            namespace=meta.get("namespace") or "",
            event="warning" if type_ == EVENT_TYPE_WARNING else "info",
            reason=reason,
            message=message,
            level=logging.WARNING if type_ == EVENT_TYPE_WARNING else logging.INFO,
        )
        try:
            emit_event(self.involved_object or obj, reason, message, type_=type_)
        except Exception as e:
            metrics.event_failures_total.labels(reason=reason).inc()
            logger.warning(f"Failed to post event {reason}: {sanitize_exception(e)}")
