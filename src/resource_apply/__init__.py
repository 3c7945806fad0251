"""Create-or-update of Kubernetes objects without clobbering fields owned by others."""

from .admissionregistration import (
    apply_mutating_webhook_configuration,
    apply_validating_webhook_configuration,
    apply_webhook_configuration,
)
from .apply import ApplyResult, apply_unstructured
from .client import KubernetesResourceClient, ResourceClient, resource_client_for
from .exceptions import (
    ConversionError,
    ResourceApplyError,
    ResourceNotFoundError,
    WriteFailedError,
)
from .merge import ensure_object_meta, merge_map, set_string_if_set
from .utils.events import EventRecorder

__version__ = "0.1.0"

__all__ = [
    "ApplyResult",
    "ConversionError",
    "EventRecorder",
    "KubernetesResourceClient",
    "ResourceApplyError",
    "ResourceClient",
    "ResourceNotFoundError",
    "WriteFailedError",
    "apply_mutating_webhook_configuration",
    "apply_unstructured",
    "apply_validating_webhook_configuration",
    "apply_webhook_configuration",
    "ensure_object_meta",
    "merge_map",
    "resource_client_for",
    "set_string_if_set",
]
