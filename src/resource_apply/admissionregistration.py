"""Apply functions for admission webhook configurations.

CA bundles of webhook client configs are usually injected by a separate
controller after the configuration is created. Before delegating to
``apply_unstructured`` the bundle of every required webhook is therefore
taken from the stored webhook of the same name, so applying a configuration
never strips an injected bundle.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar, Union

from kubernetes import client

from . import metrics
from .apply import apply_unstructured
from .client import KubernetesResourceClient, ResourceClient
from .constants import (
    ADMISSION_GROUP,
    ADMISSION_VERSION,
    KIND_MUTATING_WEBHOOK_CONFIGURATION,
    KIND_VALIDATING_WEBHOOK_CONFIGURATION,
    PLURAL_MUTATING_WEBHOOK_CONFIGURATIONS,
    PLURAL_VALIDATING_WEBHOOK_CONFIGURATIONS,
    WEBHOOKS_FIELD,
)
from .exceptions import ConversionError, ResourceNotFoundError
from .models import (
    MutatingWebhookConfiguration,
    ValidatingWebhookConfiguration,
    from_unstructured,
    to_unstructured,
)
from .utils.events import EventRecorder

logger = logging.getLogger(__name__)

WebhookConfiguration = Union[MutatingWebhookConfiguration, ValidatingWebhookConfiguration]
ConfigT = TypeVar("ConfigT", MutatingWebhookConfiguration, ValidatingWebhookConfiguration)


def mutating_webhook_client(api: client.CustomObjectsApi, **kwargs: Any) -> KubernetesResourceClient:
    return KubernetesResourceClient(
        api, ADMISSION_GROUP, ADMISSION_VERSION, PLURAL_MUTATING_WEBHOOK_CONFIGURATIONS, **kwargs
    )


def validating_webhook_client(api: client.CustomObjectsApi, **kwargs: Any) -> KubernetesResourceClient:
    return KubernetesResourceClient(
        api, ADMISSION_GROUP, ADMISSION_VERSION, PLURAL_VALIDATING_WEBHOOK_CONFIGURATIONS, **kwargs
    )


def copy_webhook_ca_bundles(
    resource_client: ResourceClient,
    required: ConfigT,
) -> int:
    """Copy CA bundles from the stored configuration into ``required``.

    Webhooks are matched by name. Only ``clientConfig.caBundle`` is taken
    from the stored webhook; required webhooks without a stored counterpart
    keep their own bundle, and stored webhooks missing from ``required`` are
    dropped. ``required`` is modified in place.

    Args:
        resource_client: Transport for the configuration's resource type
        required: Required configuration, already copied by the caller

    Returns:
        Number of bundles copied

    Raises:
        ConversionError: If the stored configuration cannot be converted
        ApiException: If reading the stored configuration failed
    """
    try:
        existing_obj = resource_client.get(required.metadata.name or "")
    except ResourceNotFoundError:
        return 0

    existing = from_unstructured(existing_obj, type(required))
    existing_webhooks = {webhook.name: webhook for webhook in existing.webhooks or []}

    copied = 0
    webhooks = []
    for webhook in required.webhooks or []:
        if webhook.name in existing_webhooks:
            webhook.client_config.ca_bundle = existing_webhooks[webhook.name].client_config.ca_bundle
            copied += 1
        webhooks.append(webhook)
    if required.webhooks is not None:
        required.webhooks = webhooks
    return copied


def _apply_webhook_configuration(
    resource_client: ResourceClient,
    kind: str,
    recorder: EventRecorder | None,
    required_original: ConfigT,
    expected_generation: int,
) -> tuple[ConfigT, bool]:
    required = required_original.model_copy(deep=True)
    if not required.metadata.name:
        raise ConversionError(f"{kind} has no metadata.name")

    copied = copy_webhook_ca_bundles(resource_client, required)
    if copied:
        metrics.ca_bundle_preserved_total.labels(kind=kind).inc(copied)
        logger.debug(f"Preserved {copied} CA bundle(s) of {kind} {required.metadata.name!r}")

    result = apply_unstructured(
        resource_client,
        kind,
        recorder,
        to_unstructured(required),
        expected_generation,
        spec_field=WEBHOOKS_FIELD,
    )
    return from_unstructured(result.object, type(required)), result.changed


def apply_mutating_webhook_configuration(
    api: client.CustomObjectsApi,
    recorder: EventRecorder | None,
    required_original: MutatingWebhookConfiguration,
    expected_generation: int,
    resource_client: ResourceClient | None = None,
) -> tuple[MutatingWebhookConfiguration, bool]:
    """Ensure the mutating webhook configuration is present in the API.

    If it does not exist it is created. If it does, its metadata is merged
    with the required metadata and the webhooks are replaced when anything
    changed since ``expected_generation``. CA bundles already injected into
    the stored configuration are preserved.

    Args:
        api: Kubernetes CustomObjectsApi instance
        recorder: Event sink, may be None
        required_original: Required configuration, never modified
        expected_generation: Generation observed after the last successful apply
        resource_client: Overrides the transport built from ``api``

    Returns:
        Tuple of the stored configuration and whether a write was performed
    """
    return _apply_webhook_configuration(
        resource_client or mutating_webhook_client(api),
        KIND_MUTATING_WEBHOOK_CONFIGURATION,
        recorder,
        required_original,
        expected_generation,
    )


def apply_validating_webhook_configuration(
    api: client.CustomObjectsApi,
    recorder: EventRecorder | None,
    required_original: ValidatingWebhookConfiguration,
    expected_generation: int,
    resource_client: ResourceClient | None = None,
) -> tuple[ValidatingWebhookConfiguration, bool]:
    """Ensure the validating webhook configuration is present in the API.

    Same contract as ``apply_mutating_webhook_configuration``.
    """
    return _apply_webhook_configuration(
        resource_client or validating_webhook_client(api),
        KIND_VALIDATING_WEBHOOK_CONFIGURATION,
        recorder,
        required_original,
        expected_generation,
    )


_APPLIERS: dict[str, tuple[type[Any], Callable[..., tuple[Any, bool]]]] = {
    KIND_MUTATING_WEBHOOK_CONFIGURATION: (MutatingWebhookConfiguration, apply_mutating_webhook_configuration),
    KIND_VALIDATING_WEBHOOK_CONFIGURATION: (ValidatingWebhookConfiguration, apply_validating_webhook_configuration),
}


def apply_webhook_configuration(
    api: client.CustomObjectsApi,
    recorder: EventRecorder | None,
    manifest: dict[str, Any],
    expected_generation: int,
) -> tuple[WebhookConfiguration, bool]:
    """Apply a webhook configuration given as a raw manifest.

    Raises:
        ConversionError: If the manifest is not a webhook configuration
    """
    kind = manifest.get("kind") if isinstance(manifest, dict) else None
    if kind not in _APPLIERS:
        raise ConversionError(f"Unsupported kind for webhook configuration apply: {kind!r}")

    model_cls, applier = _APPLIERS[kind]
    return applier(api, recorder, from_unstructured(manifest, model_cls), expected_generation)
