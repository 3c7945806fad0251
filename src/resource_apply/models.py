"""
Typed views of admission webhook configurations.

The apply functions work on unstructured bodies; these models are the typed
boundary. Unknown fields are kept as extras so converting a body to a model
and back is lossless. CA bundles stay in their wire form (base64 text).
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import (
    ADMISSION_API_VERSION,
    KIND_MUTATING_WEBHOOK_CONFIGURATION,
    KIND_VALIDATING_WEBHOOK_CONFIGURATION,
)
from .exceptions import ConversionError


class KubeModel(BaseModel):
    """Base model for Kubernetes API structures."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ObjectMeta(KubeModel):
    name: str | None = None
    namespace: str | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    generation: int | None = None
    resource_version: str | None = Field(None, alias="resourceVersion")
    uid: str | None = None


class ServiceReference(KubeModel):
    namespace: str
    name: str
    path: str | None = None
    port: int | None = None


class WebhookClientConfig(KubeModel):
    """How the API server connects to a webhook."""

    url: str | None = None
    service: ServiceReference | None = None
    ca_bundle: str | None = Field(None, alias="caBundle", description="Base64 encoded PEM bundle")


class RuleWithOperations(KubeModel):
    operations: list[str] | None = None
    api_groups: list[str] | None = Field(None, alias="apiGroups")
    api_versions: list[str] | None = Field(None, alias="apiVersions")
    resources: list[str] | None = None
    scope: str | None = None


class Webhook(KubeModel):
    """Fields shared by mutating and validating webhooks."""

    name: str
    client_config: WebhookClientConfig = Field(default_factory=WebhookClientConfig, alias="clientConfig")
    rules: list[RuleWithOperations] | None = None
    failure_policy: str | None = Field(None, alias="failurePolicy")
    match_policy: str | None = Field(None, alias="matchPolicy")
    namespace_selector: dict[str, Any] | None = Field(None, alias="namespaceSelector")
    object_selector: dict[str, Any] | None = Field(None, alias="objectSelector")
    side_effects: str | None = Field(None, alias="sideEffects")
    timeout_seconds: int | None = Field(None, alias="timeoutSeconds")
    admission_review_versions: list[str] | None = Field(None, alias="admissionReviewVersions")
    match_conditions: list[dict[str, Any]] | None = Field(None, alias="matchConditions")


class MutatingWebhook(Webhook):
    reinvocation_policy: str | None = Field(None, alias="reinvocationPolicy")


class ValidatingWebhook(Webhook):
    pass


class MutatingWebhookConfiguration(KubeModel):
    api_version: str = Field(ADMISSION_API_VERSION, alias="apiVersion")
    kind: str = KIND_MUTATING_WEBHOOK_CONFIGURATION
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    webhooks: list[MutatingWebhook] | None = None


class ValidatingWebhookConfiguration(KubeModel):
    api_version: str = Field(ADMISSION_API_VERSION, alias="apiVersion")
    kind: str = KIND_VALIDATING_WEBHOOK_CONFIGURATION
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    webhooks: list[ValidatingWebhook] | None = None


ModelT = TypeVar("ModelT", bound=KubeModel)


def to_unstructured(model: KubeModel) -> dict[str, Any]:
    """Convert a typed model to an unstructured body."""
    return model.model_dump(by_alias=True, exclude_none=True, mode="json")


def from_unstructured(obj: dict[str, Any], model_cls: type[ModelT]) -> ModelT:
    """Convert an unstructured body to a typed model.

    Raises:
        ConversionError: If the body does not match the model
    """
    try:
        return model_cls.model_validate(obj)
    except ValidationError as e:
        raise ConversionError(f"Cannot convert object to {model_cls.__name__}: {e}") from e
