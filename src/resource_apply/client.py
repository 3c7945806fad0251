"""Kubernetes transport for reading and writing resources.

``ResourceClient`` is the interface the apply functions depend on.
``KubernetesResourceClient`` implements it on top of ``CustomObjectsApi``,
which serves any API group (including built-in ones such as
``admissionregistration.k8s.io``) by group, version and plural.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Protocol

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from . import metrics
from .exceptions import ResourceNotFoundError
from .utils.rate_limit import is_rate_limit_error, rate_limit_k8s

logger = logging.getLogger(__name__)


class ResourceClient(Protocol):
    """Minimal transport for a single resource type."""

    def get(self, name: str) -> dict[str, Any]:
        """Return the stored object or raise ResourceNotFoundError."""
        ...

    def create(self, body: dict[str, Any]) -> dict[str, Any]:
        ...

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        ...


class KubernetesResourceClient:
    """Resource client for one group/version/plural, optionally namespaced."""

    def __init__(
        self,
        api: client.CustomObjectsApi,
        group: str,
        version: str,
        plural: str,
        namespace: str | None = None,
        request_timeout: float | tuple[float, float] | None = None,
    ):
        """Initialize the resource client.

        Args:
            api: Kubernetes CustomObjectsApi instance
            group: API group (e.g., "admissionregistration.k8s.io")
            version: API version
            plural: Resource plural (e.g., "mutatingwebhookconfigurations")
            namespace: Namespace for namespaced resources, None for cluster-scoped
            request_timeout: Passed unaltered as ``_request_timeout`` to every call
        """
        self.api = api
        self.group = group
        self.version = version
        self.plural = plural
        self.namespace = namespace
        self.request_timeout = request_timeout

    def _call(self, operation: str, method: Callable[..., Any], **kwargs: Any) -> dict[str, Any]:
        if self.namespace is not None:
            kwargs["namespace"] = self.namespace
        if self.request_timeout is not None:
            kwargs["_request_timeout"] = self.request_timeout

        start_time = time.time()
        try:
            result = rate_limit_k8s(method)(
                group=self.group,
                version=self.version,
                plural=self.plural,
                **kwargs,
            )
            metrics.api_call_total.labels(operation=operation, plural=self.plural, result="success").inc()
            return result
        except ApiException as e:
            result_label = "not_found" if e.status == 404 else "error"
            metrics.api_call_total.labels(operation=operation, plural=self.plural, result=result_label).inc()
            if is_rate_limit_error(e):
                metrics.rate_limit_hits_total.labels(plural=self.plural).inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(operation=operation, plural=self.plural).observe(duration)

    def get(self, name: str) -> dict[str, Any]:
        method = (
            self.api.get_namespaced_custom_object
            if self.namespace is not None
            else self.api.get_cluster_custom_object
        )
        try:
            return self._call("get", method, name=name)
        except ApiException as e:
            if e.status == 404:
                raise ResourceNotFoundError(name, kind=self.plural) from e
            raise

    def create(self, body: dict[str, Any]) -> dict[str, Any]:
        method = (
            self.api.create_namespaced_custom_object
            if self.namespace is not None
            else self.api.create_cluster_custom_object
        )
        return self._call("create", method, body=body)

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        """Replace the stored object.

        The ``resourceVersion`` carried in ``body`` is sent along, so the API
        server rejects the write with 409 if the object changed meanwhile.
        """
        method = (
            self.api.replace_namespaced_custom_object
            if self.namespace is not None
            else self.api.replace_cluster_custom_object
        )
        name = (body.get("metadata") or {}).get("name", "")
        return self._call("update", method, name=name, body=body)


def resource_client_for(
    api: client.CustomObjectsApi,
    api_version: str,
    plural: str,
    namespace: str | None = None,
    request_timeout: float | tuple[float, float] | None = None,
) -> KubernetesResourceClient:
    """Build a resource client from an ``apiVersion`` string.

    Args:
        api: Kubernetes CustomObjectsApi instance
        api_version: ``group/version``
        plural: Resource plural
        namespace: Namespace for namespaced resources
        request_timeout: Per-request timeout forwarded to the client

    Returns:
        KubernetesResourceClient for the resource

    Raises:
        ValueError: If ``api_version`` names the core group, which
            CustomObjectsApi does not serve
    """
    group, _, version = api_version.rpartition("/")
    if not group:
        raise ValueError(f"Core API resources are not served by CustomObjectsApi: {api_version!r}")
    return KubernetesResourceClient(
        api,
        group=group,
        version=version,
        plural=plural,
        namespace=namespace,
        request_timeout=request_timeout,
    )


def get_k8s_client() -> client.CustomObjectsApi:
    """Get Kubernetes CustomObjectsApi client."""
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return client.CustomObjectsApi()
