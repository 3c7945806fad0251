"""Shared fixtures for resource apply tests."""

from __future__ import annotations

import copy
import os
from typing import Any

# Keep client-side pacing out of the way in tests
os.environ.setdefault("K8S_RATE_LIMIT_PER_SECOND", "1000")

import pytest  # noqa: E402
from kubernetes.client.exceptions import ApiException  # noqa: E402

from resource_apply.exceptions import ResourceNotFoundError  # noqa: E402


class FakeResourceClient:
    """In-memory resource client behaving like the API server.

    Generation starts at 1 and is bumped whenever anything outside
    ``metadata`` and ``status`` changes. Every write bumps the resource
    version, and an update carrying a stale resource version is rejected with
    a 409 conflict.
    """

    def __init__(self):
        self.objects: dict[str, dict[str, Any]] = {}
        self.get_calls: list[str] = []
        self.create_calls: list[dict[str, Any]] = []
        self.update_calls: list[dict[str, Any]] = []
        self.get_error: Exception | None = None
        self.create_error: Exception | None = None
        self.update_error: Exception | None = None
        self._resource_version = 100

    def put(self, body: dict[str, Any], generation: int = 1) -> dict[str, Any]:
        """Store an object directly, as if another actor had written it."""
        stored = copy.deepcopy(body)
        meta = stored.setdefault("metadata", {})
        meta["generation"] = generation
        meta["resourceVersion"] = self._next_resource_version()
        self.objects[meta["name"]] = stored
        return copy.deepcopy(stored)

    def _next_resource_version(self) -> str:
        self._resource_version += 1
        return str(self._resource_version)

    @staticmethod
    def _payload(body: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in body.items() if k not in ("metadata", "status")}

    def get(self, name: str) -> dict[str, Any]:
        self.get_calls.append(name)
        if self.get_error is not None:
            raise self.get_error
        if name not in self.objects:
            raise ResourceNotFoundError(name)
        return copy.deepcopy(self.objects[name])

    def create(self, body: dict[str, Any]) -> dict[str, Any]:
        self.create_calls.append(copy.deepcopy(body))
        if self.create_error is not None:
            raise self.create_error
        return self.put(body, generation=1)

    def update(self, body: dict[str, Any]) -> dict[str, Any]:
        self.update_calls.append(copy.deepcopy(body))
        if self.update_error is not None:
            raise self.update_error

        name = body["metadata"]["name"]
        current = self.objects[name]
        if body["metadata"].get("resourceVersion") != current["metadata"]["resourceVersion"]:
            raise ApiException(status=409, reason="Conflict")

        generation = current["metadata"]["generation"]
        if self._payload(body) != self._payload(current):
            generation += 1
        return self.put(body, generation=generation)


@pytest.fixture
def fake_client() -> FakeResourceClient:
    return FakeResourceClient()


@pytest.fixture
def widget() -> dict[str, Any]:
    """A namespaced object with a spec."""
    return {
        "apiVersion": "example.com/v1",
        "kind": "Widget",
        "metadata": {
            "name": "my-widget",
            "namespace": "default",
            "labels": {"app": "widget"},
        },
        "spec": {"replicas": 2, "image": "widget:1.0"},
    }
