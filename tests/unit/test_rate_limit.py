"""Tests for rate limiting utilities."""

from __future__ import annotations

import time
from unittest.mock import patch

import pytest
from kubernetes.client.exceptions import ApiException

from resource_apply.utils import rate_limit
from resource_apply.utils.rate_limit import is_rate_limit_error, rate_limit_k8s


class TestRateLimitK8s:
    """Test cases for Kubernetes API rate limiting."""

    def test_rate_limit_k8s_with_args(self):
        """Test rate limiting passes arguments through."""
        @rate_limit_k8s
        def test_func(a, b, c=None):
            return f"{a}-{b}-{c}"

        assert test_func("x", "y", c="z") == "x-y-z"

    @patch("resource_apply.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 20.0)
    def test_rate_limit_k8s_enforces_rate(self):
        """Test that rate limiting enforces minimum interval."""
        call_times = []

        @rate_limit_k8s
        def test_func():
            call_times.append(time.time())

        test_func()
        test_func()

        assert call_times[1] - call_times[0] >= 0.045

    @patch("resource_apply.utils.rate_limit._k8s_last_call_time", 0.0)
    @patch("resource_apply.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 1.0)
    def test_rate_limit_k8s_sleeps_outside_lock(self):
        """Test that the wait happens after the lock is released."""
        sleeps = []

        def fake_sleep(seconds):
            sleeps.append((seconds, rate_limit._k8s_lock.locked()))

        @rate_limit_k8s
        def test_func():
            return "ok"

        with patch("resource_apply.utils.rate_limit.time.sleep", side_effect=fake_sleep):
            assert test_func() == "ok"
            assert test_func() == "ok"
            assert test_func() == "ok"

        assert len(sleeps) == 2
        assert all(locked is False for _, locked in sleeps)
        # Each caller waits for its own reserved slot
        assert sleeps[0][0] == pytest.approx(1.0, abs=0.1)
        assert sleeps[1][0] == pytest.approx(2.0, abs=0.1)


class TestIsRateLimitError:
    """Test cases for is_rate_limit_error function."""

    def test_429(self):
        """Test that 429 is a rate limit error."""
        assert is_rate_limit_error(ApiException(status=429, reason="Too Many Requests"))

    def test_503_with_message(self):
        """Test that 503 mentioning the limit is a rate limit error."""
        assert is_rate_limit_error(ApiException(status=503, reason="rate limit exceeded"))

    def test_other_errors(self):
        """Test that other errors are not rate limit errors."""
        assert not is_rate_limit_error(ApiException(status=503, reason="Service Unavailable"))
        assert not is_rate_limit_error(ApiException(status=409, reason="Conflict"))
        assert not is_rate_limit_error(ValueError("429"))
