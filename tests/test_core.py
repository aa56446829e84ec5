"""Tests for request context, log filtering and error mapping."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from clipfeed.core.context import (
    RequestContext,
    clear_context,
    get_account_id,
    get_context,
    get_request_id,
    set_account_id,
    set_request_id,
)
from clipfeed.core.errors import (
    ConcurrentUpdateError,
    ConflictError,
    EngineError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    RateLimitExceededError,
    handle_engine_error,
)
from clipfeed.core.logging import filter_sensitive_data


class TestRequestContext:
    """Tests for context variables."""

    def test_set_and_clear(self):
        clear_context()
        request_id = set_request_id()
        set_account_id(uuid4())

        assert get_request_id() == request_id
        assert set(get_context()) == {"request_id", "account_id"}

        clear_context()
        assert get_context() == {}

    def test_context_manager_restores_previous(self):
        clear_context()
        account_id = uuid4()

        with RequestContext(request_id="job-1", account_id=account_id):
            assert get_request_id() == "job-1"
            assert get_account_id() == str(account_id)

        assert get_request_id() == ""
        assert get_account_id() is None


class TestFilterSensitiveData:
    """Tests for filter_sensitive_data."""

    def test_masks_tokens(self):
        event = filter_sensitive_data(
            None, "info", {"event": "x", "access_token": "abcdefghij", "video_id": "v"}
        )
        assert event["access_token"] == "ab******ij"
        assert event["video_id"] == "v"

    def test_short_values_fully_masked(self):
        event = filter_sensitive_data(None, "info", {"secret": "abc"})
        assert event["secret"] == "***"

    def test_nested(self):
        event = filter_sensitive_data(
            None, "info", {"headers": {"authorization": "Bearer xyz123"}}
        )
        assert event["headers"]["authorization"].startswith("Be")
        assert "xyz" not in event["headers"]["authorization"]


class TestHandleEngineError:
    """Tests for error-to-status mapping."""

    @pytest.mark.parametrize(
        "error,status_code",
        [
            (NotFoundError(), 404),
            (ForbiddenError(), 403),
            (ConflictError(), 409),
            (InvalidArgumentError(), 400),
            (InvalidOperationError(), 422),
            (RateLimitExceededError(), 429),
            (ConcurrentUpdateError(), 409),
            (EngineError("boom"), 500),
        ],
    )
    def test_status(self, error, status_code):
        exc = handle_engine_error(error)
        assert exc.status_code == status_code
        assert exc.detail == error.message


class TestRequestContextMiddleware:
    """Request id propagation."""

    def test_generates_request_id(self, client: TestClient):
        response = client.get("/health/live")
        assert response.headers["X-Request-ID"]

    def test_echoes_request_id(self, client: TestClient):
        response = client.get("/health/live", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_error_body_carries_request_id(self, client: TestClient):
        response = client.get(
            f"/v1/videos/{uuid4()}", headers={"X-Request-ID": "req-404"}
        )
        assert response.status_code == 404
        assert response.json()["request_id"] == "req-404"
