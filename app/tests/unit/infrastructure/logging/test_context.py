"""Unit tests for request context binding."""

import pytest
import structlog

from infrastructure.logging import (
    bind_request_context,
    bind_submission_context,
    clear_request_context,
    get_correlation_id,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _clean_context():
    clear_request_context()
    yield
    clear_request_context()


class TestBindRequestContext:
    """Test suite for bind_request_context."""

    def test_binds_given_correlation_id(self):
        with bind_request_context(correlation_id="req-123", request_path="/health"):
            assert get_correlation_id() == "req-123"
            assert structlog.contextvars.get_contextvars()["request_path"] == "/health"

        assert get_correlation_id() is None

    def test_generates_correlation_id(self):
        with bind_request_context():
            correlation_id = get_correlation_id()

        assert correlation_id
        assert len(correlation_id) == 36

    def test_extra_context_is_unbound_on_exit(self):
        with bind_request_context(submission_id="sub-1"):
            assert structlog.contextvars.get_contextvars()["submission_id"] == "sub-1"

        assert "submission_id" not in structlog.contextvars.get_contextvars()

    def test_context_unbound_after_exception(self):
        with pytest.raises(RuntimeError):
            with bind_request_context(correlation_id="req-err"):
                raise RuntimeError("boom")

        assert get_correlation_id() is None

    def test_nested_block_keeps_outer_correlation_id(self):
        with bind_request_context(correlation_id="req-outer"):
            with bind_request_context(request_path="/api/v1/geolocate"):
                assert get_correlation_id() == "req-outer"
            assert get_correlation_id() == "req-outer"
            assert "request_path" not in structlog.contextvars.get_contextvars()

    def test_shadowed_value_restored_on_exit(self):
        with bind_request_context(correlation_id="req-1", form_id=1):
            with bind_request_context(form_id=2):
                assert structlog.contextvars.get_contextvars()["form_id"] == 2
            assert structlog.contextvars.get_contextvars()["form_id"] == 1


class TestBindSubmissionContext:
    """Test suite for bind_submission_context."""

    def test_binds_submission_and_form_ids(self):
        with bind_request_context(correlation_id="req-9"):
            with bind_submission_context("sub-1", 7):
                context = structlog.contextvars.get_contextvars()
                assert context["submission_id"] == "sub-1"
                assert context["form_id"] == 7
                assert context["correlation_id"] == "req-9"

            assert "submission_id" not in structlog.contextvars.get_contextvars()

    def test_outside_request_generates_correlation_id(self):
        with bind_submission_context("sub-2", 1):
            assert get_correlation_id()

        assert get_correlation_id() is None
