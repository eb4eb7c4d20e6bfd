"""Request and submission context for structured logs.

Values bound here live in structlog's context variables, so every log line
emitted while a request or a submission is being handled carries them,
including lines from the cache layers and the ipstack client.
"""

import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog


def get_correlation_id() -> Optional[str]:
    return structlog.contextvars.get_contextvars().get("correlation_id")


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Iterator[None]:
    """Bind request-scoped values for the duration of the block.

    A correlation id already bound by an enclosing block is kept; a new one
    is generated only at the outermost level. Values shadowed by the block
    are restored on exit.

    Example:
        with bind_request_context(
            correlation_id=request.headers.get("X-Correlation-ID"),
            request_path=request.url.path,
            request_method=request.method,
        ):
            response = await call_next(request)
    """
    context: dict[str, Any] = {
        "correlation_id": correlation_id or get_correlation_id() or str(uuid.uuid4())
    }
    if request_path is not None:
        context["request_path"] = request_path
    if request_method is not None:
        context["request_method"] = request_method
    context.update(extra_context)

    with structlog.contextvars.bound_contextvars(**context):
        yield


@contextmanager
def bind_submission_context(submission_id: str, form_id: int) -> Iterator[None]:
    """Tag every log line of one submission with its ids."""
    with bind_request_context(submission_id=submission_id, form_id=form_id):
        yield


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
