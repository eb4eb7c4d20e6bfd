"""Error classifiers for client library exceptions.

Converts exceptions raised by the HTTP, redis and AWS client libraries into
standardized OperationResult objects so every infrastructure client reports
failures the same way.

Usage:
    from infrastructure.operations.classifiers import classify_requests_error

    try:
        response = session.get(url, timeout=5)
    except requests.RequestException as exc:
        return classify_requests_error(exc)
"""

import requests
from botocore.exceptions import BotoCoreError, ClientError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from infrastructure.logging.formatters import redact_query_secrets
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


def classify_requests_error(exc: Exception) -> OperationResult:
    """Classify a `requests` transport exception into OperationResult.

    Timeouts and connection failures are transient. Other request errors
    (invalid URL, too many redirects) are permanent. The message is the
    library's own error text, with the access key redacted from any quoted
    URL, so it can be shown to operators verbatim.

    Args:
        exc: Exception raised by requests

    Returns:
        OperationResult with the transport error text as message
    """
    message = redact_query_secrets(str(exc))
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(message, error_code="TIMEOUT")

    if isinstance(exc, requests.ConnectionError):
        return OperationResult.transient_error(message, error_code="CONNECTION_ERROR")

    if isinstance(exc, requests.RequestException):
        return OperationResult.permanent_error(message, error_code="HTTP_ERROR")

    return OperationResult.transient_error(
        f"{type(exc).__name__}: {message}", error_code="UNEXPECTED_ERROR"
    )


def classify_redis_error(exc: Exception) -> OperationResult:
    """Classify a redis exception into OperationResult.

    Connection and timeout errors are transient, anything else raised by
    the client is permanent.
    """
    if isinstance(exc, (RedisConnectionError, RedisTimeoutError)):
        return OperationResult.transient_error(
            f"Redis connection error: {exc}", error_code="CONNECTION_ERROR"
        )
    return OperationResult.permanent_error(
        f"Redis error: {exc}", error_code="REDIS_ERROR"
    )


def classify_dynamodb_error(exc: Exception) -> OperationResult:
    """Classify a botocore exception into OperationResult.

    Error Code Mapping:
    - ThrottlingException / ProvisionedThroughputExceededException: TRANSIENT_ERROR
    - AccessDeniedException: UNAUTHORIZED
    - ResourceNotFoundException: NOT_FOUND (missing table)
    - Other ClientError: PERMANENT_ERROR
    - BotoCoreError (endpoint, credentials, connection): TRANSIENT_ERROR
    """
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "Unknown")
        message = error.get("Message", str(exc))

        if code in (
            "ThrottlingException",
            "ProvisionedThroughputExceededException",
            "RequestLimitExceeded",
        ):
            return OperationResult.transient_error(message, error_code=code)
        if code == "AccessDeniedException":
            return OperationResult.error(
                OperationStatus.UNAUTHORIZED, message, error_code=code
            )
        if code == "ResourceNotFoundException":
            return OperationResult.error(
                OperationStatus.NOT_FOUND, message, error_code=code
            )
        return OperationResult.permanent_error(message, error_code=code)

    if isinstance(exc, BotoCoreError):
        return OperationResult.transient_error(
            f"AWS connection error: {exc}", error_code="CONNECTION_ERROR"
        )

    return OperationResult.permanent_error(
        f"{type(exc).__name__}: {exc}", error_code="UNEXPECTED_ERROR"
    )
