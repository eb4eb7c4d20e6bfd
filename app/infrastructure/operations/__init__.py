"""Operation result types and status enums.

This module contains standardized result types for operations across
the application, including status enums, result dataclasses, and error
classifiers for client library exceptions.
"""

from infrastructure.operations.classifiers import (
    classify_dynamodb_error,
    classify_redis_error,
    classify_requests_error,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_requests_error",
    "classify_redis_error",
    "classify_dynamodb_error",
]
