"""Result values for provider lookups and cache backend calls.

Clients and cache layers never let ``requests``, ``redis`` or ``botocore``
exceptions escape; they return an ``OperationResult`` and the caller decides
whether the failure becomes an error record, a cache miss or a log line.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from infrastructure.operations.status import OperationStatus


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one I/O call.

    Attributes:
        status: High-level outcome
        message: Text for logs and error records
        data: Payload of a successful call (decoded JSON, cached record, ...)
        error_code: Library or service error code (``TIMEOUT``,
            ``ProvisionedThroughputExceededException``, ...)
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def is_transient(self) -> bool:
        """The backend was unreachable or throttled rather than refusing."""
        return self.status == OperationStatus.TRANSIENT_ERROR

    def log_fields(self) -> Dict[str, Any]:
        """Keyword context describing a failed call."""
        return {
            "status": self.status.value,
            "error": self.message,
            "error_code": self.error_code,
        }

    @classmethod
    def success(cls, data: Optional[Any] = None, message: str = "ok") -> "OperationResult":
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
    ) -> "OperationResult":
        return cls(status=status, message=message, error_code=error_code)

    @classmethod
    def transient_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        return cls.error(OperationStatus.TRANSIENT_ERROR, message, error_code)

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        return cls.error(OperationStatus.PERMANENT_ERROR, message, error_code)
