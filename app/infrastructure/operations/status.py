"""Outcome categories for provider and cache backend calls."""

from enum import Enum


class OperationStatus(Enum):
    """How an I/O call ended.

    TRANSIENT_ERROR covers timeouts, dropped connections and throttling;
    PERMANENT_ERROR a request the backend refused. UNAUTHORIZED and
    NOT_FOUND are split out of the AWS error codes (bad credentials, missing
    cache table) because they point at deployment problems.
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
