"""Test data factories for deterministic test data generation."""

from tests.factories.geolocation import (
    make_error_record,
    make_form,
    make_hidden_fields,
    make_ipstack_error_payload,
    make_ipstack_payload,
    make_location_record,
    make_submission,
)

__all__ = [
    "make_error_record",
    "make_form",
    "make_hidden_fields",
    "make_ipstack_error_payload",
    "make_ipstack_payload",
    "make_location_record",
    "make_submission",
]
