"""
Tests for the exception hierarchy and its error envelope
"""
import pytest

from hydianflow.core.exceptions import (
    AuthenticationError,
    ErrorCode,
    PersistenceError,
    ValidationException,
)


class TestErrorEnvelope:

    @pytest.mark.unit
    def test_validation_exception(self):
        exc = ValidationException("body too large", error_code=ErrorCode.BAD_BODY, field="body")

        assert exc.status_code == 400
        assert exc.details == {"field": "body"}
        assert exc.to_dict() == {"error": {"code": "bad_body", "message": "body too large"}}

    @pytest.mark.unit
    def test_authentication_error_defaults(self):
        exc = AuthenticationError()

        assert exc.status_code == 401
        assert exc.to_dict() == {"error": {"code": "bad_signature", "message": "signature mismatch"}}

    @pytest.mark.unit
    def test_persistence_error_keeps_operation_out_of_envelope(self):
        exc = PersistenceError("failed to log event", operation="record_delivery")

        assert exc.status_code == 500
        assert exc.details == {"operation": "record_delivery"}
        assert "operation" not in exc.to_dict()["error"]
