"""Unit tests for the exception hierarchy."""

import pytest

from relevant.core.exceptions import (
    APIError,
    APIResponseError,
    ConfigError,
    ConfigValidationError,
    ContentDecodeError,
    FormValidationError,
    MalformedResponseError,
    NetworkError,
    RelevantError,
    UnauthorizedError,
)


@pytest.mark.unit
class TestRelevantError:
    """Tests for the base exception."""

    def test_message_and_default_context(self):
        error = RelevantError("boom")
        assert str(error) == "boom"
        assert error.context == {}

    def test_with_context_chains(self):
        error = RelevantError("boom").with_context(user_id="u1")
        assert error.context == {"user_id": "u1"}

    def test_to_dict(self):
        error = RelevantError("boom", context={"a": 1})
        assert error.to_dict() == {
            "error_type": "RelevantError",
            "message": "boom",
            "context": {"a": 1},
        }


@pytest.mark.unit
class TestConfigErrors:
    """Tests for configuration errors."""

    def test_config_error_records_path(self):
        error = ConfigError("bad", config_path="config/interests.yaml")
        assert error.context["config_path"] == "config/interests.yaml"

    def test_validation_error_field_and_reason(self):
        error = ConfigValidationError(field="port", reason="too large")
        assert str(error) == "Config validation failed for 'port': too large"
        assert error.context == {"field": "port", "reason": "too large"}
        assert isinstance(error, ConfigError)

    def test_validation_error_default_message(self):
        assert str(ConfigValidationError()) == "Configuration validation failed"


@pytest.mark.unit
class TestAPIErrors:
    """Tests for API error types."""

    def test_network_error_is_api_error(self):
        error = NetworkError("offline", endpoint="/api/auth/me")
        assert isinstance(error, APIError)
        assert error.endpoint == "/api/auth/me"
        assert error.context["endpoint"] == "/api/auth/me"

    def test_response_error_carries_status(self):
        error = APIResponseError(
            "Server exploded", status_code=503, endpoint="/api/content/feed",
            response_body="x" * 1000,
        )
        assert error.status_code == 503
        assert error.server_message == "Server exploded"
        assert error.is_server_error is True
        assert len(error.context["response_body"]) == 500

    def test_client_error_is_not_server_error(self):
        assert APIResponseError("Bad", status_code=400).is_server_error is False

    def test_unauthorized_defaults(self):
        error = UnauthorizedError()
        assert error.status_code == 401
        assert str(error) == "Authentication required"
        assert isinstance(error, APIResponseError)

    def test_malformed_response_is_response_error(self):
        error = MalformedResponseError(
            "Malformed response", status_code=200, endpoint="/api/auth/me"
        )
        assert isinstance(error, APIResponseError)
        assert error.is_server_error is False
        assert error.context["endpoint"] == "/api/auth/me"


@pytest.mark.unit
class TestClientErrors:
    """Tests for client-side errors."""

    def test_form_validation_error_lists_fields(self):
        error = FormValidationError({"password": "too short", "email": "invalid"})
        assert str(error) == "Invalid form fields: email, password"
        assert error.field_errors["password"] == "too short"

    def test_content_decode_error_payload_type(self):
        error = ContentDecodeError("not a mapping", payload_type="list")
        assert error.payload_type == "list"
        assert error.context == {"payload_type": "list"}
