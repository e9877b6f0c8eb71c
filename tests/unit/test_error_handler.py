"""Unit tests for the top-level handler error translation."""

import orjson

from src.lambdas.shared.errors.session_errors import (
    SessionConfigError,
    SessionDecodeError,
)
from src.lambdas.shared.utils.error_handler import handle_request
from src.lambdas.shared.utils.response_builder import json_response
from tests.conftest import assert_error_logged, assert_info_logged

EVENT = {"path": "/session", "httpMethod": "GET"}


class TestHandleRequest:
    def test_passes_through_success(self) -> None:
        response = handle_request(lambda e, c: json_response(200, {"ok": True}), EVENT, None)
        assert response["statusCode"] == 200
        assert orjson.loads(response["body"]) == {"ok": True}

    def test_config_error_is_401_and_logged_as_error(self, caplog) -> None:
        def handler(event, context):
            raise SessionConfigError("SESSION_COOKIE_SECRET", "No secret key provided.")

        response = handle_request(handler, EVENT, None)

        assert response["statusCode"] == 401
        assert orjson.loads(response["body"]) == {"detail": "Authentication required"}
        assert_error_logged(caplog, "Session rejected")

    def test_decode_error_is_401_and_logged_as_info(self, caplog) -> None:
        def handler(event, context):
            raise SessionDecodeError("bad payload")

        with caplog.at_level("INFO"):
            response = handle_request(handler, EVENT, None)

        assert response["statusCode"] == 401
        assert_info_logged(caplog, "Session rejected")

    def test_unexpected_error_is_500(self, caplog) -> None:
        def handler(event, context):
            raise RuntimeError("boom")

        response = handle_request(handler, {}, None)

        assert response["statusCode"] == 500
        assert orjson.loads(response["body"]) == {"detail": "Internal server error"}
        assert_error_logged(caplog, "Unhandled exception in handler")


class TestJsonResponse:
    def test_shape(self) -> None:
        response = json_response(201, {"a": 1}, headers={"X-Request-Id": "r1"})
        assert response == {
            "statusCode": 201,
            "headers": {"Content-Type": "application/json", "X-Request-Id": "r1"},
            "multiValueHeaders": {},
            "body": '{"a":1}',
            "isBase64Encoded": False,
        }
