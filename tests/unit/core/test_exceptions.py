"""
Tests for the exception hierarchy and its HTTP handlers.

WHY: Every error response shares one envelope, so these tests pin:
1. The status code each error family maps to
2. Context filtering (no secrets in "details")
3. The catch-all handler hiding internals
"""

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel

from backoffice.core.exceptions import (
    AppException,
    AuditLogImmutableError,
    AuthenticationError,
    FilterCriteriaError,
    InvalidStateTransitionError,
    NotificationDispatchError,
    TemplateRenderError,
    TicketAccessDenied,
    TicketNotFoundError,
    TicketTransitionDenied,
    TokenExpiredError,
    ValidationError,
)
from backoffice.core.exception_handlers import (
    app_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)


class TestAppException:
    """Tests for the base class."""

    def test_defaults(self):
        exc = AppException()

        assert exc.message == "An unexpected error occurred"
        assert exc.status_code == 500

    def test_status_override(self):
        assert AppException(status_code=418).status_code == 418

    def test_to_dict_filters_sensitive_context(self):
        exc = AppException(message="Boom", ticket_id=7, token="abc", api_key="k")

        assert exc.to_dict() == {
            "error": "AppException",
            "message": "Boom",
            "status_code": 500,
            "details": {"ticket_id": 7},
        }

    def test_to_dict_without_context(self):
        assert AppException(message="Boom").to_dict()["details"] is None


class TestStatusCodes:
    """Each error family maps to one HTTP status."""

    @pytest.mark.parametrize(
        "exc_class, status",
        [
            (AuthenticationError, 401),
            (TokenExpiredError, 401),
            (TicketAccessDenied, 403),
            (TicketTransitionDenied, 403),
            (AuditLogImmutableError, 403),
            (ValidationError, 400),
            (FilterCriteriaError, 400),
            (TemplateRenderError, 400),
            (TicketNotFoundError, 404),
            (InvalidStateTransitionError, 422),
            (NotificationDispatchError, 502),
        ],
    )
    def test_status(self, exc_class, status):
        assert exc_class().status_code == status

    def test_access_denied_is_not_disguised_as_missing(self):
        """Out-of-scope tickets report 403, never 404."""
        assert TicketAccessDenied().status_code != TicketNotFoundError().status_code


class TestHandlers:
    """Tests for the JSON error envelope."""

    class Payload(BaseModel):
        title: str

    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_exception_handler(AppException, app_exception_handler)
        app.add_exception_handler(RequestValidationError, validation_exception_handler)
        app.add_exception_handler(Exception, generic_exception_handler)

        @app.get("/transition")
        async def transition():
            raise InvalidStateTransitionError("Ticket is already in this status", status="new")

        @app.get("/crash")
        async def crash():
            raise RuntimeError("database password is hunter2")

        @app.post("/payload")
        async def payload(body: TestHandlers.Payload):
            return body

        return TestClient(app, raise_server_exceptions=False)

    def test_app_exception_envelope(self, client):
        response = client.get("/transition")

        assert response.status_code == 422
        assert response.json() == {
            "error": "InvalidStateTransitionError",
            "message": "Ticket is already in this status",
            "status_code": 422,
            "details": {"status": "new"},
        }

    def test_unexpected_error_hides_message(self, client):
        response = client.get("/crash")

        assert response.status_code == 500
        assert "hunter2" not in response.text
        assert response.json()["message"] == "An unexpected error occurred"

    def test_request_validation_is_400(self, client):
        response = client.post("/payload", json={})

        assert response.status_code == 400
        errors = response.json()["details"]["errors"]
        assert errors[0]["field"] == "body.title"
