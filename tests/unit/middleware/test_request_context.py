"""
Request Context Middleware Tests.

WHAT: Unit tests for RequestContextMiddleware and its helpers.

WHY: Service log lines are correlated through the request ID, so:
- An incoming X-Request-ID is reused, otherwise a UUID4 is generated
- The ID is echoed on the response
- The context is visible to code that never sees the Request
- The context never leaks past the request
"""

from unittest.mock import MagicMock

import pytest
from starlette.requests import Request
from starlette.responses import Response

from backoffice.middleware.request_context import (
    REQUEST_ID_HEADER,
    RequestContextMiddleware,
    get_client_ip,
    get_request_context,
    get_request_id,
)


def make_request(
    headers: dict = None,
    client_host: str = None,
    method: str = "GET",
    path: str = "/api/v1/tickets",
) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": (client_host, 12345) if client_host else None,
    }
    return Request(scope)


async def ok(request):
    return Response(content="OK", status_code=200)


class TestGetClientIp:
    """Tests for client address extraction."""

    def test_prefers_x_real_ip(self):
        request = make_request(
            headers={"X-Real-IP": " 192.168.1.100 ", "X-Forwarded-For": "203.0.113.50"},
            client_host="10.0.0.1",
        )

        assert get_client_ip(request) == "192.168.1.100"

    def test_first_forwarded_address(self):
        request = make_request(
            headers={"X-Forwarded-For": "203.0.113.50, 70.41.3.18"},
            client_host="10.0.0.1",
        )

        assert get_client_ip(request) == "203.0.113.50"

    def test_direct_connection(self):
        assert get_client_ip(make_request(client_host="192.168.1.50")) == "192.168.1.50"

    def test_unknown(self):
        assert get_client_ip(make_request()) == "unknown"


@pytest.mark.asyncio
class TestRequestContextMiddleware:
    """Tests for dispatch()."""

    async def test_generates_request_id(self):
        middleware = RequestContextMiddleware(app=MagicMock())

        response = await middleware.dispatch(make_request(), ok)

        # UUID4 string form
        assert len(response.headers[REQUEST_ID_HEADER]) == 36

    async def test_reuses_incoming_request_id(self):
        middleware = RequestContextMiddleware(app=MagicMock())

        response = await middleware.dispatch(
            make_request(headers={REQUEST_ID_HEADER: "trace-42"}), ok
        )

        assert response.headers[REQUEST_ID_HEADER] == "trace-42"

    async def test_context_visible_during_request(self):
        seen = {}

        async def call_next(req):
            seen["request_id"] = get_request_id()
            seen["state"] = req.state.context
            return Response(status_code=204)

        middleware = RequestContextMiddleware(app=MagicMock())
        await middleware.dispatch(
            make_request(
                headers={REQUEST_ID_HEADER: "abc", "User-Agent": "Tests/1.0"},
                client_host="10.0.0.9",
                method="PATCH",
                path="/api/v1/tickets/1/status",
            ),
            call_next,
        )

        assert seen["request_id"] == "abc"
        assert seen["state"].ip_address == "10.0.0.9"
        assert seen["state"].user_agent == "Tests/1.0"
        assert seen["state"].method == "PATCH"
        assert seen["state"].path == "/api/v1/tickets/1/status"

    async def test_context_cleared_after_request(self):
        middleware = RequestContextMiddleware(app=MagicMock())

        await middleware.dispatch(make_request(), ok)

        assert get_request_context() is None
        assert get_request_id() is None

    async def test_context_cleared_on_error(self):
        async def boom(req):
            raise ValueError("Test error")

        middleware = RequestContextMiddleware(app=MagicMock())

        with pytest.raises(ValueError):
            await middleware.dispatch(make_request(), boom)

        assert get_request_context() is None
