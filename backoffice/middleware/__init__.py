"""
Middleware package.

WHY: Middleware provides cross-cutting concerns like request correlation
and access logging that apply to all requests.
"""

from backoffice.middleware.request_context import (
    RequestContextMiddleware,
    get_request_context,
    get_request_id,
    get_client_ip,
    get_user_agent,
    RequestContext,
    REQUEST_ID_HEADER,
)

__all__ = [
    "RequestContextMiddleware",
    "get_request_context",
    "get_request_id",
    "get_client_ip",
    "get_user_agent",
    "RequestContext",
    "REQUEST_ID_HEADER",
]
