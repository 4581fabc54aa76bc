"""
Middleware for request context and logging
"""

import json
import re
import time
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import clear_request_context, get_logger, set_request_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

SENSITIVE_PARAMS = frozenset(
    {"password", "token", "api_key", "secret", "auth", "key", "session", "cookie", "credentials"}
)

# Never logged for GraphQL paths, even when not sensitive by name
GRAPHQL_PAYLOAD_PARAMS = ("query", "variables")

_NAMED_OPERATION = re.compile(r"\b(query|mutation|subscription)\s+(\w+)")


def sanitize_query_params(params: dict[str, Any]) -> dict[str, Any]:
    """Redact parameters whose name contains a sensitive keyword (case insensitive)."""
    return {
        key: "[REDACTED]"
        if any(sensitive in key.lower() for sensitive in SENSITIVE_PARAMS)
        else value
        for key, value in params.items()
    }


def operation_name_from_document(document: str) -> str:
    """Derive a loggable operation name from document text.

    Mutations are prefixed with ``mutation:`` so they stand out in request logs.
    """
    match = _NAMED_OPERATION.search(document)
    is_mutation = document.lstrip().startswith("mutation") or bool(
        match and match.group(1) == "mutation"
    )
    name = match.group(2) if match else "unnamed_operation"
    return f"mutation:{name}" if is_mutation else name


def is_graphql_path(path: str) -> bool:
    return path.endswith("/graphql")


async def _graphql_payload(request: Request) -> dict[str, Any] | None:
    """The ``operationName``/``query`` pair of a GraphQL request, from params or body."""
    if request.method == "GET":
        return dict(request.query_params)

    if request.method != "POST":
        return None

    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Raw document body
        return {"query": text}
    return data if isinstance(data, dict) else None


async def extract_graphql_operation_name(request: Request) -> str | None:
    if not is_graphql_path(request.url.path):
        return None

    payload = await _graphql_payload(request)
    if not payload:
        return None

    op = payload.get("operationName")
    if isinstance(op, str) and op:
        return op
    document = payload.get("query")
    if not isinstance(document, str) or not document.strip():
        return None
    return operation_name_from_document(document)


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id and the GraphQL operation name to every log event of a request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        graphql_operation = await extract_graphql_operation_name(request)
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER), operation=graphql_operation
        )
        started = time.perf_counter()

        try:
            params = None
            if request.query_params:
                params = sanitize_query_params(dict(request.query_params))
                if is_graphql_path(request.url.path):
                    for k in GRAPHQL_PAYLOAD_PARAMS:
                        if k in params:
                            params[k] = "[REDACTED]"

            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                query_params=params,
                user_agent=request.headers.get("user-agent"),
                remote_addr=request.client.host if request.client else None,
            )

            response = await call_next(request)

            logger.info(
                "Request completed",
                status_code=response.status_code,
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise

        finally:
            clear_request_context()
