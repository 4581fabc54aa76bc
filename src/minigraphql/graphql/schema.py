"""
GraphQL schemas of the tutorial and post services, and their HTTP routers
"""

import json
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from ..logging import get_logger
from ..records import Post, RecordStore, Tutorial, next_int_id, next_str_id
from .core import MUTATION, Document, ExecutionResult, RequestError, Schema, SchemaRegistry
from .core import execute as execute_document
from .core import parse
from .graphiql import render_graphiql
from .mutations.root import register_tutorial_mutation
from .queries.root import register_post_query, register_tutorial_query
from .types.post import register_post_types
from .types.tutorial import register_tutorial_types

logger = get_logger(__name__)


def build_tutorial_schema() -> Schema:
    """Build the schema of the tutorial service (query and mutation roots)."""
    registry = SchemaRegistry()
    register_tutorial_types(registry)
    register_tutorial_query(registry)
    register_tutorial_mutation(registry)
    return registry.finalize()


def build_post_schema() -> Schema:
    """Build the schema of the post service (query root only)."""
    registry = SchemaRegistry()
    register_post_types(registry)
    register_post_query(registry)
    return registry.finalize()


@dataclass
class GraphQLService:
    """A schema paired with the record store its resolvers read and write."""

    name: str
    schema: Schema
    store: RecordStore[Any]

    def execute(
        self,
        document: str | Document,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
        request: Request | None = None,
    ) -> ExecutionResult:
        context = {"store": self.store, "request": request}
        return execute_document(
            self.schema,
            document,
            context=context,
            variables=variables,
            operation_name=operation_name,
        )


def create_tutorial_service(store: RecordStore[Tutorial] | None = None) -> GraphQLService:
    if store is None:
        store = RecordStore(Tutorial, name="tutorial", id_factory=next_int_id)
    return GraphQLService(name="tutorial", schema=build_tutorial_schema(), store=store)


def create_post_service(store: RecordStore[Post] | None = None) -> GraphQLService:
    if store is None:
        store = RecordStore(Post, name="post", id_factory=next_str_id)
    return GraphQLService(name="post", schema=build_post_schema(), store=store)


def validate_schema(service: GraphQLService) -> None:
    """Run a trivial query against the service's schema at startup.

    Raises:
        Exception: If the schema cannot execute even ``{ __typename }``
    """
    result = service.execute("{ __typename }")
    if result.errors:
        error_messages = [error.message for error in result.errors]
        logger.error(
            "GraphQL schema validation failed", service=service.name, errors=error_messages
        )
        raise Exception(f"GraphQL schema validation failed: {'; '.join(error_messages)}")
    logger.info("GraphQL schema validation successful", service=service.name)


class GraphQLRequest(BaseModel):
    """Request model for JSON-encoded GraphQL requests."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    variables: dict[str, Any] | None = None
    operation_name: str | None = Field(default=None, alias="operationName")


def _error_response(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"data": None, "errors": [{"message": message}]}
    )


def _result_response(result: ExecutionResult) -> JSONResponse:
    status_code = 200 if result.data is not None else 400
    return JSONResponse(status_code=status_code, content=result.formatted())


def parse_request_body(body: bytes, content_type: str) -> GraphQLRequest:
    """
    Decode a POST body into a ``GraphQLRequest``.

    JSON bodies carry ``query``/``variables``/``operationName``; any other body
    is taken as the raw document text.

    Raises:
        ValueError: If a JSON body is malformed or has no query
    """
    text = body.decode("utf-8")

    if "application/json" in content_type:
        try:
            return GraphQLRequest.model_validate_json(text)
        except PydanticValidationError as e:
            raise ValueError("Request body must be a JSON object with a 'query' string") from e

    # Browsers and curl often post JSON without a JSON content type.
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        payload = None
    if isinstance(payload, dict) and "query" in payload:
        try:
            return GraphQLRequest.model_validate(payload)
        except PydanticValidationError as e:
            raise ValueError("Request body must be a JSON object with a 'query' string") from e

    return GraphQLRequest(query=text)


def create_graphql_router(
    service: GraphQLService, path: str = "/graphql", graphiql: bool = True
) -> APIRouter:
    """Create the GraphQL router of one service for FastAPI."""
    router = APIRouter()

    @router.post(path)
    async def graphql_post(request: Request) -> Response:  # pyright: ignore [reportUnusedFunction]
        """Execute a query or mutation."""
        body = await request.body()
        try:
            payload = parse_request_body(body, request.headers.get("content-type", ""))
        except (UnicodeDecodeError, ValueError) as e:
            logger.warning("Malformed GraphQL request", service=service.name, error=str(e))
            return _error_response(str(e))

        # Resolvers are synchronous and guard the store with a thread lock.
        result = await run_in_threadpool(
            service.execute,
            payload.query,
            payload.variables,
            payload.operation_name,
            request,
        )
        return _result_response(result)

    @router.get(path)
    async def graphql_get(request: Request) -> Response:  # pyright: ignore [reportUnusedFunction]
        """Execute a query from URL parameters, or serve GraphiQL to browsers."""
        params = request.query_params
        query = params.get("query")

        if not query:
            if graphiql and "text/html" in request.headers.get("accept", ""):
                return HTMLResponse(render_graphiql(path, title=f"{service.name} GraphiQL"))
            return _error_response("Must provide query string.")

        variables = None
        if params.get("variables"):
            try:
                variables = json.loads(params["variables"])
            except json.JSONDecodeError:
                return _error_response("Variables are invalid JSON.")
            if not isinstance(variables, dict):
                return _error_response("Variables must be a JSON object.")

        operation_name = params.get("operationName") or None
        try:
            document = parse(query)
            operation = document.get_operation(operation_name)
        except RequestError as e:
            return JSONResponse(status_code=400, content={"data": None, "errors": [e.formatted()]})

        if operation.kind == MUTATION:
            return _error_response(
                "Can only perform a mutation operation from a POST request.", status_code=405
            )

        result = await run_in_threadpool(
            service.execute, document, variables, operation_name, request
        )
        return _result_response(result)

    @router.get(f"{path}/schema", response_class=PlainTextResponse)
    async def graphql_schema() -> str:  # pyright: ignore [reportUnusedFunction]
        """Return the service's schema as SDL."""
        return service.schema.print()

    return router
