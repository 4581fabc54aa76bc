#!/usr/bin/env python3
"""
Main CLI entry point for the minigraphql services.
"""

import json
import os
import sys
from typing import Any

import click
import uvicorn

from minigraphql import __version__
from minigraphql.logging import configure_logging, get_logger

logger = get_logger(__name__)

SERVICES = ("tutorial", "post")

DEMO_QUERY = """
{
    list {
        id
        title
        comments {
            body
        }
        author {
            Name
            Tutorials
        }
    }
}
"""


@click.group()
@click.version_option(version=__version__, prog_name="minigraphql")
def cli() -> None:
    """minigraphql CLI - run the GraphQL services and query them locally."""
    pass


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: MINIGRAPHQL_API_HOST)")
@click.option(
    "--port", default=None, type=int, help="Port to bind to (default: MINIGRAPHQL_API_PORT)"
)
@click.option(
    "--reload/--no-reload",
    default=None,
    help="Auto-reload on code changes (default: MINIGRAPHQL_API_RELOAD)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str | None, port: int | None, reload: bool | None, log_level: str) -> None:
    """Start the GraphQL API server (tutorial at /graphql, posts at /posts/graphql)."""
    from minigraphql.config import settings

    host = host or settings.api_host
    port = port or settings.api_port
    reload = settings.api_reload if reload is None else reload

    configure_logging(debug=(log_level == "debug"))
    logger.info("Starting minigraphql API server", host=host, port=port, reload=reload)

    # The app module configures logging from these when it is imported
    if log_level == "debug":
        os.environ["MINIGRAPHQL_DEBUG"] = "true"
        os.environ["MINIGRAPHQL_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("MINIGRAPHQL_DEBUG", "false")
        os.environ.setdefault("MINIGRAPHQL_LOG_LEVEL", log_level)

    # Reload needs an import string so the worker can re-import the app
    target: Any = "minigraphql.api.app:app"
    if not reload:
        from minigraphql.api.app import app as target

    try:
        uvicorn.run(
            target, host=host, port=port, reload=reload, log_level=log_level, access_log=True
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command()
def seed() -> None:
    """Wipe the collections and insert the mock tutorials and posts."""
    from minigraphql.database.connection import init_database
    from minigraphql.database.seed_data import seed_initial_data

    configure_logging(stream=sys.stderr)

    try:
        init_database()
        counts = seed_initial_data()
    except Exception as e:
        logger.error("Failed to seed database", error=str(e))
        click.echo(f"✗ Error seeding database: {e}", err=True)
        sys.exit(1)

    click.echo("✓ Database seeded successfully")
    for collection, count in counts.items():
        click.echo(f"  {collection}: {count} document(s)")


@cli.command()
@click.argument("document", required=False)
@click.option(
    "--service",
    default="tutorial",
    type=click.Choice(SERVICES),
    help="Service to query (default: tutorial)",
)
@click.option("--variables", default=None, help="JSON object with variable values")
@click.option(
    "--operation-name", default=None, help="Operation to run in a multi-operation document"
)
@click.option(
    "--seed/--no-seed",
    default=True,
    help="Reseed the collections before loading the store (default: seed)",
)
def query(
    document: str | None,
    service: str,
    variables: str | None,
    operation_name: str | None,
    seed: bool,
) -> None:
    """Execute DOCUMENT against a freshly loaded store and print the JSON result.

    Without DOCUMENT, runs the tutorial list query. Use '-' to read the
    document from stdin.
    """
    from minigraphql.database.seed_data import load_stores
    from minigraphql.graphql.schema import create_post_service, create_tutorial_service

    configure_logging(stream=sys.stderr)

    if document == "-":
        document = click.get_text_stream("stdin").read()
    document = document or DEMO_QUERY

    variable_values = None
    if variables:
        try:
            variable_values = json.loads(variables)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"invalid JSON: {e}", param_hint="--variables") from e
        if not isinstance(variable_values, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--variables")

    graphql_service = (
        create_tutorial_service() if service == "tutorial" else create_post_service()
    )
    try:
        load_stores({service: graphql_service.store}, seed=seed)
    except Exception as e:
        logger.error("Failed to load store", service=service, error=str(e))
        click.echo(f"✗ Error loading {service} data: {e}", err=True)
        sys.exit(1)

    result = graphql_service.execute(document, variable_values, operation_name)
    click.echo(json.dumps(result.formatted(), indent=2))

    if result.errors:
        logger.error(
            "Failed to execute graphql operation",
            errors=[error.message for error in result.errors],
        )
        sys.exit(1)


@cli.command()
@click.option(
    "--service",
    default="tutorial",
    type=click.Choice(SERVICES),
    help="Service whose schema to print (default: tutorial)",
)
def schema(service: str) -> None:
    """Print a service's schema as SDL."""
    from minigraphql.graphql.schema import build_post_schema, build_tutorial_schema

    built = build_tutorial_schema() if service == "tutorial" else build_post_schema()
    click.echo(built.print(), nl=False)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    cli()
