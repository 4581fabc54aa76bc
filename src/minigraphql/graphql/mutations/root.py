"""
Root GraphQL mutation definitions
"""

from ..core import MUTATION, Argument, Field, SchemaRegistry
from ..resolvers.tutorial import create_tutorial


def register_tutorial_mutation(registry: SchemaRegistry) -> None:
    """Root mutation of the tutorial service."""
    registry.define_root(
        MUTATION,
        {
            "create": Field(
                "Tutorial",
                resolver=create_tutorial,
                args={"title": Argument("String!")},
                description="Create a new Tutorial",
            ),
        },
    )
