"""
Tutorial GraphQL type definitions
"""

from ..core import Field, SchemaRegistry


def register_tutorial_types(registry: SchemaRegistry) -> None:
    """Register ``Author``, ``Comment`` and ``Tutorial``.

    ``Author`` keeps the capitalized field names of the public API and reads
    them from the record's snake_case attributes.
    """
    registry.define_type(
        "Author",
        {
            "Name": Field("String", source="name"),
            "Tutorials": Field("[Int]", source="tutorials"),
        },
        description="Author of one or more tutorials",
    )

    registry.define_type(
        "Comment",
        {
            "body": Field("String"),
        },
    )

    registry.define_type(
        "Tutorial",
        {
            "id": Field("Int"),
            "title": Field("String"),
            "author": Field("Author"),
            "comments": Field("[Comment]"),
        },
    )
