"""
Record models held by the in-memory stores and stored as collection documents
"""

from pydantic import BaseModel, Field


class Comment(BaseModel):
    """A comment embedded in a tutorial."""

    body: str = ""


class Author(BaseModel):
    """Author embedded by value in a tutorial."""

    name: str = ""
    tutorials: list[int] = Field(default_factory=list)


class Tutorial(BaseModel):
    """A tutorial record."""

    id: int = 0
    title: str = ""
    author: Author | None = None
    comments: list[Comment] = Field(default_factory=list)


class Post(BaseModel):
    """A blog post record, looked up by slug."""

    id: str
    slug: str
    title: str
