"""
Record models and the in-memory stores that hold them
"""

from .models import Author, Comment, Post, Tutorial
from .store import (
    DuplicateRecordError,
    RecordStore,
    RecordStoreError,
    next_int_id,
    next_str_id,
)

__all__ = [
    "Author",
    "Comment",
    "DuplicateRecordError",
    "Post",
    "RecordStore",
    "RecordStoreError",
    "Tutorial",
    "next_int_id",
    "next_str_id",
]
