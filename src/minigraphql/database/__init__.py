"""
Database module for minigraphql
"""

from .collection import DocumentCollection
from .connection import get_engine, get_session, init_database

__all__ = ["DocumentCollection", "get_engine", "get_session", "init_database"]
