"""
minigraphql
GraphQL demo services over an in-memory tutorial and post dataset
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
