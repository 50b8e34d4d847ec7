"""FastHTML web front end. Importing this package registers every page."""

from . import admin, shop  # noqa: F401
from .core import app, configure, get_store

__all__ = ["app", "configure", "get_store"]
