"""API endpoints package."""

from . import health
from . import document_types
from . import text
from . import runs
from . import ado

__all__ = ["health", "document_types", "text", "runs", "ado"]
