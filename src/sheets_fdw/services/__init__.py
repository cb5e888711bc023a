"""
Service layer used by the CLI to run scans outside a database host.
"""

from .query import QueryService

__all__ = ["QueryService"]
