"""
Command-line interface for the Sheets connector.
"""

from .main import app

__all__ = ["app"]
