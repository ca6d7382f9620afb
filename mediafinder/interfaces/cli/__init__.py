"""
CLI Interface - Command-line tools for MediaFinder.

Provides commands for:
- Search queries
- API server
- System management
"""

from .main import app, main

__all__ = ["app", "main"]
