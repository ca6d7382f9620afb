"""
Open Library Adapter - Book catalog.
"""

from .client import OpenLibraryAdapter, parse_openlibrary_doc, parse_openlibrary_response

__all__ = ["OpenLibraryAdapter", "parse_openlibrary_doc", "parse_openlibrary_response"]
