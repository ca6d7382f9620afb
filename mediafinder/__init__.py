"""
MediaFinder - Multi-catalog media search (film, TV, books, anime, manga).

Example:
    >>> from mediafinder.domains.orchestration import SearchPipeline
    >>> page = await pipeline.aggregate_and_rank("batman")
    >>> page.total
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
