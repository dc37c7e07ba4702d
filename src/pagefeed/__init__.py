"""
pagefeed

Paginated collection fetching for client applications: a typed page fetcher
over httpx and a cancellation-aware controller that accumulates pages.
"""

__version__ = "1.0.0"
__author__ = "pagefeed Team"

__all__ = ["__version__"]
