"""
Services layer for pagination state and presentation decisions.
"""

from pagefeed.services.pagination import ControllerState, PaginationController
from pagefeed.services.view_state import ViewPhase, ViewState, resolve_view

__all__ = [
    "ControllerState",
    "PaginationController",
    "ViewPhase",
    "ViewState",
    "resolve_view",
]
