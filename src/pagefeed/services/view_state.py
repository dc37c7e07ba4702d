"""
Presentation decisions derived from a controller snapshot.

Tells a list screen what to show (spinner, retry prompt, empty placeholder or
the list itself) without drawing anything.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pagefeed.schemas import ControllerSnapshot


class ViewPhase(str, Enum):
    """What occupies the screen."""

    LOADING = "loading"  # Full-screen spinner, nothing to show yet
    ERROR = "error"  # Failure with nothing to show, offer retry
    EMPTY = "empty"  # Loaded successfully, collection is empty
    CONTENT = "content"  # List of items


@dataclass(frozen=True)
class ViewState:
    """Rendering decision for one snapshot."""

    phase: ViewPhase
    error: Optional[str] = None
    show_retry: bool = False
    show_paging_indicator: bool = False
    inline_error: Optional[str] = None


def resolve_view(snapshot: ControllerSnapshot) -> ViewState:
    """
    Decide what a list screen should present.

    An error never hides already loaded items: with items on screen it is
    reported through ``inline_error`` instead.
    """
    if not snapshot.items:
        if snapshot.is_loading:
            return ViewState(phase=ViewPhase.LOADING)
        if snapshot.last_error:
            return ViewState(
                phase=ViewPhase.ERROR,
                error=snapshot.last_error,
                show_retry=True,
            )
        if not snapshot.is_paging:
            return ViewState(phase=ViewPhase.EMPTY)

    return ViewState(
        phase=ViewPhase.CONTENT,
        show_paging_indicator=snapshot.is_paging,
        inline_error=snapshot.last_error,
    )
