"""
Pydantic schemas for all data structures.

Includes the collection item decoded from the wire, the per-fetch page request,
and the immutable controller snapshot published to subscribers.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

from pagefeed.constants import FIRST_PAGE

# ============================================================================
# Collection Entries
# ============================================================================


class Item(BaseModel):
    """
    A single collection entry.

    Immutable once fetched; identity is ``id``. The owner field is accepted
    under any of its wire spellings (``userId``, ``ownerId``, ``user_id``,
    ``owner_id``).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",  # Servers may add fields we do not model
    )

    owner_id: int = Field(
        ...,
        validation_alias=AliasChoices("userId", "ownerId", "user_id", "owner_id"),
        description="Identifier of the entry's owner",
    )
    id: int = Field(..., description="Server-assigned identifier, unique and stable")
    title: str = Field(..., description="Entry title")
    body: str = Field(..., description="Entry body text")


# Decoder for a page payload (a JSON array of items)
ItemList = TypeAdapter(list[Item])


# ============================================================================
# Page Requests
# ============================================================================


class PageRequest(BaseModel):
    """One page of a collection: 1-based index plus fixed size."""

    model_config = ConfigDict(frozen=True)

    page_index: int = Field(..., ge=FIRST_PAGE, description="1-based page index")
    page_size: int = Field(..., gt=0, description="Items per page")


# ============================================================================
# Controller Snapshot
# ============================================================================


class ControllerSnapshot(BaseModel):
    """Read-only view of a pagination controller's observable state."""

    model_config = ConfigDict(frozen=True)

    items: tuple[Item, ...] = Field(default=(), description="Accumulated items, server order")
    current_page: int = Field(default=FIRST_PAGE, ge=FIRST_PAGE, description="Page most recently requested")
    has_more: bool = Field(default=True, description="Whether another page may exist")
    is_loading: bool = Field(default=False, description="Replacing fetch in flight")
    is_paging: bool = Field(default=False, description="Appending fetch in flight")
    last_error: str | None = Field(default=None, description="Most recent failure, rendered")

    @property
    def is_fetching(self) -> bool:
        """Whether any fetch is in flight."""
        return self.is_loading or self.is_paging
