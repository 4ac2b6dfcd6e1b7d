"""Listing store — immutable snapshots of listings and settings.

StoreSnapshot is a frozen value: every mutation returns a new snapshot and
leaves the original untouched. ListingStore is the explicit context object
handlers receive; it loads and saves a snapshot as one JSON document stored
under a single namespaced key.

Writes go through ListingStore.mutate(), which holds a per-event-loop lock
across load, change, save and commit, so concurrent requests apply their
changes one after the other instead of overwriting each other.
"""
import asyncio
import weakref
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from houselyzer.core.exceptions import NotFoundError, ValidationError
from houselyzer.core.logging import get_logger
from houselyzer.models.app_state_model import AppState
from houselyzer.schemas.listing_schema import (
    Listing,
    ListingComment,
    PriceIndicator,
    utcnow,
)
from houselyzer.schemas.settings_schema import UserSettings

logger = get_logger(__name__)

STORAGE_KEY = "houselyzer-storage"

_NEXT_PRICE_INDICATOR = {
    None: PriceIndicator.GOOD,
    PriceIndicator.GOOD: PriceIndicator.EXPENSIVE,
    PriceIndicator.EXPENSIVE: None,
}


def next_price_indicator(current: Optional[PriceIndicator]) -> Optional[PriceIndicator]:
    """unset → good → expensive → unset."""
    return _NEXT_PRICE_INDICATOR[current]


def _invalid_change(exc: PydanticValidationError) -> ValidationError:
    fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
    return ValidationError(f"Invalid value for: {', '.join(fields)}", detail=str(exc))


def _revise(listing: Listing, changes: Dict[str, Any]) -> Listing:
    """Copy of a listing with changes applied, re-validated, and updated_at refreshed."""
    data = listing.model_dump(exclude={"price_per_sqft"})
    data.update(changes)
    data["id"] = listing.id
    data["created_at"] = listing.created_at
    data["updated_at"] = utcnow()
    try:
        return Listing.model_validate(data)
    except PydanticValidationError as exc:
        raise _invalid_change(exc) from exc


class StoreSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    listings: Tuple[Listing, ...] = ()
    settings: UserSettings = UserSettings()

    @property
    def favorites(self) -> Tuple[Listing, ...]:
        return tuple(listing for listing in self.listings if listing.is_favorite)

    def get(self, listing_id: str) -> Listing:
        for listing in self.listings:
            if listing.id == listing_id:
                return listing
        raise NotFoundError(f"Listing {listing_id} not found")

    def _replace(self, updated: Listing) -> "StoreSnapshot":
        return self.model_copy(update={
            "listings": tuple(updated if l.id == updated.id else l for l in self.listings),
        })

    def add_listing(self, listing: Listing) -> "StoreSnapshot":
        return self.model_copy(update={"listings": self.listings + (listing,)})

    def update_listing(self, listing_id: str, changes: Dict[str, Any]) -> "StoreSnapshot":
        return self._replace(_revise(self.get(listing_id), changes))

    def delete_listing(self, listing_id: str) -> "StoreSnapshot":
        self.get(listing_id)
        return self.model_copy(update={
            "listings": tuple(l for l in self.listings if l.id != listing_id),
        })

    def toggle_favorite(self, listing_id: str) -> "StoreSnapshot":
        listing = self.get(listing_id)
        return self._replace(_revise(listing, {"is_favorite": not listing.is_favorite}))

    def cycle_price_indicator(self, listing_id: str) -> "StoreSnapshot":
        listing = self.get(listing_id)
        indicator = next_price_indicator(listing.price_indicator)
        return self._replace(_revise(listing, {"price_indicator": indicator}))

    def add_comment(self, listing_id: str, comment: ListingComment) -> "StoreSnapshot":
        listing = self.get(listing_id)
        comments = [c.model_dump() for c in listing.comments] + [comment.model_dump()]
        return self._replace(_revise(listing, {"comments": comments}))

    def delete_comment(self, listing_id: str, comment_id: str) -> "StoreSnapshot":
        listing = self.get(listing_id)
        if not any(c.id == comment_id for c in listing.comments):
            raise NotFoundError(f"Comment {comment_id} not found on listing {listing_id}")
        comments = [c.model_dump() for c in listing.comments if c.id != comment_id]
        return self._replace(_revise(listing, {"comments": comments}))

    def update_settings(self, changes: Dict[str, Any]) -> "StoreSnapshot":
        try:
            merged = UserSettings.model_validate({**self.settings.model_dump(), **changes})
        except PydanticValidationError as exc:
            raise _invalid_change(exc) from exc
        return self.model_copy(update={"settings": merged})

    def clear(self) -> "StoreSnapshot":
        """Drop every listing; settings are kept."""
        return self.model_copy(update={"listings": ()})


class StoreExport(BaseModel):
    """Full dump of the store, as downloaded from the settings screen."""
    properties: List[Listing]
    favorites: List[Listing]
    settings: UserSettings
    export_date: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> "StoreExport":
        return cls(
            properties=list(snapshot.listings),
            favorites=list(snapshot.favorites),
            settings=snapshot.settings,
        )


_write_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def _write_lock() -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    lock = _write_locks.get(loop)
    if lock is None:
        lock = _write_locks[loop] = asyncio.Lock()
    return lock


class ListingStore:
    """Loads and saves the snapshot stored under one namespace key."""

    def __init__(self, db: AsyncSession, key: str = STORAGE_KEY):
        self.db = db
        self.key = key

    async def _row(self) -> Optional[AppState]:
        query = (
            select(AppState)
            .where(AppState.key == self.key)
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(query)).scalar_one_or_none()

    async def load(self) -> StoreSnapshot:
        row = await self._row()
        if row is None or not row.payload:
            return StoreSnapshot()
        return StoreSnapshot.model_validate(row.payload)

    async def save(self, snapshot: StoreSnapshot) -> StoreSnapshot:
        payload = snapshot.model_dump(mode="json")
        row = await self._row()
        if row is None:
            self.db.add(AppState(key=self.key, payload=payload))
        else:
            row.payload = payload
        await self.db.flush()
        logger.debug("Saved snapshot '%s' with %d listings", self.key, len(snapshot.listings))
        return snapshot

    async def mutate(self, change: Callable[[StoreSnapshot], StoreSnapshot]) -> StoreSnapshot:
        """Apply change to the latest snapshot and commit it, one writer at a time.

        Errors raised by change (NotFoundError, ValidationError) leave the stored
        snapshot untouched.
        """
        async with _write_lock():
            snapshot = change(await self.load())
            await self.save(snapshot)
            await self.db.commit()
        return snapshot
