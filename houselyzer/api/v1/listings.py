"""Listings API router — CRUD, favorites, price indicator, comments, and URL import.
/api/v1/listings"""
from typing import List

from fastapi import APIRouter, Depends, Request

from houselyzer.api.deps import get_importer, get_store
from houselyzer.api.responses import ok
from houselyzer.schemas.base_schema import ApiResponse
from houselyzer.schemas.import_schema import ImportProgress, ImportRequest, ImportResponse
from houselyzer.schemas.listing_schema import (
    CommentCreate,
    Listing,
    ListingCollection,
    ListingComment,
    ListingCreate,
    ListingUpdate,
)
from houselyzer.services.importer_service import PropertyImporter
from houselyzer.services.store_service import ListingStore

router = APIRouter()


@router.get("", response_model=ApiResponse[ListingCollection])
async def list_listings(request: Request, store: ListingStore = Depends(get_store)):
    """List every tracked listing, in insertion order."""
    snapshot = await store.load()
    items = list(snapshot.listings)
    return ok(ListingCollection(items=items, total=len(items)), "Listings listed successfully", request)


@router.get("/favorites", response_model=ApiResponse[ListingCollection])
async def list_favorites(request: Request, store: ListingStore = Depends(get_store)):
    """List favorite listings."""
    snapshot = await store.load()
    items = list(snapshot.favorites)
    return ok(ListingCollection(items=items, total=len(items)), "Favorites listed successfully", request)


@router.post("/import", response_model=ApiResponse[ImportResponse])
async def import_listing(
    payload: ImportRequest,
    request: Request,
    store: ListingStore = Depends(get_store),
    importer: PropertyImporter = Depends(get_importer),
):
    """Import a listing from a URL; the listing is stored when the import succeeds."""
    progress: List[ImportProgress] = []
    result = await importer.import_property(payload.url, progress.append)

    if result.success and result.listing is not None:
        await store.mutate(lambda snapshot: snapshot.add_listing(result.listing))
        message = "Listing imported successfully"
    else:
        message = f"Import failed: {result.error}"

    return ok(ImportResponse(result=result, progress=progress), message, request)


@router.get("/{listing_id}", response_model=ApiResponse[Listing])
async def get_listing(listing_id: str, request: Request, store: ListingStore = Depends(get_store)):
    """Get a single listing by ID."""
    snapshot = await store.load()
    return ok(snapshot.get(listing_id), "Listing retrieved successfully", request)


@router.post("", response_model=ApiResponse[Listing], status_code=201)
async def create_listing(payload: ListingCreate, request: Request, store: ListingStore = Depends(get_store)):
    """Create a new listing manually."""
    listing = Listing.model_validate(payload.model_dump())
    await store.mutate(lambda snapshot: snapshot.add_listing(listing))
    return ok(listing, "Listing created successfully", request)


@router.patch("/{listing_id}", response_model=ApiResponse[Listing])
async def update_listing(
    listing_id: str,
    payload: ListingUpdate,
    request: Request,
    store: ListingStore = Depends(get_store),
):
    """Partially update a listing."""
    changes = payload.model_dump(exclude_unset=True)
    snapshot = await store.mutate(lambda s: s.update_listing(listing_id, changes))
    return ok(snapshot.get(listing_id), "Listing updated successfully", request)


@router.delete("/{listing_id}", response_model=ApiResponse[None], status_code=200)
async def delete_listing(listing_id: str, request: Request, store: ListingStore = Depends(get_store)):
    """Delete a listing (it also leaves the favorites)."""
    await store.mutate(lambda snapshot: snapshot.delete_listing(listing_id))
    return ok(None, "Listing deleted successfully", request)


@router.post("/{listing_id}/favorite", response_model=ApiResponse[Listing])
async def toggle_favorite(listing_id: str, request: Request, store: ListingStore = Depends(get_store)):
    """Flip the favorite flag of a listing."""
    snapshot = await store.mutate(lambda s: s.toggle_favorite(listing_id))
    return ok(snapshot.get(listing_id), "Favorite toggled successfully", request)


@router.post("/{listing_id}/price-indicator", response_model=ApiResponse[Listing])
async def cycle_price_indicator(listing_id: str, request: Request, store: ListingStore = Depends(get_store)):
    """Advance the price indicator: unset → good → expensive → unset."""
    snapshot = await store.mutate(lambda s: s.cycle_price_indicator(listing_id))
    return ok(snapshot.get(listing_id), "Price indicator updated successfully", request)


@router.post("/{listing_id}/comments", response_model=ApiResponse[Listing], status_code=201)
async def add_comment(
    listing_id: str,
    payload: CommentCreate,
    request: Request,
    store: ListingStore = Depends(get_store),
):
    """Attach a comment to a listing."""
    comment = ListingComment.model_validate(payload.model_dump())
    snapshot = await store.mutate(lambda s: s.add_comment(listing_id, comment))
    return ok(snapshot.get(listing_id), "Comment added successfully", request)


@router.delete("/{listing_id}/comments/{comment_id}", response_model=ApiResponse[Listing])
async def delete_comment(
    listing_id: str,
    comment_id: str,
    request: Request,
    store: ListingStore = Depends(get_store),
):
    """Remove a comment from a listing."""
    snapshot = await store.mutate(lambda s: s.delete_comment(listing_id, comment_id))
    return ok(snapshot.get(listing_id), "Comment deleted successfully", request)
