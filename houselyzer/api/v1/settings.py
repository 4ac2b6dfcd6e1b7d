"""Settings API router — user preferences, data export and data reset.
/api/v1/settings"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from houselyzer.api.deps import get_store
from houselyzer.api.responses import ok
from houselyzer.schemas.base_schema import ApiResponse
from houselyzer.schemas.settings_schema import SettingsUpdate, UserSettings
from houselyzer.services.store_service import ListingStore, StoreExport

router = APIRouter()


@router.get("", response_model=ApiResponse[UserSettings])
async def get_settings(request: Request, store: ListingStore = Depends(get_store)):
    snapshot = await store.load()
    return ok(snapshot.settings, "Settings retrieved successfully", request)


@router.patch("", response_model=ApiResponse[UserSettings])
async def update_settings(payload: SettingsUpdate, request: Request, store: ListingStore = Depends(get_store)):
    changes = payload.model_dump(exclude_unset=True)
    snapshot = await store.mutate(lambda s: s.update_settings(changes))
    return ok(snapshot.settings, "Settings updated successfully", request)


@router.get("/export")
async def export_data(store: ListingStore = Depends(get_store)):
    """Download listings, favorites and settings as one JSON file."""
    export = StoreExport.from_snapshot(await store.load())
    filename = f"houselyzer-data-{export.export_date.date().isoformat()}.json"
    return JSONResponse(
        content=export.model_dump(mode="json"),
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.delete("/data", response_model=ApiResponse[None])
async def clear_data(request: Request, store: ListingStore = Depends(get_store)):
    """Delete every stored listing. Settings are kept."""
    await store.mutate(lambda s: s.clear())
    return ok(None, "Data cleared successfully", request)
