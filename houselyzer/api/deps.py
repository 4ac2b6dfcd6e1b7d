"""API dependencies — database session, listing store, importer, and authentication.

Every router is protected by the X-API-Key header (see main.py); /health and
the docs stay public. The key is configured with API_KEY in the environment.
"""
import secrets
from typing import AsyncGenerator, Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from houselyzer.config import settings
from houselyzer.database import async_session_factory
from houselyzer.services.importer_service import PropertyImporter
from houselyzer.services.store_service import ListingStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session for request scope."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_store(db: AsyncSession = Depends(get_db)) -> ListingStore:
    """Listing store bound to the request's session."""
    return ListingStore(db)


def get_importer() -> PropertyImporter:
    """Importer configured from settings."""
    return PropertyImporter.from_settings()


_api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,  # custom 401 instead of 403
    description="API key, configured with API_KEY in the environment",
)


async def verify_api_key(
    api_key: Annotated[str | None, Security(_api_key_header)],
) -> str:
    """Validate the X-API-Key header with a constant-time comparison.

    Raises:
        HTTPException 401: missing or wrong key.
        HTTPException 500: API_KEY is not configured on the server.
    """
    if not settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server is not configured correctly (missing API_KEY).",
        )

    if not api_key or not secrets.compare_digest(api_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key. Use the X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


RequireApiKey = Depends(verify_api_key)
