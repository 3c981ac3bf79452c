"""Admin object-store browsing and raw uploads."""
import asyncio

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from subdeck.api.deps import get_current_admin
from subdeck.schemas.media import StorageListResponse, StorageObjectResponse
from subdeck.services.storage_service import MAX_PAGE_SIZE, get_storage

router = APIRouter(prefix="/r2", tags=["storage"], dependencies=[Depends(get_current_admin)])


@router.get("/list", response_model=StorageListResponse)
async def list_objects(
    prefix: str = "",
    cursor: str | None = None,
    limit: int = MAX_PAGE_SIZE,
):
    """One page of objects under `prefix`. `limit` is clamped to 1..1000."""
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    page = await asyncio.to_thread(get_storage().list_page, prefix, cursor or None, limit)
    return StorageListResponse(
        objects=[StorageObjectResponse(key=o.key, size=o.size, modified=o.modified) for o in page.objects],
        cursor=page.cursor,
        truncated=page.cursor is not None,
    )


@router.put("/upload")
async def upload_object(
    request: Request,
    key: str = Query(..., min_length=1),
    ct: str = Query("application/octet-stream"),
):
    """Store the raw request body under `key`."""
    data = await request.body()
    try:
        await asyncio.to_thread(get_storage().put, key, data, ct)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"ok": True, "key": key}


@router.delete("/delete")
async def delete_object(key: str = Query(..., min_length=1)):
    try:
        await asyncio.to_thread(get_storage().delete, key)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"ok": True}
