"""API router aggregation."""
from fastapi import APIRouter

from subdeck.api.endpoints import admin, cards, comments, content, items, storage

api_router = APIRouter(prefix="/api")
api_router.include_router(comments.router)
api_router.include_router(content.router)
api_router.include_router(cards.router)

# Catalogue and back office live at the root
root_router = APIRouter()
root_router.include_router(items.router)
root_router.include_router(storage.router)
root_router.include_router(admin.router)
