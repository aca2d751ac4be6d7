from rarityforge.api.collections import router as collections_router
from rarityforge.api.health import router as health_router

__all__ = [
    "collections_router",
    "health_router",
]
