from tcgbridge.api.cards import router as cards_router
from tcgbridge.api.health import router as health_router
from tcgbridge.api.imports import router as imports_router

__all__ = [
    "cards_router",
    "health_router",
    "imports_router",
]
