from ringsledger.api.auth import router as auth_router
from ringsledger.api.campaigns import router as campaigns_router
from ringsledger.api.collection import router as collection_router
from ringsledger.api.decks import router as decks_router
from ringsledger.api.health import router as health_router

__all__ = [
    "auth_router",
    "campaigns_router",
    "collection_router",
    "decks_router",
    "health_router",
]
