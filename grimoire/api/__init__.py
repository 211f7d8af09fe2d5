from grimoire.api.cards import router as cards_router
from grimoire.api.collection import router as collection_router
from grimoire.api.decks import router as decks_router
from grimoire.api.errors import register_exception_handlers
from grimoire.api.health import router as health_router

__all__ = [
    "cards_router",
    "collection_router",
    "decks_router",
    "health_router",
    "register_exception_handlers",
]
