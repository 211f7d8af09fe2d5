"""
Grimoire services.

Business logic for deck building and collection management.
"""

from grimoire.services.card_catalog import (
    CatalogError,
    MetadataCache,
    PrintingNotFoundError,
    ScryfallCatalog,
    get_metadata_cache,
)
from grimoire.services.deck_composer import (
    DeckComposer,
    KeyedLocks,
    build_collection_view,
    check_quantity_change,
    find_overcommitted_cards,
)
from grimoire.services.deck_exporter import format_export
from grimoire.services.deck_library import (
    clone_deck,
    create_user_deck,
    get_owned_deck,
    get_visible_deck,
    list_user_decks,
    remove_deck,
    rename_deck,
    set_deck_visibility,
)
from grimoire.services.deck_stats import (
    classify_primary_type,
    compute_mana_curve,
    compute_type_distribution,
    summarize_deck,
)

__all__ = [
    "CatalogError",
    "DeckComposer",
    "KeyedLocks",
    "MetadataCache",
    "PrintingNotFoundError",
    "ScryfallCatalog",
    "build_collection_view",
    "check_quantity_change",
    "classify_primary_type",
    "clone_deck",
    "compute_mana_curve",
    "compute_type_distribution",
    "create_user_deck",
    "find_overcommitted_cards",
    "format_export",
    "get_metadata_cache",
    "get_owned_deck",
    "get_visible_deck",
    "list_user_decks",
    "remove_deck",
    "rename_deck",
    "set_deck_visibility",
    "summarize_deck",
]
