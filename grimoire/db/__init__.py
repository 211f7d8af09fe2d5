from grimoire.db.database import get_session, init_db
from grimoire.db.operations import (
    adjust_quantity,
    collection_to_model,
    compare_and_set_slot,
    copy_slots,
    create_deck,
    deck_to_model,
    delete_deck,
    get_deck,
    get_inventory_entry,
    get_quantity,
    get_slot,
    inventory_entry_to_model,
    list_decks,
    list_inventory,
    list_slots,
    load_deck,
    set_quantity,
    slot_to_model,
)

__all__ = [
    "adjust_quantity",
    "collection_to_model",
    "compare_and_set_slot",
    "copy_slots",
    "create_deck",
    "deck_to_model",
    "delete_deck",
    "get_deck",
    "get_inventory_entry",
    "get_quantity",
    "get_session",
    "get_slot",
    "init_db",
    "inventory_entry_to_model",
    "list_decks",
    "list_inventory",
    "list_slots",
    "load_deck",
    "set_quantity",
    "slot_to_model",
]
