"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class InventoryEntryDB(Base):
    """
    Copies of one card owned by one user.

    A row with zero quantity is never stored; the row is deleted instead.
    """

    __tablename__ = "inventory_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", name="uq_inventory_user_card"),
        CheckConstraint("quantity > 0", name="ck_inventory_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[str] = mapped_column(String(64), index=True)
    card_name: Mapped[str] = mapped_column(String(255), default="")
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<InventoryEntryDB(user={self.user_id}, card={self.card_id}, qty={self.quantity})>"


class DeckDB(Base):
    """A user's deck. Slots are deleted with the deck."""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    slots: Mapped[list["DeckSlotDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, owner={self.owner_id}, name={self.name})>"


class DeckSlotDB(Base):
    """
    Copies of one card on one board of a deck.

    At most one row per (deck, card, board); quantity is always positive.
    """

    __tablename__ = "deck_slots"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_id", "board", name="uq_deck_card_board"),
        CheckConstraint("quantity > 0", name="ck_slot_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), index=True)
    board: Mapped[str] = mapped_column(String(16), default="mainboard")
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="slots")

    def __repr__(self) -> str:
        return f"<DeckSlotDB(deck={self.deck_id}, card={self.card_id}, board={self.board}, qty={self.quantity})>"
