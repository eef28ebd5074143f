"""
SQLAlchemy ORM models for persistent storage.

Only household overlay data is stored here: ownership counts, deck
contents and campaign logs. Card data itself lives in the card database.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# --- Decks ---


class DeckDB(Base):
    """A named deck of up to 3 heroes and a main pool of cards."""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    heroes: Mapped[list["DeckHeroDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan", order_by="DeckHeroDB.slot"
    )
    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan", order_by="DeckCardDB.card_code"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"


class DeckHeroDB(Base):
    """A hero assigned to a deck. `slot` keeps heroes in the order they were chosen."""

    __tablename__ = "deck_heroes"
    __table_args__ = (UniqueConstraint("deck_id", "card_code", name="uq_deck_hero"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_code: Mapped[str] = mapped_column(String(32))
    slot: Mapped[int] = mapped_column(Integer, default=0)

    deck: Mapped["DeckDB"] = relationship(back_populates="heroes")

    def __repr__(self) -> str:
        return f"<DeckHeroDB(deck={self.deck_id}, code={self.card_code})>"


class DeckCardDB(Base):
    """A main-deck card and how many copies the deck runs."""

    __tablename__ = "deck_cards"
    __table_args__ = (UniqueConstraint("deck_id", "card_code", name="uq_deck_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_code: Mapped[str] = mapped_column(String(32), index=True)
    qty: Mapped[int] = mapped_column(Integer, default=1)

    deck: Mapped["DeckDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<DeckCardDB(code={self.card_code}, qty={self.qty})>"


# --- Collection ---


class CollectionCardDB(Base):
    """How many copies of a card the household owns."""

    __tablename__ = "collection_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_code: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    owned_qty: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<CollectionCardDB(code={self.card_code}, owned={self.owned_qty})>"


class CollectionPackDB(Base):
    """A pack from the catalog; enabled packs feed the deckbuilding pool."""

    __tablename__ = "collection_packs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pack_code: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    pack_name: Mapped[str] = mapped_column(String(255))
    enabled: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<CollectionPackDB(code={self.pack_code}, enabled={self.enabled})>"


# --- Campaigns ---


class CampaignDB(Base):
    """A multi-session campaign."""

    __tablename__ = "campaigns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    ruleset: Mapped[str] = mapped_column(String(50), default="custom")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<CampaignDB(id={self.id}, name={self.name})>"


class CampaignScenarioDB(Base):
    """
    A scenario planned within a campaign.

    `position` is unique per campaign and defines display order. It is
    not constrained at the table level: a swap writes both rows before
    the order is consistent again.
    """

    __tablename__ = "campaign_scenarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    campaign_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(255))
    pack_code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    scenario_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<CampaignScenarioDB(id={self.id}, position={self.position})>"


class CampaignRunDB(Base):
    """A single logged play of a scenario."""

    __tablename__ = "campaign_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    campaign_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), index=True
    )
    scenario_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("campaign_scenarios.id", ondelete="SET NULL"), nullable=True
    )
    played_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    result: Mapped[str] = mapped_column(String(20))
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    threat_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rounds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<CampaignRunDB(id={self.id}, result={self.result})>"


class CampaignRunDeckDB(Base):
    """Links a run to a deck that was played in it."""

    __tablename__ = "campaign_run_decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("campaign_runs.id", ondelete="CASCADE"), index=True
    )
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    role: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class CampaignStateDB(Base):
    """Free-form campaign log fields, one row per campaign."""

    __tablename__ = "campaign_state"

    campaign_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), primary_key=True
    )
    player1: Mapped[str | None] = mapped_column(Text, nullable=True)
    player2: Mapped[str | None] = mapped_column(Text, nullable=True)
    player3: Mapped[str | None] = mapped_column(Text, nullable=True)
    player4: Mapped[str | None] = mapped_column(Text, nullable=True)
    heroes_p1: Mapped[str | None] = mapped_column(Text, nullable=True)
    heroes_p2: Mapped[str | None] = mapped_column(Text, nullable=True)
    heroes_p3: Mapped[str | None] = mapped_column(Text, nullable=True)
    heroes_p4: Mapped[str | None] = mapped_column(Text, nullable=True)
    fallen_heroes: Mapped[str | None] = mapped_column(Text, nullable=True)
    threat_penalty: Mapped[int] = mapped_column(Integer, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    boons: Mapped[str | None] = mapped_column(Text, nullable=True)
    burdens: Mapped[str | None] = mapped_column(Text, nullable=True)
    campaign_total_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class CampaignLogDB(Base):
    """Append-only campaign event record."""

    __tablename__ = "campaign_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    campaign_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), index=True
    )
    run_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    type: Mapped[str] = mapped_column(String(50))
    message: Mapped[str] = mapped_column(Text)
    meta: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<CampaignLogDB(type={self.type}, campaign={self.campaign_id})>"
