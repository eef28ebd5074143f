"""
Deck API endpoints.

Decks, their heroes and main cards, plus the deck list text import and
export used for sharing decks as plain text.
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ringsledger.config import MAX_CARD_QTY, MAX_DECK_HEROES
from ringsledger.db import (
    create_deck,
    deck_to_contents,
    delete_deck,
    enabled_pack_codes,
    list_deck_summaries,
    list_decks,
    rename_deck,
    replace_deck_contents,
    require_deck,
    set_deck_card_qty,
    set_deck_heroes,
)
from ringsledger.db.database import get_session
from ringsledger.models.card import RingsCard
from ringsledger.models.db import DeckDB
from ringsledger.models.deck import DeckContents
from ringsledger.models.failure import EmptyImportError, NotFoundError
from ringsledger.services.deck_list_formatter import format_deck_list
from ringsledger.services.deck_list_parser import decode_deck_list
from ringsledger.services.deck_stats import (
    deck_main_size,
    deck_primary_spheres,
    deck_sphere_counts,
    deck_type_counts,
)
from ringsledger.services.family_auth import require_family_session
from ringsledger.services.ringsdb import (
    RingsDBClient,
    build_card_index,
    get_ringsdb_client,
    resolve_cards,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/decks",
    tags=["decks"],
    dependencies=[Depends(require_family_session)],
)


class DeckListItem(BaseModel):
    id: int
    name: str
    created_at: datetime


class DeckListResponse(BaseModel):
    decks: list[DeckListItem]


class DeckCardModel(BaseModel):
    """A main-deck card and its quantity."""

    card_code: str
    qty: int


class DeckInfo(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    deck: DeckInfo
    heroes: list[str] = Field(default_factory=list)
    cards: list[DeckCardModel] = Field(default_factory=list)


class DeckSummaryItem(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime
    heroes: list[str] = Field(default_factory=list)
    cards: list[DeckCardModel] = Field(default_factory=list)
    main_size: int = 0


class DeckSummaryResponse(BaseModel):
    decks: list[DeckSummaryItem]


class DeckNameRequest(BaseModel):
    name: str = ""


class HeroesRequest(BaseModel):
    heroes: list[str] = Field(default_factory=list, description="Hero card codes, in order")


class CardQtyRequest(BaseModel):
    card_code: str = ""
    qty: float = Field(
        default=0,
        allow_inf_nan=False,
        le=MAX_CARD_QTY,
        description="Copies; truncated to an integer, 0 removes the card",
    )


class ReplaceRequest(BaseModel):
    """Request model for replacing a deck's full contents."""

    heroes: list[str] = Field(default_factory=list)
    cards: list[CardQtyRequest] = Field(default_factory=list)


class ImportRequest(BaseModel):
    text: str = Field(
        default="",
        description="Deck list text",
        examples=["Heroes (1):\n1x 01001 Aragorn\n\nALLY (2):\n2x 01016 Snowbourn Scout"],
    )


class ExportResponse(BaseModel):
    text: str


class DeckStatsResponse(BaseModel):
    """Main-deck counts by type and sphere."""

    main_size: int
    type_counts: dict[str, int] = Field(default_factory=dict)
    sphere_counts: dict[str, int] = Field(default_factory=dict)
    primary_spheres: list[str] = Field(default_factory=list)


class OkResponse(BaseModel):
    ok: bool


def _deck_response(deck: DeckDB) -> DeckResponse:
    return DeckResponse(
        deck=DeckInfo(
            id=deck.id,
            name=deck.name,
            created_at=deck.created_at,
            updated_at=deck.updated_at,
        ),
        heroes=[hero.card_code for hero in deck.heroes],
        cards=[DeckCardModel(card_code=card.card_code, qty=card.qty) for card in deck.cards],
    )


def _checked_heroes(heroes: list[str]) -> list[str]:
    codes = list(dict.fromkeys(code.strip() for code in heroes if code and code.strip()))
    if len(codes) > MAX_DECK_HEROES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many heroes (max {MAX_DECK_HEROES})",
        )
    return codes


async def _resolve_deck_cards(
    session: AsyncSession,
    client: RingsDBClient,
    contents: DeckContents,
) -> dict[str, RingsCard]:
    """Card metadata for a deck: enabled packs first, then single-card lookups."""
    index = await build_card_index(client, await enabled_pack_codes(session))
    codes = [*contents.hero_codes, *contents.main_cards]
    return await resolve_cards(client, codes, index)


@router.get("", response_model=DeckListResponse)
async def get_decks(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckListResponse:
    """List decks, newest first."""
    decks = await list_decks(session)
    return DeckListResponse(
        decks=[DeckListItem(id=d.id, name=d.name, created_at=d.created_at) for d in decks]
    )


@router.post("", response_model=DeckInfo)
async def post_deck(
    request: DeckNameRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckInfo:
    """Create an empty deck. A blank name becomes "New Deck"."""
    deck = await create_deck(session, request.name)
    return DeckInfo(
        id=deck.id,
        name=deck.name,
        created_at=deck.created_at,
        updated_at=deck.updated_at,
    )


@router.get("/summary", response_model=DeckSummaryResponse)
async def get_deck_summaries(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckSummaryResponse:
    """Every deck with its heroes and cards, most recently updated first."""
    items = []
    for deck in await list_deck_summaries(session):
        heroes = [hero.card_code for hero in deck.heroes]
        cards = {card.card_code: card.qty for card in deck.cards}
        items.append(
            DeckSummaryItem(
                id=deck.id,
                name=deck.name,
                created_at=deck.created_at,
                updated_at=deck.updated_at,
                heroes=heroes,
                cards=[DeckCardModel(card_code=c, qty=q) for c, q in cards.items()],
                main_size=deck_main_size(heroes, cards),
            )
        )
    return DeckSummaryResponse(decks=items)


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_deck_detail(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Get a deck with its heroes and cards."""
    return _deck_response(await require_deck(session, deck_id))


@router.patch("/{deck_id}", response_model=DeckResponse)
async def patch_deck(
    deck_id: int,
    request: DeckNameRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Rename a deck."""
    name = request.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name is required",
        )
    return _deck_response(await rename_deck(session, deck_id, name))


@router.delete("/{deck_id}", response_model=OkResponse)
async def remove_deck(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OkResponse:
    """Delete a deck along with its heroes, cards and run links."""
    if not await delete_deck(session, deck_id):
        raise NotFoundError("Deck", deck_id)
    return OkResponse(ok=True)


@router.post("/{deck_id}/heroes", response_model=DeckResponse)
async def post_heroes(
    deck_id: int,
    request: HeroesRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Set the deck's heroes (0 to 3, in order)."""
    heroes = _checked_heroes(request.heroes)
    return _deck_response(await set_deck_heroes(session, deck_id, heroes))


@router.post("/{deck_id}/cards", response_model=DeckResponse)
async def post_card(
    deck_id: int,
    request: CardQtyRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Set how many copies of a card the deck runs. 0 removes it."""
    card_code = request.card_code.strip()
    if not card_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="card_code required",
        )
    deck = await set_deck_card_qty(session, deck_id, card_code, int(request.qty))
    return _deck_response(deck)


@router.post("/{deck_id}/replace", response_model=DeckResponse)
async def post_replace(
    deck_id: int,
    request: ReplaceRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Replace all heroes and cards of a deck.

    Quantities are truncated and clamped at 0; cards left at 0 are dropped.
    """
    heroes = _checked_heroes(request.heroes)
    cards: dict[str, int] = {}
    for entry in request.cards:
        code = entry.card_code.strip()
        qty = max(0, int(entry.qty))
        if code and qty > 0:
            cards[code] = qty

    deck = await replace_deck_contents(
        session, deck_id, DeckContents(hero_codes=heroes, main_cards=cards)
    )
    return _deck_response(deck)


@router.post("/{deck_id}/import", response_model=DeckResponse)
async def post_import(
    deck_id: int,
    request: ImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Replace a deck's contents from deck list text.

    Text with no recognizable card lines is rejected and the deck is
    left untouched.
    """
    contents = decode_deck_list(request.text)
    if contents.is_empty():
        raise EmptyImportError()

    deck = await replace_deck_contents(session, deck_id, contents)
    logger.info(
        "Imported deck %d: %d heroes, %d main cards",
        deck_id,
        len(contents.hero_codes),
        contents.main_size(),
    )
    return _deck_response(deck)


@router.get("/{deck_id}/export", response_model=ExportResponse)
async def get_export(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[RingsDBClient, Depends(get_ringsdb_client)],
) -> ExportResponse:
    """Render the deck as deck list text."""
    deck = await require_deck(session, deck_id)
    contents = deck_to_contents(deck)
    cards_by_code = await _resolve_deck_cards(session, client, contents)
    return ExportResponse(text=format_deck_list(deck.name, contents, cards_by_code))


@router.get("/{deck_id}/stats", response_model=DeckStatsResponse)
async def get_stats(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[RingsDBClient, Depends(get_ringsdb_client)],
) -> DeckStatsResponse:
    """Main-deck size and copies per type and sphere."""
    deck = await require_deck(session, deck_id)
    contents = deck_to_contents(deck)
    index = await _resolve_deck_cards(session, client, contents)

    spheres = deck_sphere_counts(contents.hero_codes, contents.main_cards, index)
    return DeckStatsResponse(
        main_size=deck_main_size(contents.hero_codes, contents.main_cards),
        type_counts=deck_type_counts(contents.hero_codes, contents.main_cards, index),
        sphere_counts=spheres,
        primary_spheres=deck_primary_spheres(spheres),
    )
