"""
Collection API endpoints.

Owned card counts, the pack catalog with per-pack enablement, and which
decks use which cards.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ringsledger.config import MAX_CARD_QTY, MAX_CODE_LOOKUP, settings
from ringsledger.db import (
    get_card_usage,
    get_owned,
    list_packs,
    set_pack_enabled,
    sync_pack_catalog,
    upsert_owned,
    upsert_owned_bulk,
)
from ringsledger.db.database import get_session
from ringsledger.services.deck_editor import sort_cards_for_display
from ringsledger.services.family_auth import require_family_session
from ringsledger.services.ringsdb import (
    RingsDBClient,
    card_stats_line,
    get_ringsdb_client,
    is_player_card,
)

router = APIRouter(
    prefix="/api",
    tags=["collection"],
    dependencies=[Depends(require_family_session)],
)


class OwnedResponse(BaseModel):
    owned: dict[str, int] = Field(default_factory=dict)


class OwnedRow(BaseModel):
    card_code: str = ""
    owned_qty: float = Field(
        default=0,
        allow_inf_nan=False,
        le=MAX_CARD_QTY,
        description="Copies owned; truncated and clamped at 0",
    )


class BulkOwnedRequest(BaseModel):
    rows: list[OwnedRow] = Field(default_factory=list)


class BulkOwnedResponse(BaseModel):
    ok: bool
    count: int


class PackModel(BaseModel):
    pack_code: str
    pack_name: str
    enabled: bool


class PackListResponse(BaseModel):
    packs: list[PackModel]


class PackToggleRequest(BaseModel):
    pack_code: str = ""
    enabled: bool = False


class PackCardModel(BaseModel):
    """A player card in a pack, with how many copies are owned."""

    code: str
    name: str
    type_code: str | None = None
    sphere_code: str | None = None
    traits: str | None = None
    stats: str
    owned_qty: int = 0


class PackCardsResponse(BaseModel):
    pack_code: str
    cards: list[PackCardModel]


class UsageEntry(BaseModel):
    deck_id: int
    deck_name: str
    qty: int


class UsageResponse(BaseModel):
    usage: dict[str, list[UsageEntry]] = Field(default_factory=dict)


class OkResponse(BaseModel):
    ok: bool


def _requested_codes(codes: list[str]) -> list[str]:
    unique = list(dict.fromkeys(code.strip() for code in codes if code and code.strip()))
    return unique[:MAX_CODE_LOOKUP]


@router.get("/owned", response_model=OwnedResponse)
async def get_owned_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    code: Annotated[list[str], Query()] = [],  # noqa: B006
) -> OwnedResponse:
    """Owned quantities for the requested card codes."""
    return OwnedResponse(owned=await get_owned(session, _requested_codes(code)))


@router.post("/owned", response_model=OkResponse)
async def post_owned(
    request: OwnedRow,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OkResponse:
    """Set how many copies of one card the household owns."""
    card_code = request.card_code.strip()
    if not card_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="card_code required",
        )
    await upsert_owned(session, card_code, max(0, int(request.owned_qty)))
    return OkResponse(ok=True)


@router.post("/owned/bulk", response_model=BulkOwnedResponse)
async def post_owned_bulk(
    request: BulkOwnedRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BulkOwnedResponse:
    """Set owned quantities for many cards at once."""
    rows = [
        (row.card_code.strip(), max(0, int(row.owned_qty)))
        for row in request.rows
        if row.card_code and row.card_code.strip()
    ]
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No rows provided",
        )
    count = await upsert_owned_bulk(session, rows)
    return BulkOwnedResponse(ok=True, count=count)


@router.get("/packs", response_model=PackListResponse)
async def get_packs(
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[RingsDBClient, Depends(get_ringsdb_client)],
) -> PackListResponse:
    """
    Sync the pack catalog from the card database and list all packs.

    Packs seen for the first time start enabled only if they are in the
    default set. Existing packs keep whatever the household chose.
    """
    catalog = await client.fetch_all_packs()
    rows = await sync_pack_catalog(session, catalog, settings.default_enabled_packs)
    return PackListResponse(
        packs=[
            PackModel(pack_code=row.pack_code, pack_name=row.pack_name, enabled=row.enabled)
            for row in rows
        ]
    )


@router.patch("/packs", response_model=OkResponse)
async def patch_pack(
    request: PackToggleRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OkResponse:
    """Enable or disable a pack."""
    pack_code = request.pack_code.strip()
    if not pack_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="pack_code required",
        )
    await set_pack_enabled(session, pack_code, request.enabled)
    return OkResponse(ok=True)


@router.get("/packs/{pack_code}/cards", response_model=PackCardsResponse)
async def get_pack_cards(
    pack_code: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[RingsDBClient, Depends(get_ringsdb_client)],
) -> PackCardsResponse:
    """Player cards of a pack, in sphere then name order, with owned counts."""
    cards = sort_cards_for_display(
        card for card in await client.fetch_cards_by_pack(pack_code) if is_player_card(card)
    )
    owned = await get_owned(session, [card.code for card in cards])
    return PackCardsResponse(
        pack_code=pack_code,
        cards=[
            PackCardModel(
                code=card.code,
                name=card.name,
                type_code=card.type_code,
                sphere_code=card.sphere_code,
                traits=card.traits,
                stats=card_stats_line(card),
                owned_qty=owned.get(card.code, 0),
            )
            for card in cards
        ],
    )


@router.get("/usage", response_model=UsageResponse)
async def get_usage(
    session: Annotated[AsyncSession, Depends(get_session)],
    code: Annotated[list[str], Query()] = [],  # noqa: B006
) -> UsageResponse:
    """Which decks run each requested card, and how many copies."""
    usage = await get_card_usage(session, _requested_codes(code))
    return UsageResponse(
        usage={
            card_code: [
                UsageEntry(deck_id=u.deck_id, deck_name=u.deck_name, qty=u.qty) for u in entries
            ]
            for card_code, entries in usage.items()
        }
    )
