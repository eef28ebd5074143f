"""
Database CRUD operations.

Async functions for decks, ownership, packs and campaigns. None of them
commit: the request's session commits once the handler returns, so a
request that writes several rows applies all of them or none.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ringsledger.models.campaign import (
    PLAYER_FIELDS,
    STATE_TEXT_FIELDS,
    CampaignLogType,
    ReorderDirection,
    RunResult,
)
from ringsledger.models.card import RingsPack
from ringsledger.models.db import (
    CampaignDB,
    CampaignLogDB,
    CampaignRunDB,
    CampaignRunDeckDB,
    CampaignScenarioDB,
    CampaignStateDB,
    CollectionCardDB,
    CollectionPackDB,
    DeckCardDB,
    DeckDB,
    DeckHeroDB,
    utcnow,
)
from ringsledger.models.deck import DeckContents
from ringsledger.models.failure import FailureKind, KnownError, NotFoundError, PartialWriteError
from ringsledger.services.campaign_stats import active_players, campaign_total
from ringsledger.services.deck_stats import CardUsage, card_usage
from ringsledger.services.reorder import next_position, plan_position_swap

logger = logging.getLogger(__name__)


# --- Deck Operations ---


async def list_decks(session: AsyncSession) -> list[DeckDB]:
    """All decks, newest first."""
    result = await session.execute(
        select(DeckDB).order_by(DeckDB.created_at.desc(), DeckDB.id.desc())
    )
    return list(result.scalars().all())


async def create_deck(session: AsyncSession, name: str) -> DeckDB:
    """Create an empty deck. A blank name becomes "New Deck"."""
    deck = DeckDB(name=name.strip() or "New Deck")
    session.add(deck)
    await session.flush()
    return deck


async def get_deck(session: AsyncSession, deck_id: int) -> DeckDB | None:
    """
    Get a deck with its heroes and cards loaded.

    Always refreshes the collections so callers see rows written earlier
    in the same session.
    """
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.id == deck_id)
        .options(selectinload(DeckDB.heroes), selectinload(DeckDB.cards))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def require_deck(session: AsyncSession, deck_id: int) -> DeckDB:
    """Like get_deck, but raises NotFoundError when the deck is absent."""
    deck = await get_deck(session, deck_id)
    if deck is None:
        raise NotFoundError("Deck", deck_id)
    return deck


async def rename_deck(session: AsyncSession, deck_id: int, name: str) -> DeckDB:
    deck = await require_deck(session, deck_id)
    deck.name = name
    deck.updated_at = utcnow()
    await session.flush()
    return deck


async def delete_deck(session: AsyncSession, deck_id: int) -> bool:
    """
    Delete a deck with its heroes, cards and run links.

    Returns True if deleted, False if not found.
    """
    deck = await get_deck(session, deck_id)
    if deck is None:
        return False

    await session.execute(delete(CampaignRunDeckDB).where(CampaignRunDeckDB.deck_id == deck_id))
    await session.delete(deck)
    await session.flush()
    logger.info("Deleted deck %d", deck_id)
    return True


def deck_to_contents(deck: DeckDB) -> DeckContents:
    """Convert a loaded deck to its structured contents."""
    return DeckContents(
        hero_codes=[hero.card_code for hero in deck.heroes],
        main_cards={card.card_code: card.qty for card in deck.cards},
    )


async def set_deck_heroes(session: AsyncSession, deck_id: int, hero_codes: Sequence[str]) -> DeckDB:
    """
    Store the deck's heroes in order.

    The same codes are dropped from the main cards so a card is never
    both a hero and a main-deck card.
    """
    deck = await require_deck(session, deck_id)
    unique_codes = list(dict.fromkeys(hero_codes))

    # Old rows must be gone before new ones reuse (deck_id, card_code)
    deck.heroes.clear()
    await session.flush()

    hero_set = set(unique_codes)
    deck.heroes.extend(
        DeckHeroDB(card_code=code, slot=slot) for slot, code in enumerate(unique_codes)
    )
    deck.cards[:] = [card for card in deck.cards if card.card_code not in hero_set]
    deck.updated_at = utcnow()
    await session.flush()
    return deck


async def set_deck_card_qty(session: AsyncSession, deck_id: int, card_code: str, qty: int) -> DeckDB:
    """
    Upsert one main-deck card. A quantity of 0 or less removes it.

    Raises:
        NotFoundError: If the deck does not exist
        KnownError: If the card is one of the deck's heroes
    """
    deck = await require_deck(session, deck_id)
    if any(hero.card_code == card_code for hero in deck.heroes):
        raise KnownError(
            kind=FailureKind.INVALID_INPUT,
            message=f"Card {card_code} is a hero in this deck",
            suggestion="Remove it from the heroes first.",
            status_code=400,
        )

    qty = max(0, qty)
    existing = next((card for card in deck.cards if card.card_code == card_code), None)
    if qty == 0:
        if existing is not None:
            deck.cards.remove(existing)
    elif existing is not None:
        existing.qty = qty
    else:
        deck.cards.append(DeckCardDB(card_code=card_code, qty=qty))

    deck.updated_at = utcnow()
    await session.flush()
    return deck


async def replace_deck_contents(session: AsyncSession, deck_id: int, contents: DeckContents) -> DeckDB:
    """
    Replace every hero and card row of a deck.

    Deletes and inserts happen in the caller's transaction; if the
    inserts fail the deletes are rolled back with them.
    """
    deck = await require_deck(session, deck_id)

    deck.heroes.clear()
    deck.cards.clear()
    await session.flush()

    hero_set = set(contents.hero_codes)
    deck.heroes.extend(
        DeckHeroDB(card_code=code, slot=slot) for slot, code in enumerate(contents.hero_codes)
    )
    deck.cards.extend(
        DeckCardDB(card_code=code, qty=qty)
        for code, qty in contents.main_cards.items()
        if qty > 0 and code not in hero_set
    )
    deck.updated_at = utcnow()
    await session.flush()

    logger.info(
        "Replaced deck %d contents: %d heroes, %d cards",
        deck_id,
        len(deck.heroes),
        len(deck.cards),
    )
    return deck


async def list_deck_summaries(session: AsyncSession) -> list[DeckDB]:
    """All decks with heroes and cards loaded, most recently updated first."""
    result = await session.execute(
        select(DeckDB)
        .options(selectinload(DeckDB.heroes), selectinload(DeckDB.cards))
        .order_by(DeckDB.updated_at.desc(), DeckDB.id.desc())
    )
    return list(result.scalars().all())


async def get_card_usage(session: AsyncSession, card_codes: Sequence[str]) -> dict[str, list[CardUsage]]:
    """Which decks run each of the given cards, and how many copies."""
    if not card_codes:
        return {}

    rows = (
        await session.execute(
            select(DeckCardDB.card_code, DeckCardDB.deck_id, DeckCardDB.qty)
            .where(DeckCardDB.card_code.in_(card_codes))
            .order_by(DeckCardDB.card_code, DeckCardDB.deck_id)
        )
    ).all()

    deck_ids = {deck_id for _, deck_id, _ in rows}
    names: dict[int, str] = {}
    if deck_ids:
        name_rows = await session.execute(select(DeckDB.id, DeckDB.name).where(DeckDB.id.in_(deck_ids)))
        names = {deck_id: name for deck_id, name in name_rows.all()}

    return card_usage(((code, deck_id, qty) for code, deck_id, qty in rows), names)


# --- Ownership Operations ---


async def get_owned(session: AsyncSession, card_codes: Sequence[str]) -> dict[str, int]:
    """Owned quantities for the given codes. Codes never recorded are absent."""
    if not card_codes:
        return {}
    result = await session.execute(
        select(CollectionCardDB).where(CollectionCardDB.card_code.in_(card_codes))
    )
    return {row.card_code: row.owned_qty for row in result.scalars().all()}


async def upsert_owned(session: AsyncSession, card_code: str, owned_qty: int) -> CollectionCardDB:
    """Set how many copies of a card are owned. Negative values clamp to 0."""
    result = await session.execute(
        select(CollectionCardDB).where(CollectionCardDB.card_code == card_code)
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = CollectionCardDB(card_code=card_code, owned_qty=max(0, owned_qty))
        session.add(row)
    else:
        row.owned_qty = max(0, owned_qty)
    await session.flush()
    return row


async def upsert_owned_bulk(session: AsyncSession, rows: Iterable[tuple[str, int]]) -> int:
    """
    Upsert many ownership rows. Later rows for the same code win.

    Returns the number of distinct codes written.
    """
    wanted: dict[str, int] = {}
    for card_code, owned_qty in rows:
        wanted[card_code] = max(0, owned_qty)
    if not wanted:
        return 0

    result = await session.execute(
        select(CollectionCardDB).where(CollectionCardDB.card_code.in_(list(wanted)))
    )
    existing = {row.card_code: row for row in result.scalars().all()}

    for card_code, owned_qty in wanted.items():
        row = existing.get(card_code)
        if row is None:
            session.add(CollectionCardDB(card_code=card_code, owned_qty=owned_qty))
        else:
            row.owned_qty = owned_qty

    await session.flush()
    return len(wanted)


# --- Pack Operations ---


async def list_packs(session: AsyncSession) -> list[CollectionPackDB]:
    """All known packs, ordered by name."""
    result = await session.execute(
        select(CollectionPackDB).order_by(CollectionPackDB.pack_name, CollectionPackDB.pack_code)
    )
    return list(result.scalars().all())


async def sync_pack_catalog(
    session: AsyncSession,
    packs: Iterable[RingsPack],
    default_enabled: Iterable[str],
) -> list[CollectionPackDB]:
    """
    Merge the card database's pack catalog into the local pack table.

    New packs are inserted enabled only if listed in `default_enabled`.
    Existing packs keep their enabled flag; only their name is refreshed.

    Returns all packs ordered by name.
    """
    defaults = set(default_enabled)
    result = await session.execute(select(CollectionPackDB))
    existing = {row.pack_code: row for row in result.scalars().all()}

    added = 0
    for pack in packs:
        row = existing.get(pack.code)
        if row is None:
            row = CollectionPackDB(
                pack_code=pack.code,
                pack_name=pack.name,
                enabled=pack.code in defaults,
            )
            session.add(row)
            existing[pack.code] = row
            added += 1
        elif row.pack_name != pack.name:
            row.pack_name = pack.name

    await session.flush()
    if added:
        logger.info("Pack catalog sync added %d packs", added)
    return await list_packs(session)


async def set_pack_enabled(session: AsyncSession, pack_code: str, enabled: bool) -> CollectionPackDB:
    """
    Enable or disable a pack.

    Raises:
        NotFoundError: If the pack has never been synced
    """
    result = await session.execute(
        select(CollectionPackDB).where(CollectionPackDB.pack_code == pack_code)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError("Pack", pack_code)
    row.enabled = enabled
    await session.flush()
    return row


async def enabled_pack_codes(session: AsyncSession) -> list[str]:
    result = await session.execute(
        select(CollectionPackDB.pack_code)
        .where(CollectionPackDB.enabled.is_(True))
        .order_by(CollectionPackDB.pack_code)
    )
    return list(result.scalars().all())


# --- Campaign Operations ---


async def list_campaigns(session: AsyncSession) -> list[CampaignDB]:
    """All campaigns, most recently updated first."""
    result = await session.execute(
        select(CampaignDB).order_by(CampaignDB.updated_at.desc(), CampaignDB.id.desc())
    )
    return list(result.scalars().all())


async def get_campaign(session: AsyncSession, campaign_id: int) -> CampaignDB | None:
    return await session.get(CampaignDB, campaign_id)


async def require_campaign(session: AsyncSession, campaign_id: int) -> CampaignDB:
    campaign = await get_campaign(session, campaign_id)
    if campaign is None:
        raise NotFoundError("Campaign", campaign_id)
    return campaign


async def add_log_entry(
    session: AsyncSession,
    campaign_id: int,
    log_type: CampaignLogType,
    message: str,
    meta: Mapping[str, Any] | None = None,
    run_id: int | None = None,
) -> CampaignLogDB:
    """Append an event to the campaign log."""
    entry = CampaignLogDB(
        campaign_id=campaign_id,
        run_id=run_id,
        type=log_type.value,
        message=message,
        meta=dict(meta or {}),
    )
    session.add(entry)
    await session.flush()
    return entry


async def create_campaign(
    session: AsyncSession,
    name: str,
    description: str | None = None,
    ruleset: str | None = None,
) -> CampaignDB:
    """Create a campaign and log its creation."""
    campaign = CampaignDB(
        name=name,
        description=description,
        ruleset=(ruleset or "").strip() or "custom",
    )
    session.add(campaign)
    await session.flush()

    await add_log_entry(
        session,
        campaign.id,
        CampaignLogType.CAMPAIGN_CREATED,
        f"Campaign created: {campaign.name}",
        meta={"ruleset": campaign.ruleset},
    )
    return campaign


async def update_campaign(session: AsyncSession, campaign_id: int, changes: Mapping[str, Any]) -> CampaignDB:
    """
    Apply a partial update to a campaign and log it.

    Only the keys present in `changes` are written.
    """
    campaign = await require_campaign(session, campaign_id)
    for key in ("name", "description", "ruleset"):
        if key in changes:
            setattr(campaign, key, changes[key])
    campaign.updated_at = utcnow()
    await session.flush()

    await add_log_entry(
        session,
        campaign_id,
        CampaignLogType.CAMPAIGN_UPDATED,
        "Campaign updated",
        meta=dict(changes),
    )
    return campaign


async def delete_campaign(session: AsyncSession, campaign_id: int) -> bool:
    """
    Delete a campaign with its scenarios, runs, run links, state and log.

    Returns True if deleted, False if not found.
    """
    campaign = await get_campaign(session, campaign_id)
    if campaign is None:
        return False

    run_ids = select(CampaignRunDB.id).where(CampaignRunDB.campaign_id == campaign_id)
    await session.execute(
        delete(CampaignRunDeckDB)
        .where(CampaignRunDeckDB.run_id.in_(run_ids))
        .execution_options(synchronize_session="fetch")
    )
    await session.execute(delete(CampaignLogDB).where(CampaignLogDB.campaign_id == campaign_id))
    await session.execute(delete(CampaignStateDB).where(CampaignStateDB.campaign_id == campaign_id))
    await session.execute(delete(CampaignRunDB).where(CampaignRunDB.campaign_id == campaign_id))
    await session.execute(
        delete(CampaignScenarioDB).where(CampaignScenarioDB.campaign_id == campaign_id)
    )
    await session.delete(campaign)
    await session.flush()

    logger.info("Deleted campaign %d", campaign_id)
    return True


# --- Scenario Operations ---


async def list_scenarios(session: AsyncSession, campaign_id: int) -> list[CampaignScenarioDB]:
    """Scenarios in display order: position, then creation order."""
    result = await session.execute(
        select(CampaignScenarioDB)
        .where(CampaignScenarioDB.campaign_id == campaign_id)
        .order_by(
            CampaignScenarioDB.position,
            CampaignScenarioDB.created_at,
            CampaignScenarioDB.id,
        )
    )
    return list(result.scalars().all())


async def add_scenario(
    session: AsyncSession,
    campaign_id: int,
    title: str,
    pack_code: str | None = None,
    scenario_code: str | None = None,
) -> CampaignScenarioDB:
    """Append a scenario after the current last position."""
    await require_campaign(session, campaign_id)

    positions = await session.execute(
        select(CampaignScenarioDB.position).where(CampaignScenarioDB.campaign_id == campaign_id)
    )
    scenario = CampaignScenarioDB(
        campaign_id=campaign_id,
        title=title,
        pack_code=pack_code,
        scenario_code=scenario_code,
        position=next_position(positions.scalars().all()),
    )
    session.add(scenario)
    await session.flush()

    await add_log_entry(
        session,
        campaign_id,
        CampaignLogType.SCENARIO_ADDED,
        f"Scenario added: {title}",
        meta={"scenario_id": scenario.id},
    )
    return scenario


async def reorder_scenario(
    session: AsyncSession,
    campaign_id: int,
    scenario_id: int,
    direction: ReorderDirection,
) -> bool:
    """
    Move a scenario one step up or down.

    Returns True if two scenarios swapped positions, False if the
    scenario was already first (up) or last (down).

    Raises:
        NotFoundError: If the scenario is not in this campaign
        PartialWriteError: If the paired position update fails
    """
    scenarios = await list_scenarios(session, campaign_id)
    swap = plan_position_swap(scenarios, scenario_id, direction)
    if swap is None:
        return False

    by_id = {scenario.id: scenario for scenario in scenarios}
    by_id[swap.target_id].position = swap.target_position
    by_id[swap.neighbor_id].position = swap.neighbor_position

    try:
        await session.flush()
    except SQLAlchemyError as e:
        logger.error("Scenario reorder failed for campaign %d: %s", campaign_id, e)
        raise PartialWriteError("Scenario reorder", detail=str(e)) from e

    logger.info(
        "Moved scenario %d %s in campaign %d", scenario_id, direction.value, campaign_id
    )
    return True


# --- Run Operations ---


async def list_runs(session: AsyncSession, campaign_id: int) -> list[CampaignRunDB]:
    """Runs of a campaign, most recently played first."""
    result = await session.execute(
        select(CampaignRunDB)
        .where(CampaignRunDB.campaign_id == campaign_id)
        .order_by(
            CampaignRunDB.played_at.desc(),
            CampaignRunDB.created_at.desc(),
            CampaignRunDB.id.desc(),
        )
    )
    return list(result.scalars().all())


async def create_run(
    session: AsyncSession,
    campaign_id: int,
    result: RunResult,
    *,
    scenario_id: int | None = None,
    played_at: datetime | None = None,
    score: int | None = None,
    threat_end: int | None = None,
    rounds: int | None = None,
    notes: str | None = None,
    deck_links: Sequence[tuple[int, str | None]] = (),
) -> CampaignRunDB:
    """
    Log a play of a scenario together with the decks that played it.

    Raises:
        NotFoundError: If the campaign, scenario or a linked deck is absent
    """
    campaign = await require_campaign(session, campaign_id)

    if scenario_id is not None:
        scenario = await session.get(CampaignScenarioDB, scenario_id)
        if scenario is None or scenario.campaign_id != campaign_id:
            raise NotFoundError("Scenario", scenario_id)

    deck_ids = list(dict.fromkeys(deck_id for deck_id, _ in deck_links))
    if deck_ids:
        found = await session.execute(select(DeckDB.id).where(DeckDB.id.in_(deck_ids)))
        missing = set(deck_ids) - set(found.scalars().all())
        if missing:
            raise NotFoundError("Deck", min(missing))

    run = CampaignRunDB(
        campaign_id=campaign_id,
        scenario_id=scenario_id,
        result=result.value,
        score=score,
        threat_end=threat_end,
        rounds=rounds,
        notes=notes,
    )
    if played_at is not None:
        run.played_at = played_at
    session.add(run)
    await session.flush()

    for deck_id, role in deck_links:
        session.add(CampaignRunDeckDB(run_id=run.id, deck_id=deck_id, role=role))
    campaign.updated_at = utcnow()
    await session.flush()

    await add_log_entry(
        session,
        campaign_id,
        CampaignLogType.RUN_CREATED,
        f"Run logged: {result.value}",
        meta={
            "scenario_id": scenario_id,
            "deck_ids": [deck_id for deck_id, _ in deck_links],
            "deck_links": [{"deck_id": deck_id, "role": role} for deck_id, role in deck_links],
        },
        run_id=run.id,
    )
    return run


@dataclass
class RunDeck:
    """A deck linked to a run, with its hero codes in slot order."""

    deck_id: int
    name: str
    role: str | None
    hero_codes: list[str] = field(default_factory=list)


async def get_latest_run(
    session: AsyncSession, campaign_id: int
) -> tuple[CampaignRunDB | None, list[RunDeck]]:
    """
    The most recently played run and the decks linked to it.

    Links whose deck no longer exists are skipped.
    """
    result = await session.execute(
        select(CampaignRunDB)
        .where(CampaignRunDB.campaign_id == campaign_id)
        .order_by(
            CampaignRunDB.played_at.desc(),
            CampaignRunDB.created_at.desc(),
            CampaignRunDB.id.desc(),
        )
        .limit(1)
    )
    run = result.scalar_one_or_none()
    if run is None:
        return None, []

    rows = await session.execute(
        select(CampaignRunDeckDB, DeckDB)
        .join(DeckDB, DeckDB.id == CampaignRunDeckDB.deck_id)
        .where(CampaignRunDeckDB.run_id == run.id)
        .options(selectinload(DeckDB.heroes))
        .order_by(CampaignRunDeckDB.id)
    )
    decks = [
        RunDeck(
            deck_id=deck.id,
            name=deck.name,
            role=link.role,
            hero_codes=[hero.card_code for hero in deck.heroes],
        )
        for link, deck in rows.all()
    ]
    return run, decks


async def run_scores(session: AsyncSession, campaign_id: int) -> list[int | None]:
    result = await session.execute(
        select(CampaignRunDB.score).where(CampaignRunDB.campaign_id == campaign_id)
    )
    return list(result.scalars().all())


# --- Campaign State Operations ---


async def get_or_create_state(session: AsyncSession, campaign_id: int) -> CampaignStateDB:
    """Return the campaign's state row, creating an empty one if missing."""
    await require_campaign(session, campaign_id)

    state = await session.get(CampaignStateDB, campaign_id)
    if state is None:
        state = CampaignStateDB(campaign_id=campaign_id, threat_penalty=0)
        session.add(state)
        await session.flush()
    return state


def _coerce_int(value: Any, default: int | None) -> int | None:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def coerce_state_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """
    Normalize a raw state patch.

    Text fields become strings (null stays null), threat_penalty becomes
    an int with invalid values read as 0, and campaign_total_override
    becomes an int or null. Unknown keys are dropped.
    """
    patch: dict[str, Any] = {}
    for key in STATE_TEXT_FIELDS:
        if key in changes:
            value = changes[key]
            patch[key] = None if value is None else str(value)

    if "threat_penalty" in changes:
        patch["threat_penalty"] = _coerce_int(changes["threat_penalty"], 0)

    if "campaign_total_override" in changes:
        patch["campaign_total_override"] = _coerce_int(changes["campaign_total_override"], None)

    return patch


async def patch_campaign_state(
    session: AsyncSession, campaign_id: int, changes: Mapping[str, Any]
) -> CampaignStateDB:
    """Apply only the provided state fields, creating the row if missing."""
    state = await get_or_create_state(session, campaign_id)
    for key, value in coerce_state_changes(changes).items():
        setattr(state, key, value)
    state.updated_at = utcnow()
    await session.flush()
    return state


async def list_log_entries(session: AsyncSession, campaign_id: int, limit: int = 200) -> list[CampaignLogDB]:
    """Campaign log, newest first."""
    result = await session.execute(
        select(CampaignLogDB)
        .where(CampaignLogDB.campaign_id == campaign_id)
        .order_by(CampaignLogDB.created_at.desc(), CampaignLogDB.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


# --- Campaign Summaries ---


@dataclass
class CampaignSummary:
    """Overview row for the campaign list."""

    campaign: CampaignDB
    players: list[str] = field(default_factory=list)
    decks: list[tuple[int, str]] = field(default_factory=list)
    score_total: int = 0


async def list_campaign_summaries(session: AsyncSession) -> list[CampaignSummary]:
    """
    Every campaign with its players, the decks it has used and its score total.

    The score total is the manual override when one is set, otherwise
    the sum of run scores.
    """
    campaigns = await list_campaigns(session)
    if not campaigns:
        return []

    states = {
        state.campaign_id: state
        for state in (await session.execute(select(CampaignStateDB))).scalars().all()
    }

    scores: dict[int, list[int | None]] = {}
    for campaign_id, score in (
        await session.execute(select(CampaignRunDB.campaign_id, CampaignRunDB.score))
    ).all():
        scores.setdefault(campaign_id, []).append(score)

    decks: dict[int, list[tuple[int, str]]] = {}
    deck_rows = await session.execute(
        select(CampaignRunDB.campaign_id, DeckDB.id, DeckDB.name)
        .join(CampaignRunDeckDB, CampaignRunDeckDB.run_id == CampaignRunDB.id)
        .join(DeckDB, DeckDB.id == CampaignRunDeckDB.deck_id)
        .group_by(CampaignRunDB.campaign_id, DeckDB.id, DeckDB.name)
        .order_by(CampaignRunDB.campaign_id, func.lower(DeckDB.name), DeckDB.id)
    )
    for campaign_id, deck_id, deck_name in deck_rows.all():
        decks.setdefault(campaign_id, []).append((deck_id, deck_name))

    summaries = []
    for campaign in campaigns:
        state = states.get(campaign.id)
        players = active_players(getattr(state, f) for f in PLAYER_FIELDS) if state else []
        override = state.campaign_total_override if state else None
        summaries.append(
            CampaignSummary(
                campaign=campaign,
                players=players,
                decks=decks.get(campaign.id, []),
                score_total=campaign_total(override, scores.get(campaign.id, [])),
            )
        )
    return summaries
