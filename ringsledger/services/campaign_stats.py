"""Campaign sheet helpers: score totals, active players and hero autofill."""

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ringsledger.models.campaign import HERO_FIELDS


def computed_total_score(scores: Iterable[int | float | None]) -> int:
    """Sum of the run scores that are present and finite."""
    total = 0
    for score in scores:
        if score is None or isinstance(score, bool):
            continue
        if isinstance(score, float) and not math.isfinite(score):
            continue
        total += int(score)
    return total


def campaign_total(override: int | None, scores: Iterable[int | float | None]) -> int:
    """The campaign total: a manual override if set, else the computed sum."""
    if override is not None:
        return override
    return computed_total_score(scores)


def active_players(names: Iterable[str | None]) -> list[str]:
    """Player names that are filled in, stripped, in seat order."""
    return [name.strip() for name in names if name and name.strip()]


def format_heroes_block(deck_name: str, heroes: Iterable[Mapping[str, Any]]) -> str:
    """
    Render one deck's heroes for a campaign sheet hero slot.

    Example:
        Deck: Gondor
        - 01001 — Aragorn
        - 99999
    """
    lines = [f"Deck: {deck_name}"]
    for hero in heroes:
        code = hero.get("code", "")
        name = hero.get("name")
        lines.append(f"- {code} — {name}" if name else f"- {code}")
    return "\n".join(lines)


def heroes_autofill_patch(
    state: Mapping[str, Any],
    run_decks: Sequence[Mapping[str, Any]],
    overwrite: bool = False,
) -> dict[str, str]:
    """
    Build a campaign state patch that fills the hero slots from a run's decks.

    Decks fill heroes_p1 to heroes_p4 in order. A slot that already has
    text is left alone unless `overwrite` is set. Decks beyond the fourth
    are appended to heroes_p4, separated by blank lines.

    Args:
        state: Current campaign state (only the hero slots are read)
        run_decks: Decks of the run as served by the latest-run endpoint,
            each with a name and a list of {code, name} heroes
        overwrite: Replace slots that already have text

    Returns:
        Changed slots only; empty when there is nothing to fill
    """
    blocks = [
        format_heroes_block(deck.get("name", ""), deck.get("heroes") or [])
        for deck in run_decks
    ]

    patch: dict[str, str] = {}
    for slot, block in zip(HERO_FIELDS, blocks):
        if overwrite or not _slot_text(state, slot):
            patch[slot] = block

    extras = blocks[len(HERO_FIELDS) :]
    if extras:
        last = HERO_FIELDS[-1]
        current = _slot_text(state, last)
        base = blocks[len(HERO_FIELDS) - 1] if overwrite or not current else current
        patch[last] = "\n\n".join([base, *extras])

    return patch


def _slot_text(state: Mapping[str, Any], slot: str) -> str:
    return str(state.get(slot) or "").strip()
