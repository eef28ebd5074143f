"""
Deck and ownership aggregations.

All functions take plain mappings so they work the same on ORM rows,
request bodies and decoded deck lists.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from ringsledger.models.card import RingsCard

UNKNOWN_SPHERE = "unknown"
OTHER_TYPE = "other"


@dataclass(frozen=True, slots=True)
class CardUsage:
    """One deck that runs a given card."""

    deck_id: int
    deck_name: str
    qty: int


def _main_entries(heroes: Sequence[str], cards: Mapping[str, int]) -> Iterable[tuple[str, int]]:
    hero_set = set(heroes)
    return ((code, qty) for code, qty in cards.items() if code not in hero_set)


def deck_main_size(heroes: Sequence[str], cards: Mapping[str, int]) -> int:
    """Copies in the main deck, not counting heroes."""
    return sum(qty for _, qty in _main_entries(heroes, cards))


def deck_type_counts(
    heroes: Sequence[str],
    cards: Mapping[str, int],
    index: Mapping[str, RingsCard],
) -> dict[str, int]:
    """Main-deck copies per card type. Cards missing from the index count as "other"."""
    counts: dict[str, int] = {}
    for code, qty in _main_entries(heroes, cards):
        card = index.get(code)
        type_code = ((card.type_code if card else None) or OTHER_TYPE).lower()
        counts[type_code] = counts.get(type_code, 0) + qty
    return counts


def deck_sphere_counts(
    heroes: Sequence[str],
    cards: Mapping[str, int],
    index: Mapping[str, RingsCard],
) -> dict[str, int]:
    """Main-deck copies per sphere. Cards missing from the index count as "unknown"."""
    counts: dict[str, int] = {}
    for code, qty in _main_entries(heroes, cards):
        card = index.get(code)
        sphere = ((card.sphere_code if card else None) or UNKNOWN_SPHERE).lower()
        counts[sphere] = counts.get(sphere, 0) + qty
    return counts


def deck_primary_spheres(sphere_counts: Mapping[str, int], limit: int = 3) -> list[str]:
    """The most-played known spheres, largest first."""
    known = [(sphere, qty) for sphere, qty in sphere_counts.items() if sphere != UNKNOWN_SPHERE]
    known.sort(key=lambda item: item[1], reverse=True)
    return [sphere for sphere, _ in known[:limit]]


def card_usage(
    rows: Iterable[tuple[str, int, int]],
    deck_names: Mapping[int, str],
) -> dict[str, list[CardUsage]]:
    """
    Group deck card rows by card code.

    Args:
        rows: (card_code, deck_id, qty) tuples
        deck_names: deck_id -> name; unknown decks fall back to their id

    Returns:
        {card_code: [CardUsage, ...]}
    """
    usage: dict[str, list[CardUsage]] = {}
    for card_code, deck_id, qty in rows:
        usage.setdefault(card_code, []).append(
            CardUsage(
                deck_id=deck_id,
                deck_name=deck_names.get(deck_id, str(deck_id)),
                qty=qty,
            )
        )
    return usage
