"""
Deck List Formatter.

Renders deck contents as the text used by "Copy as text".

Output shape:

    Deck: Dwarf Mining

    Heroes (2):
    1x 01001 Aragorn
    1x 01002 Théodred

    ALLY (4):
    3x 01016 Snowbourn Scout
    1x 01017 Silverlode Archer

    EVENT (2):
    2x 01020 Ever Vigilant

Cards whose metadata cannot be resolved are left out rather than
written without a name. Section headers end in "):" so the parser
can find the section boundaries.
"""

from __future__ import annotations

from collections.abc import Mapping

from ringsledger.models.card import RingsCard
from ringsledger.models.deck import DeckContents

# Fixed bucket order for non-hero cards
TYPE_BUCKETS: tuple[str, ...] = (
    "ally",
    "attachment",
    "event",
    "player-side-quest",
    "contract",
    "treasure",
    "other",
)


def _bucket_for(card: RingsCard) -> str:
    type_code = (card.type_code or "").lower()
    if type_code in TYPE_BUCKETS:
        return type_code
    return "other"


def _format_card_line(qty: int, card: RingsCard) -> str:
    return f"{qty}x {card.code} {card.name}"


def format_deck_list(
    deck_name: str,
    contents: DeckContents,
    cards_by_code: Mapping[str, RingsCard],
) -> str:
    """
    Format a deck as deck list text.

    Args:
        deck_name: Name shown in the header line
        contents: Heroes and main cards to render
        cards_by_code: Card metadata used for names and type buckets

    Returns:
        Multi-line deck list text
    """
    lines: list[str] = [f"Deck: {deck_name}", ""]

    # Unresolved heroes are omitted, so count the lines actually written
    hero_lines = [
        _format_card_line(1, cards_by_code[code])
        for code in contents.hero_codes
        if code in cards_by_code
    ]
    lines.append(f"Heroes ({len(hero_lines)}):")
    lines.extend(hero_lines)
    lines.append("")

    hero_set = set(contents.hero_codes)
    buckets: dict[str, list[tuple[RingsCard, int]]] = {t: [] for t in TYPE_BUCKETS}
    for code, qty in contents.main_cards.items():
        if code in hero_set or qty <= 0:
            continue
        card = cards_by_code.get(code)
        if card is None:
            continue
        buckets[_bucket_for(card)].append((card, qty))

    for type_code in TYPE_BUCKETS:
        entries = buckets[type_code]
        if not entries:
            continue

        entries.sort(key=lambda entry: (entry[0].name, entry[0].code))
        total = sum(qty for _, qty in entries)

        lines.append(f"{type_code.upper()} ({total}):")
        for card, qty in entries:
            lines.append(_format_card_line(qty, card))
        lines.append("")

    return "\n".join(lines)
