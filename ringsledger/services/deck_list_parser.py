"""
Deck List Parser.

Reads the human-readable deck list format back into deck contents.

=============================================================================
INTERCHANGE CONTRACT
=============================================================================

This parser defines what counts as a deck list. The formatter is one
writer of text that satisfies it; pasted or hand-edited lists are others.

Recognized lines:
- "Heroes (3):", "heroes", "HEROES:"  -> starts the heroes section
- "ALLY (12):", "Events (5):"         -> any other "...):" ends it
- "2x 01005 Gandalf", "3 x ABC01"     -> a card line (quantity + code)

Anything after the code on a card line (usually the display name) is
ignored. Every other line is skipped. Parsing never fails: text with no
recognizable card lines yields empty contents, and callers decide what
an empty import means.
"""

from __future__ import annotations

import re

from ringsledger.config import MAX_DECK_HEROES
from ringsledger.models.deck import DeckContents, DeckListLine

# Quantity, literal "x", then an alphanumeric code ending at a word boundary
CARD_LINE_PATTERN = re.compile(r"^(\d+)\s*x\s*([A-Za-z0-9]+)\b")

HEROES_HEADER_PREFIX = "heroes"

SECTION_HEADER_SUFFIX = "):"

_LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


def _is_heroes_header(line_lower: str) -> bool:
    return line_lower.startswith(HEROES_HEADER_PREFIX)


def _is_other_section_header(line_lower: str) -> bool:
    return line_lower.endswith(SECTION_HEADER_SUFFIX) and not _is_heroes_header(line_lower)


def parse_deck_list_lines(text: str) -> list[DeckListLine]:
    """
    Extract card lines from deck list text.

    Each returned line records whether it appeared inside the heroes
    section. No deduplication or capping happens here.

    Args:
        text: Raw deck list text (any line-ending convention)

    Returns:
        Recognized card lines in the order they appear
    """
    lines: list[DeckListLine] = []
    in_heroes = False

    for raw_line in _LINE_BREAK_PATTERN.split(text or ""):
        line = raw_line.strip()
        if not line:
            continue

        line_lower = line.lower()

        if _is_heroes_header(line_lower):
            in_heroes = True
            continue

        if _is_other_section_header(line_lower):
            in_heroes = False
            continue

        match = CARD_LINE_PATTERN.match(line)
        if match is None:
            continue

        qty_str, code = match.groups()
        lines.append(DeckListLine(quantity=int(qty_str), code=code, is_hero=in_heroes))

    return lines


def decode_deck_list(text: str) -> DeckContents:
    """
    Decode deck list text into deck contents.

    - Heroes: the first 3 distinct hero codes, in the order encountered
    - Main cards: quantity > 0 only; a repeated code keeps its last quantity
    - A code listed as a hero is never also a main card

    Args:
        text: Raw deck list text

    Returns:
        DeckContents; empty if nothing was recognized
    """
    heroes: list[str] = []
    main_cards: dict[str, int] = {}

    for line in parse_deck_list_lines(text):
        if line.is_hero:
            if line.code not in heroes and len(heroes) < MAX_DECK_HEROES:
                heroes.append(line.code)
            continue

        if line.quantity > 0:
            main_cards[line.code] = line.quantity

    hero_set = set(heroes)
    return DeckContents(
        hero_codes=heroes,
        main_cards={code: qty for code, qty in main_cards.items() if code not in hero_set},
    )
