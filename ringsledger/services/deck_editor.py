"""
Deck editor state.

The deck builder screen is driven by one immutable state object. Every
user interaction is an action, and `reduce_deck_editor` returns the next
state without touching the previous one. Views derive what they show
(`visible_cards`, `group_cards_by_type`) from the state alone.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from ringsledger.config import MAX_DECK_HEROES
from ringsledger.models.card import RingsCard
from ringsledger.models.deck import DeckContents

ENABLED_PACKS = "__enabled__"
ALL = "__all__"

TYPE_ORDER: tuple[str, ...] = (
    "hero",
    "ally",
    "attachment",
    "event",
    "player-side-quest",
    "contract",
    "treasure",
)

SPHERE_ORDER: tuple[str, ...] = (
    "leadership",
    "lore",
    "spirit",
    "tactics",
    "neutral",
    "baggins",
    "fellowship",
)

_UNRANKED = 99


@dataclass(frozen=True)
class DeckEditorState:
    """
    Everything the deck builder screen needs to render.

    `cards` is never mutated in place; reducers build a new dict.
    """

    deck_id: int
    deck_name: str = ""
    heroes: tuple[str, ...] = ()
    cards: dict[str, int] = field(default_factory=dict)
    pack_choice: str = ENABLED_PACKS
    query: str = ""
    type_filter: str = ALL
    sphere_filter: str = ALL
    preview_code: str | None = None

    def contents(self) -> DeckContents:
        return DeckContents(hero_codes=list(self.heroes), main_cards=dict(self.cards))


# --- Actions ---


@dataclass(frozen=True)
class LoadDeck:
    name: str
    heroes: tuple[str, ...]
    cards: dict[str, int]


@dataclass(frozen=True)
class RenameDeck:
    name: str


@dataclass(frozen=True)
class ToggleHero:
    code: str


@dataclass(frozen=True)
class SetCardQuantity:
    code: str
    qty: int


@dataclass(frozen=True)
class ReplaceContents:
    contents: DeckContents


@dataclass(frozen=True)
class ChoosePack:
    pack_choice: str


@dataclass(frozen=True)
class SetQuery:
    query: str


@dataclass(frozen=True)
class SetTypeFilter:
    type_filter: str


@dataclass(frozen=True)
class SetSphereFilter:
    sphere_filter: str


@dataclass(frozen=True)
class PreviewCard:
    code: str | None


DeckEditorAction = (
    LoadDeck
    | RenameDeck
    | ToggleHero
    | SetCardQuantity
    | ReplaceContents
    | ChoosePack
    | SetQuery
    | SetTypeFilter
    | SetSphereFilter
    | PreviewCard
)


def _normalized(heroes: Iterable[str], cards: dict[str, int]) -> tuple[tuple[str, ...], dict[str, int]]:
    unique_heroes = tuple(dict.fromkeys(heroes))[:MAX_DECK_HEROES]
    hero_set = set(unique_heroes)
    main = {code: qty for code, qty in cards.items() if qty > 0 and code not in hero_set}
    return unique_heroes, main


def reduce_deck_editor(state: DeckEditorState, action: DeckEditorAction) -> DeckEditorState:
    """Apply one action and return the next state."""
    if isinstance(action, LoadDeck):
        heroes, cards = _normalized(action.heroes, action.cards)
        return replace(state, deck_name=action.name, heroes=heroes, cards=cards)

    if isinstance(action, RenameDeck):
        return replace(state, deck_name=action.name)

    if isinstance(action, ToggleHero):
        if action.code in state.heroes:
            return replace(state, heroes=tuple(h for h in state.heroes if h != action.code))
        if len(state.heroes) >= MAX_DECK_HEROES:
            return state
        heroes, cards = _normalized((*state.heroes, action.code), state.cards)
        return replace(state, heroes=heroes, cards=cards)

    if isinstance(action, SetCardQuantity):
        if action.code in state.heroes:
            return state
        cards = dict(state.cards)
        qty = max(0, int(action.qty))
        if qty == 0:
            cards.pop(action.code, None)
        else:
            cards[action.code] = qty
        return replace(state, cards=cards)

    if isinstance(action, ReplaceContents):
        heroes, cards = _normalized(action.contents.hero_codes, action.contents.main_cards)
        return replace(state, heroes=heroes, cards=cards)

    if isinstance(action, ChoosePack):
        return replace(state, pack_choice=action.pack_choice)

    if isinstance(action, SetQuery):
        return replace(state, query=action.query)

    if isinstance(action, SetTypeFilter):
        return replace(state, type_filter=action.type_filter)

    if isinstance(action, SetSphereFilter):
        return replace(state, sphere_filter=action.sphere_filter)

    if isinstance(action, PreviewCard):
        return replace(state, preview_code=action.code)

    raise TypeError(f"Unknown deck editor action: {type(action).__name__}")


# --- Derived views ---


def pack_codes_for_choice(state: DeckEditorState, packs: Iterable[tuple[str, bool]]) -> list[str]:
    """Packs whose cards the builder should load: all enabled ones, or the single chosen pack."""
    if state.pack_choice == ENABLED_PACKS:
        return [code for code, enabled in packs if enabled]
    return [state.pack_choice]


def visible_cards(state: DeckEditorState, cards: Iterable[RingsCard]) -> list[RingsCard]:
    """Cards passing the type, sphere and text filters."""
    query = state.query.strip().lower()
    result: list[RingsCard] = []
    for card in cards:
        if state.type_filter != ALL and card.type_code != state.type_filter:
            continue
        if state.sphere_filter != ALL and (card.sphere_code or "") != state.sphere_filter:
            continue
        if query:
            haystack = f"{card.name} {card.traits or ''} {card.text or ''}".lower()
            if query not in haystack:
                continue
        result.append(card)
    return result


def _sphere_rank(card: RingsCard) -> int:
    sphere = card.sphere_code or ""
    return SPHERE_ORDER.index(sphere) if sphere in SPHERE_ORDER else _UNRANKED


def sort_cards_for_display(cards: Iterable[RingsCard]) -> list[RingsCard]:
    """Sort by sphere order, then name."""
    return sorted(cards, key=lambda c: (_sphere_rank(c), c.name))


def group_cards_by_type(cards: Iterable[RingsCard]) -> dict[str, list[RingsCard]]:
    """
    Group cards by type code, each group sorted by sphere then name.

    Groups follow TYPE_ORDER; unknown types come last under their own code
    (or "other" when the card has none).
    """
    groups: dict[str, list[RingsCard]] = {}
    for card in cards:
        groups.setdefault(card.type_code or "other", []).append(card)

    def type_rank(type_code: str) -> int:
        return TYPE_ORDER.index(type_code) if type_code in TYPE_ORDER else len(TYPE_ORDER)

    return {t: sort_cards_for_display(groups[t]) for t in sorted(groups, key=type_rank)}
