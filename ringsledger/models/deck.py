from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class DeckListLine:
    """
    One card line recognized in deck list text.

    Attributes:
        quantity: Copies listed (ignored for heroes)
        code: Card code, e.g. "01001"
        is_hero: True if the line sat inside the heroes section
    """

    quantity: int
    code: str
    is_hero: bool


@dataclass(frozen=True, slots=True)
class DeckCardEntry:
    """A main-deck card and its quantity, as sent to the replace endpoint."""

    card_code: str
    qty: int


@dataclass
class DeckContents:
    """
    The structured contents of a deck.

    Attributes:
        hero_codes: Up to 3 unique hero codes, in stored order
        main_cards: Non-hero cards {code: quantity}, quantities >= 1

    A code appears in at most one of hero_codes and main_cards.
    """

    hero_codes: list[str] = field(default_factory=list)
    main_cards: dict[str, int] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """True if there are no heroes and no main cards."""
        return not self.hero_codes and not self.main_cards

    def main_size(self) -> int:
        """Total copies in the main deck."""
        return sum(self.main_cards.values())

    def card_entries(self) -> list[DeckCardEntry]:
        """Main cards as a list of entries, in insertion order."""
        return [DeckCardEntry(card_code=code, qty=qty) for code, qty in self.main_cards.items()]
