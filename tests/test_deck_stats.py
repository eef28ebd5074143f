"""Tests for deck and ownership aggregations."""

from ringsledger.models.card import RingsCard
from ringsledger.services.deck_stats import (
    CardUsage,
    card_usage,
    deck_main_size,
    deck_primary_spheres,
    deck_sphere_counts,
    deck_type_counts,
)


class TestDeckCounts:
    def test_main_size_excludes_heroes(self) -> None:
        """Hero codes never count toward the main deck size."""
        assert deck_main_size(["01001"], {"01001": 1, "01016": 3, "01017": 2}) == 5

    def test_main_size_empty(self) -> None:
        """An empty deck has size 0."""
        assert deck_main_size([], {}) == 0

    def test_type_counts(self, core_cards: dict[str, RingsCard]) -> None:
        """Copies are summed per type; unknown cards count as other."""
        cards = {"01016": 3, "01017": 2, "01020": 1, "99999": 4}

        counts = deck_type_counts([], cards, core_cards)

        assert counts == {"ally": 5, "event": 1, "other": 4}

    def test_sphere_counts(self, core_cards: dict[str, RingsCard]) -> None:
        """Copies are summed per sphere; unknown cards count as unknown."""
        cards = {"01016": 3, "01073": 1, "99999": 2}

        counts = deck_sphere_counts(["01001"], cards, core_cards)

        assert counts == {"leadership": 3, "neutral": 1, "unknown": 2}

    def test_primary_spheres(self) -> None:
        """Known spheres are ranked by copies, capped by the limit."""
        counts = {"unknown": 50, "lore": 4, "leadership": 10, "spirit": 6, "tactics": 1}

        assert deck_primary_spheres(counts) == ["leadership", "spirit", "lore"]
        assert deck_primary_spheres(counts, limit=1) == ["leadership"]


class TestCardUsage:
    def test_groups_by_card(self) -> None:
        """Rows are grouped by card code with deck names attached."""
        rows = [("01016", 1, 3), ("01016", 2, 1), ("01020", 2, 2)]

        usage = card_usage(rows, {1: "Gondor", 2: "Rohan"})

        assert usage == {
            "01016": [
                CardUsage(deck_id=1, deck_name="Gondor", qty=3),
                CardUsage(deck_id=2, deck_name="Rohan", qty=1),
            ],
            "01020": [CardUsage(deck_id=2, deck_name="Rohan", qty=2)],
        }

    def test_unknown_deck_falls_back_to_id(self) -> None:
        """A deck missing from the name map is labelled by its id."""
        usage = card_usage([("01016", 7, 1)], {})

        assert usage["01016"][0].deck_name == "7"

    def test_no_rows(self) -> None:
        """No rows means no usage."""
        assert card_usage([], {1: "Gondor"}) == {}
