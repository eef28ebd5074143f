"""Tests for the deck list formatter and its agreement with the parser."""

from ringsledger.models.card import RingsCard
from ringsledger.models.deck import DeckContents
from ringsledger.services.deck_list_formatter import format_deck_list
from ringsledger.services.deck_list_parser import decode_deck_list


class TestFormatDeckList:
    def test_full_layout(self, core_cards: dict[str, RingsCard]) -> None:
        """Header, heroes, then type buckets in fixed order."""
        contents = DeckContents(
            hero_codes=["01001", "01005"],
            main_cards={"01020": 2, "01017": 1, "01016": 3, "01026": 2},
        )

        text = format_deck_list("Dwarf Mining", contents, core_cards)

        assert text == (
            "Deck: Dwarf Mining\n"
            "\n"
            "Heroes (2):\n"
            "1x 01001 Aragorn\n"
            "1x 01005 Gimli\n"
            "\n"
            "ALLY (4):\n"
            "1x 01017 Silverlode Archer\n"
            "3x 01016 Snowbourn Scout\n"
            "\n"
            "ATTACHMENT (2):\n"
            "2x 01026 Steward of Gondor\n"
            "\n"
            "EVENT (2):\n"
            "2x 01020 Ever Vigilant\n"
        )

    def test_heroes_keep_stored_order(self, core_cards: dict[str, RingsCard]) -> None:
        """Heroes are not sorted by name."""
        contents = DeckContents(hero_codes=["01012", "01001"])

        text = format_deck_list("Order", contents, core_cards)

        assert text.index("Glorfindel") < text.index("Aragorn")

    def test_unresolved_cards_omitted(self, core_cards: dict[str, RingsCard]) -> None:
        """Cards without metadata are left out of the text."""
        contents = DeckContents(hero_codes=["99999"], main_cards={"88888": 2, "01016": 1})

        text = format_deck_list("Partial", contents, core_cards)

        assert "99999" not in text
        assert "88888" not in text
        assert "ALLY (1):" in text

    def test_heroes_count_matches_written_lines(self, core_cards: dict[str, RingsCard]) -> None:
        """The heroes header counts only the heroes that were written."""
        contents = DeckContents(hero_codes=["01001", "99999"])

        text = format_deck_list("Partial", contents, core_cards)

        assert text == "Deck: Partial\n\nHeroes (1):\n1x 01001 Aragorn\n"
        assert decode_deck_list(text).hero_codes == ["01001"]

    def test_unknown_type_goes_to_other(self) -> None:
        """Cards with an unfamiliar type land in OTHER."""
        odd = RingsCard(code="X1", name="Odd Thing", type_code="boon")

        text = format_deck_list("Odd", DeckContents(main_cards={"X1": 1}), {"X1": odd})

        assert "OTHER (1):\n1x X1 Odd Thing" in text

    def test_empty_deck(self) -> None:
        """An empty deck still has its header and heroes line."""
        text = format_deck_list("Empty", DeckContents(), {})

        assert text == "Deck: Empty\n\nHeroes (0):\n"


class TestCodecAgreement:
    def test_round_trip(self, core_cards: dict[str, RingsCard]) -> None:
        """Decoding formatted text gives back the same contents."""
        contents = DeckContents(
            hero_codes=["01005", "01001", "01012"],
            main_cards={"01016": 3, "01017": 2, "01020": 1, "01026": 2, "01073": 1},
        )

        decoded = decode_deck_list(format_deck_list("Round Trip", contents, core_cards))

        assert decoded.hero_codes == contents.hero_codes
        assert decoded.main_cards == contents.main_cards

    def test_decode_format_decode_is_idempotent(self, core_cards: dict[str, RingsCard]) -> None:
        """Re-encoding a decoded paste and decoding again changes nothing."""
        pasted = (
            "heroes\n1x 01001 Aragorn\n1x 01005\n"
            "Allies (lots):\n2x 01016\n1x 01073 Gandalf\n5x 01016\n"
            "random commentary\n1x 01020"
        )

        first = decode_deck_list(pasted)
        second = decode_deck_list(format_deck_list("Again", first, core_cards))

        assert second == first

    def test_formatted_heroes_disjoint_from_main(self, core_cards: dict[str, RingsCard]) -> None:
        """A code in both fields is written only as a hero."""
        contents = DeckContents(hero_codes=["01001"], main_cards={"01001": 2, "01016": 1})

        decoded = decode_deck_list(format_deck_list("Overlap", contents, core_cards))

        assert decoded.hero_codes == ["01001"]
        assert decoded.main_cards == {"01016": 1}
