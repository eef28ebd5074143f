"""Tests for the deck list parser."""

from ringsledger.models.deck import DeckListLine
from ringsledger.services.deck_list_parser import decode_deck_list, parse_deck_list_lines


class TestParseLines:
    def test_card_line_outside_heroes(self) -> None:
        """A quantity, an x and a code make a main-deck line."""
        lines = parse_deck_list_lines("2x 01016 Snowbourn Scout")

        assert lines == [DeckListLine(quantity=2, code="01016", is_hero=False)]

    def test_spacing_variants(self) -> None:
        """Whitespace around the x is optional."""
        lines = parse_deck_list_lines("3 x ABC01\n2x01005\n1  X  01001")

        assert [(line.quantity, line.code) for line in lines] == [(3, "ABC01"), (2, "01005")]

    def test_heroes_header_sets_flag(self) -> None:
        """Lines after a heroes header are hero lines."""
        lines = parse_deck_list_lines("Heroes (2):\n1x 01001 Aragorn\n1x 01005 Gimli")

        assert all(line.is_hero for line in lines)
        assert [line.code for line in lines] == ["01001", "01005"]

    def test_heroes_header_is_case_insensitive(self) -> None:
        """HEROES, heroes and Heroes: all start the section."""
        for header in ("HEROES", "heroes", "Heroes:"):
            lines = parse_deck_list_lines(f"{header}\n1x 01001")
            assert lines[0].is_hero is True

    def test_other_section_header_clears_flag(self) -> None:
        """Any other line ending in '):' ends the heroes section."""
        text = "Heroes (1):\n1x 01001 Aragorn\nALLY (2):\n2x 01016 Snowbourn Scout"

        lines = parse_deck_list_lines(text)

        assert [line.is_hero for line in lines] == [True, False]

    def test_headers_are_not_card_lines(self) -> None:
        """Section headers never produce card lines."""
        lines = parse_deck_list_lines("Heroes (3):\nEVENT (4):\nDeck: Test")

        assert lines == []

    def test_mixed_line_endings(self) -> None:
        """CRLF, CR and LF are all line breaks."""
        lines = parse_deck_list_lines("1x 01001\r\n2x 01016\r3x 01017\n4x 01020")

        assert [line.code for line in lines] == ["01001", "01016", "01017", "01020"]

    def test_skips_unrecognized_lines(self) -> None:
        """Prose and malformed lines are ignored."""
        lines = parse_deck_list_lines("Some notes\nx2 01001\n2 01016\n-1x 01017\n\n   \n2x 01020")

        assert [line.code for line in lines] == ["01020"]

    def test_keeps_zero_quantity_lines(self) -> None:
        """The line parser does not filter by quantity."""
        lines = parse_deck_list_lines("0x 01016")

        assert lines == [DeckListLine(quantity=0, code="01016", is_hero=False)]


class TestDecodeDeckList:
    def test_decodes_heroes_and_cards(self) -> None:
        """Heroes and main cards land in their own fields."""
        text = (
            "Deck: Leadership\n\n"
            "Heroes (1):\n1x 01001 Aragorn\n\n"
            "ALLY (3):\n2x 01016 Snowbourn Scout\n1x 01017 Silverlode Archer\n"
        )

        contents = decode_deck_list(text)

        assert contents.hero_codes == ["01001"]
        assert contents.main_cards == {"01016": 2, "01017": 1}

    def test_hero_cap(self) -> None:
        """Only the first three distinct heroes are kept."""
        text = "Heroes:\n1x H1\n1x H2\n1x H1\n1x H3\n1x H4"

        contents = decode_deck_list(text)

        assert contents.hero_codes == ["H1", "H2", "H3"]

    def test_hero_quantity_ignored(self) -> None:
        """A hero listed with any quantity is still one hero."""
        contents = decode_deck_list("Heroes:\n3x 01001")

        assert contents.hero_codes == ["01001"]
        assert contents.main_cards == {}

    def test_last_write_wins(self) -> None:
        """A repeated main card keeps its last quantity."""
        contents = decode_deck_list("2x 01016\n3x 01016")

        assert contents.main_cards == {"01016": 3}

    def test_zero_quantity_dropped(self) -> None:
        """Main lines with quantity 0 are ignored."""
        contents = decode_deck_list("0x 01016\n2x 01017")

        assert contents.main_cards == {"01017": 2}

    def test_heroes_and_main_cards_disjoint(self) -> None:
        """A code listed as a hero is removed from the main cards."""
        text = "2x 01001\nHeroes:\n1x 01001\nALLY (1):\n1x 01016"

        contents = decode_deck_list(text)

        assert contents.hero_codes == ["01001"]
        assert contents.main_cards == {"01016": 1}

    def test_garbage_yields_empty(self) -> None:
        """Text with no card lines decodes to empty contents."""
        for text in ("", "hello world", "Heroes (0):\n\nALLY (0):", "🙂\x00\t"):
            contents = decode_deck_list(text)
            assert contents.is_empty()

    def test_decode_is_stable(self) -> None:
        """Decoding the same text twice gives the same contents."""
        text = "Heroes:\n1x 01001\n1x 01005\nEVENT (2):\n2x 01020"

        assert decode_deck_list(text) == decode_deck_list(text)
