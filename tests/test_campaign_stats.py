"""Tests for campaign sheet helpers."""

from ringsledger.services.campaign_stats import (
    active_players,
    campaign_total,
    computed_total_score,
    format_heroes_block,
    heroes_autofill_patch,
)


class TestComputedTotalScore:
    def test_sums_present_scores(self) -> None:
        """Missing scores are skipped."""
        assert computed_total_score([120, None, 80, None, 15]) == 215

    def test_empty(self) -> None:
        """No runs means a total of 0."""
        assert computed_total_score([]) == 0

    def test_skips_non_finite(self) -> None:
        """NaN and infinities are not counted."""
        assert computed_total_score([10, float("nan"), float("inf"), 5.0]) == 15


class TestCampaignTotal:
    def test_override_wins(self) -> None:
        """A manual override replaces the computed sum."""
        assert campaign_total(42, [100, 200]) == 42

    def test_zero_override_still_wins(self) -> None:
        """An override of 0 is still an override."""
        assert campaign_total(0, [100, 200]) == 0

    def test_no_override(self) -> None:
        """Without an override the computed sum is used."""
        assert campaign_total(None, [100, None, 200]) == 300


class TestActivePlayers:
    def test_filters_blank_names(self) -> None:
        """Empty and whitespace-only names are dropped, the rest stripped."""
        assert active_players(["  Sam ", None, "", "   ", "Rosie"]) == ["Sam", "Rosie"]


def _deck(name: str, *heroes: tuple[str, str | None]) -> dict:
    return {"id": 1, "name": name, "heroes": [{"code": c, "name": n} for c, n in heroes]}


class TestFormatHeroesBlock:
    def test_names_and_bare_codes(self) -> None:
        """Unresolved heroes are listed by code alone."""
        heroes = [{"code": "01001", "name": "Aragorn"}, {"code": "99999", "name": None}]

        block = format_heroes_block("Gondor", heroes)

        assert block == "Deck: Gondor\n- 01001 — Aragorn\n- 99999"

    def test_no_heroes(self) -> None:
        assert format_heroes_block("Empty", []) == "Deck: Empty"


class TestHeroesAutofillPatch:
    def test_fills_empty_slots_only(self) -> None:
        """Slots with text are kept; blank or whitespace slots are filled."""
        state = {"heroes_p1": "Frodo's notes", "heroes_p2": "  ", "heroes_p3": None}
        decks = [_deck("A", ("01001", "Aragorn")), _deck("B", ("01005", "Gimli")), _deck("C")]

        patch = heroes_autofill_patch(state, decks)

        assert patch == {
            "heroes_p2": "Deck: B\n- 01005 — Gimli",
            "heroes_p3": "Deck: C",
        }

    def test_overwrite_replaces_filled_slots(self) -> None:
        """With overwrite every slot that has a deck is written."""
        state = {"heroes_p1": "old", "heroes_p2": "old"}

        patch = heroes_autofill_patch(state, [_deck("A", ("01001", "Aragorn"))], overwrite=True)

        assert patch == {"heroes_p1": "Deck: A\n- 01001 — Aragorn"}

    def test_extra_decks_join_last_slot(self) -> None:
        """Decks past the fourth are appended to heroes_p4 with blank lines between."""
        decks = [_deck(name) for name in ("A", "B", "C", "D", "E", "F")]

        patch = heroes_autofill_patch({}, decks)

        assert patch["heroes_p1"] == "Deck: A"
        assert patch["heroes_p4"] == "Deck: D\n\nDeck: E\n\nDeck: F"

    def test_extra_decks_append_to_kept_last_slot(self) -> None:
        """Without overwrite, extras are added after existing heroes_p4 text."""
        state = {"heroes_p4": " Samwise \n"}
        decks = [_deck(name) for name in ("A", "B", "C", "D", "E")]

        patch = heroes_autofill_patch(state, decks)

        assert patch["heroes_p4"] == "Samwise\n\nDeck: E"

    def test_extra_decks_with_overwrite(self) -> None:
        """With overwrite the fourth deck starts heroes_p4 again."""
        state = {"heroes_p4": "Samwise"}
        decks = [_deck(name) for name in ("A", "B", "C", "D", "E")]

        patch = heroes_autofill_patch(state, decks, overwrite=True)

        assert patch["heroes_p4"] == "Deck: D\n\nDeck: E"

    def test_no_decks(self) -> None:
        assert heroes_autofill_patch({"heroes_p1": ""}, []) == {}
