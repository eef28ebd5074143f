"""Tests for the RingsLedger API client."""

import httpx
import pytest
import respx
from httpx import AsyncClient

from ringsledger.client import LedgerClient, LedgerClientError, campaign_state_autosaver
from ringsledger.services.autosave import AutosaveStatus


@pytest.fixture
def ledger(anon_client: AsyncClient) -> LedgerClient:
    return LedgerClient("http://test", http_client=anon_client)


async def _create_campaign(http: AsyncClient) -> int:
    response = await http.post("/api/campaigns", json={"name": "Saga"})
    return response.json()["campaign"]["id"]


class TestSession:
    async def test_login_keeps_cookie(self, ledger: LedgerClient, family_passcode: str) -> None:
        """After login the client is authenticated."""
        assert await ledger.me() is False

        assert await ledger.login(family_passcode) is True

        assert await ledger.me() is True

    async def test_wrong_passcode_raises(self, ledger: LedgerClient) -> None:
        """Error responses become LedgerClientError with the server's detail."""
        with pytest.raises(LedgerClientError) as exc_info:
            await ledger.login("wrong")

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Wrong passcode"

    async def test_logout(self, ledger: LedgerClient, family_passcode: str) -> None:
        """Logging out ends the session."""
        await ledger.login(family_passcode)

        await ledger.logout()

        assert await ledger.me() is False

    async def test_health_check(self, ledger: LedgerClient) -> None:
        """The server reports healthy."""
        assert await ledger.health_check() is True

    async def test_does_not_close_borrowed_client(self, anon_client: AsyncClient) -> None:
        """A client passed in is left open."""
        async with LedgerClient("http://test", http_client=anon_client):
            pass

        assert anon_client.is_closed is False


class TestCampaignState:
    async def test_get_and_patch(
        self, ledger: LedgerClient, anon_client: AsyncClient, family_passcode: str
    ) -> None:
        """State is read and partially updated."""
        await ledger.login(family_passcode)
        campaign_id = await _create_campaign(anon_client)

        await ledger.patch_campaign_state(campaign_id, {"player1": "Sam"})
        state = await ledger.get_campaign_state(campaign_id)

        assert state["player1"] == "Sam"
        assert state["threat_penalty"] == 0

    async def test_autosaver_writes_latest_sheet(
        self, ledger: LedgerClient, anon_client: AsyncClient, family_passcode: str
    ) -> None:
        """Rapid edits are saved once, with the newest sheet."""
        await ledger.login(family_passcode)
        campaign_id = await _create_campaign(anon_client)
        saved: list[dict] = []
        saver = campaign_state_autosaver(
            ledger, campaign_id, on_saved=saved.append, debounce_seconds=0.01
        )

        saver.schedule({"notes": "first"})
        saver.schedule({"notes": "first draft", "threat_penalty": 2})
        await saver.flush()

        assert saver.status == AutosaveStatus.SAVED
        assert len(saved) == 1
        assert saved[0]["notes"] == "first draft"
        assert (await ledger.get_campaign_state(campaign_id))["threat_penalty"] == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_autofill_heroes_from_latest_run(
        self, ledger: LedgerClient, anon_client: AsyncClient, family_passcode: str, make_card_record
    ) -> None:
        """Hero slots are filled from the latest run, keeping slots already written."""
        respx.get("https://ringsdb.com/api/public/card/01001").mock(
            return_value=httpx.Response(200, json=make_card_record("01001", "Aragorn", "hero"))
        )
        respx.get("https://ringsdb.com/api/public/card/01005").mock(
            return_value=httpx.Response(200, json=make_card_record("01005", "Gimli", "hero"))
        )
        await ledger.login(family_passcode)
        campaign_id = await _create_campaign(anon_client)
        deck_ids = []
        for name, hero in (("Gondor", "01001"), ("Erebor", "01005")):
            deck_id = (await anon_client.post("/api/decks", json={"name": name})).json()["id"]
            await anon_client.post(f"/api/decks/{deck_id}/heroes", json={"heroes": [hero]})
            deck_ids.append(deck_id)
        await anon_client.post(
            f"/api/campaigns/{campaign_id}/runs",
            json={"result": "win", "deck_links": [{"deck_id": d} for d in deck_ids]},
        )
        await ledger.patch_campaign_state(campaign_id, {"heroes_p1": "Frodo"})

        patch = await ledger.autofill_heroes_from_latest_run(campaign_id)
        state = await ledger.get_campaign_state(campaign_id)

        assert set(patch) == {"heroes_p2"}
        assert state["heroes_p1"] == "Frodo"
        assert state["heroes_p2"] == "Deck: Erebor\n- 01005 — Gimli"

        overwritten = await ledger.autofill_heroes_from_latest_run(campaign_id, overwrite=True)

        assert overwritten == {
            "heroes_p1": "Deck: Gondor\n- 01001 — Aragorn",
            "heroes_p2": "Deck: Erebor\n- 01005 — Gimli",
        }

    async def test_autofill_without_runs(
        self, ledger: LedgerClient, anon_client: AsyncClient, family_passcode: str
    ) -> None:
        """No runs means nothing is written."""
        await ledger.login(family_passcode)
        campaign_id = await _create_campaign(anon_client)

        assert await ledger.autofill_heroes_from_latest_run(campaign_id) == {}
        assert (await ledger.get_campaign_state(campaign_id))["heroes_p1"] is None


class TestDeckText:
    async def test_import_and_empty_import(
        self, ledger: LedgerClient, anon_client: AsyncClient, family_passcode: str
    ) -> None:
        """Import replaces the deck; an empty paste raises the server's message."""
        await ledger.login(family_passcode)
        deck_id = (await anon_client.post("/api/decks", json={"name": "Gondor"})).json()["id"]

        deck = await ledger.import_deck_text(deck_id, "Heroes:\n1x 01001\nALLY (1):\n1x 01016")

        assert deck["heroes"] == ["01001"]
        with pytest.raises(LedgerClientError) as exc_info:
            await ledger.import_deck_text(deck_id, "nothing here")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "No card lines found"
