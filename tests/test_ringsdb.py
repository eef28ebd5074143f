"""Tests for the RingsDB card database client."""

from typing import Any

import httpx
import pytest
import respx

from ringsledger.models.card import RingsCard, RingsPack
from ringsledger.models.failure import FailureKind, UpstreamError
from ringsledger.services.ringsdb import (
    RingsDBClient,
    build_card_index,
    card_stats_line,
    is_player_card,
    resolve_cards,
)

BASE = "https://ringsdb.com"


@pytest.fixture
def pack_cards(make_card_record) -> list[dict[str, Any]]:
    return [
        make_card_record("01001", "Aragorn", "hero", threat=12),
        make_card_record("01016", "Snowbourn Scout", "ally", cost=2),
        make_card_record("01074", "Orc Raiders", "enemy", None),
    ]


class TestFetchPacks:
    @pytest.mark.asyncio
    @respx.mock
    async def test_accepts_list(self) -> None:
        """A list of pack records is parsed in order."""
        respx.get(f"{BASE}/api/public/packs/").mock(
            return_value=httpx.Response(
                200, json=[{"code": "Core", "name": "Core Set"}, {"code": "HfG", "name": "The Hunt for Gollum"}]
            )
        )

        async with RingsDBClient() as client:
            packs = await client.fetch_all_packs()

        assert packs == [RingsPack("Core", "Core Set"), RingsPack("HfG", "The Hunt for Gollum")]

    @pytest.mark.asyncio
    @respx.mock
    async def test_accepts_keyed_object(self) -> None:
        """An object keyed by pack code is also accepted."""
        respx.get(f"{BASE}/api/public/packs/").mock(
            return_value=httpx.Response(200, json={"Core": {"code": "Core", "name": "Core Set"}})
        )

        async with RingsDBClient() as client:
            packs = await client.fetch_all_packs()

        assert packs == [RingsPack("Core", "Core Set")]

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_is_upstream_error(self) -> None:
        """HTTP failures surface as UpstreamError."""
        respx.get(f"{BASE}/api/public/packs/").mock(return_value=httpx.Response(503))

        async with RingsDBClient() as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.fetch_all_packs()

        assert exc_info.value.kind == FailureKind.EXTERNAL_API_ERROR
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_is_upstream_error(self) -> None:
        """Connection failures surface as UpstreamError."""
        respx.get(f"{BASE}/api/public/packs/").mock(side_effect=httpx.ConnectError("boom"))

        async with RingsDBClient() as client:
            with pytest.raises(UpstreamError):
                await client.fetch_all_packs()


class TestFetchCards:
    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_cards_by_pack(self, pack_cards: list[dict[str, Any]]) -> None:
        """Every card in the pack is returned, encounter cards included."""
        respx.get(f"{BASE}/api/public/cards/Core.json").mock(
            return_value=httpx.Response(200, json=pack_cards)
        )

        async with RingsDBClient() as client:
            cards = await client.fetch_cards_by_pack("Core")

        assert [c.code for c in cards] == ["01001", "01016", "01074"]
        assert cards[0].threat == 12

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_card_missing_returns_none(self) -> None:
        """A failed single-card lookup returns None."""
        respx.get(f"{BASE}/api/public/card/99999").mock(return_value=httpx.Response(404))

        async with RingsDBClient() as client:
            assert await client.fetch_card("99999") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_build_card_index_keeps_player_cards(
        self, pack_cards: list[dict[str, Any]]
    ) -> None:
        """The index holds player cards only."""
        respx.get(f"{BASE}/api/public/cards/Core.json").mock(
            return_value=httpx.Response(200, json=pack_cards)
        )

        async with RingsDBClient() as client:
            index = await build_card_index(client, ["Core"])

        assert set(index) == {"01001", "01016"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_resolve_cards_uses_index_then_lookups(self, make_card_record) -> None:
        """Indexed codes skip the network; the rest are fetched; failures are absent."""
        respx.get(f"{BASE}/api/public/card/01073").mock(
            return_value=httpx.Response(200, json=make_card_record("01073", "Gandalf", "ally", "neutral"))
        )
        respx.get(f"{BASE}/api/public/card/99999").mock(return_value=httpx.Response(404))
        index = {"01001": RingsCard(code="01001", name="Aragorn", type_code="hero")}

        async with RingsDBClient() as client:
            resolved = await resolve_cards(client, ["01001", "01073", "99999", "01073"], index)

        assert set(resolved) == {"01001", "01073"}
        assert resolved["01073"].name == "Gandalf"


class TestCardHelpers:
    def test_is_player_card(self) -> None:
        """Encounter and untyped cards are not player cards."""
        assert is_player_card(RingsCard(code="1", name="A", type_code="hero")) is True
        assert is_player_card(RingsCard(code="2", name="B", type_code="enemy")) is False
        assert is_player_card(RingsCard(code="3", name="C")) is False

    def test_stats_line_hero(self, core_cards: dict[str, RingsCard]) -> None:
        """Heroes show threat and their four stats."""
        assert card_stats_line(core_cards["01001"]) == "Threat 12 • 2/3/2/5"

    def test_stats_line_ally(self, core_cards: dict[str, RingsCard]) -> None:
        """Allies show cost and stats."""
        assert card_stats_line(core_cards["01016"]) == "Cost 2 • 0/0/1/1"

    def test_stats_line_without_body(self, core_cards: dict[str, RingsCard]) -> None:
        """Events and attachments show only cost."""
        assert card_stats_line(core_cards["01020"]) == "Cost 1"

    def test_stats_line_missing_values(self) -> None:
        """Missing values are shown as a dash."""
        card = RingsCard(code="1", name="X", type_code="hero")

        assert card_stats_line(card) == "Threat – • –/–/–/–"
