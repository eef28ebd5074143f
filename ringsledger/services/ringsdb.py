"""
RingsDB card database client.

Card data is never stored locally; packs and cards are read live from
the public RingsDB API. Catalog calls raise UpstreamError on failure.
Single-card lookups are best-effort and return None instead.

API: https://ringsdb.com/api/doc
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Iterable, Mapping
from typing import Any
from urllib.parse import quote

import httpx

from ringsledger.config import settings
from ringsledger.models.card import RingsCard, RingsPack
from ringsledger.models.failure import UpstreamError

logger = logging.getLogger(__name__)

USER_AGENT = "RingsLedger/1.0"

PLAYER_TYPE_CODES = frozenset(
    {
        "hero",
        "ally",
        "attachment",
        "event",
        "player-side-quest",
        "contract",
        "treasure",
    }
)

_MISSING_STAT = "–"


class RingsDBClient:
    """
    Async client for the RingsDB public API.

    Usage:
        async with RingsDBClient() as client:
            packs = await client.fetch_all_packs()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url or settings.ringsdb_base_url,
            timeout=timeout or settings.ringsdb_timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    async def __aenter__(self) -> "RingsDBClient":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, what: str) -> Any:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("RingsDB %s failed: HTTP %d", what, e.response.status_code)
            raise UpstreamError(f"RingsDB {what} failed: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.warning("RingsDB %s failed: %s", what, e)
            raise UpstreamError(f"RingsDB {what} failed", detail=str(e)) from e
        except ValueError as e:
            raise UpstreamError(f"RingsDB {what} returned invalid JSON") from e

    async def fetch_all_packs(self) -> list[RingsPack]:
        """
        Fetch the pack catalog.

        RingsDB returns either a list of packs or an object keyed by
        pack code; both are accepted.

        Raises:
            UpstreamError: If the request fails
        """
        data = await self._get_json("/api/public/packs/", "packs")
        records = data if isinstance(data, list) else list(data.values())
        return [RingsPack.from_api(record) for record in records]

    async def fetch_cards_by_pack(self, pack_code: str) -> list[RingsCard]:
        """
        Fetch every card in a pack, including encounter cards.

        Raises:
            UpstreamError: If the request fails
        """
        data = await self._get_json(
            f"/api/public/cards/{quote(pack_code, safe='')}.json", f"cards ({pack_code})"
        )
        return [RingsCard.from_api(record) for record in data]

    async def fetch_card(self, code: str) -> RingsCard | None:
        """Fetch one card by code. Returns None if it cannot be fetched."""
        try:
            response = await self._client.get(f"/api/public/card/{quote(code, safe='')}")
            if response.status_code != 200:
                return None
            return RingsCard.from_api(response.json())
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.debug("RingsDB card lookup for %s failed: %s", code, e)
            return None


async def get_ringsdb_client() -> AsyncGenerator[RingsDBClient, None]:
    """FastAPI dependency that provides a RingsDB client for one request."""
    async with RingsDBClient() as client:
        yield client


def is_player_card(card: RingsCard) -> bool:
    """True for cards a player can put in a deck (heroes included)."""
    return card.type_code is not None and card.type_code in PLAYER_TYPE_CODES


def _stat(value: object) -> str:
    return _MISSING_STAT if value is None else str(value)


def card_stats_line(card: RingsCard) -> str:
    """
    Short stat summary for card lists.

    Heroes: "Threat 12 • 2/2/2/5"
    Others: "Cost 3" plus "wp/atk/def/hp" when the card has any of them
    """
    if card.type_code == "hero":
        stats = "/".join(_stat(v) for v in (card.willpower, card.attack, card.defense, card.health))
        return f"Threat {_stat(card.threat)} • {stats}"

    parts = [f"Cost {_stat(card.cost)}"]
    body = (card.willpower, card.attack, card.defense, card.health)
    if any(v is not None for v in body):
        parts.append("/".join(_stat(v) for v in body))
    return " • ".join(parts)


async def build_card_index(client: RingsDBClient, pack_codes: Iterable[str]) -> dict[str, RingsCard]:
    """
    Build a code -> card index of player cards from the given packs.

    Raises:
        UpstreamError: If any pack cannot be fetched
    """
    index: dict[str, RingsCard] = {}
    for pack_code in pack_codes:
        for card in await client.fetch_cards_by_pack(pack_code):
            if is_player_card(card):
                index[card.code] = card
    return index


async def resolve_cards(
    client: RingsDBClient,
    codes: Iterable[str],
    index: Mapping[str, RingsCard] | None = None,
) -> dict[str, RingsCard]:
    """
    Resolve card codes to card metadata.

    Codes found in `index` are used as-is; the rest are looked up one by
    one. Codes that still cannot be resolved are absent from the result.
    """
    index = index or {}
    resolved: dict[str, RingsCard] = {}
    missing: list[str] = []

    for code in dict.fromkeys(codes):
        card = index.get(code)
        if card is not None:
            resolved[code] = card
        else:
            missing.append(code)

    if missing:
        lookups = await asyncio.gather(*(client.fetch_card(code) for code in missing))
        for code, card in zip(missing, lookups, strict=True):
            if card is not None:
                resolved[code] = card

    return resolved
