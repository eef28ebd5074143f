"""
RingsLedger API client.

A small async client for scripts and front ends that talk to a running
RingsLedger server. It keeps the family session cookie between calls.
"""

from collections.abc import Callable
from typing import Any

import httpx

from ringsledger.services.autosave import DebouncedAutosaver
from ringsledger.services.campaign_stats import heroes_autofill_patch


class LedgerClientError(Exception):
    """The server answered with an error status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class LedgerClient:
    """
    Client for the RingsLedger HTTP API.

    Usage:
        async with LedgerClient("http://localhost:8000") as client:
            await client.login("secret")
            state = await client.get_campaign_state(1)
    """

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Server root, e.g. "http://localhost:8000"
            http_client: Preconfigured client (tests pass one bound to the app)
            timeout: Request timeout in seconds
        """
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "LedgerClient":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, path, **kwargs)
        if response.is_success:
            return response.json()

        try:
            message = str(response.json().get("detail", response.text))
        except ValueError:
            message = response.text
        raise LedgerClientError(response.status_code, message)

    async def login(self, passcode: str) -> bool:
        """
        Log in with the family passcode. The session cookie is kept.

        Raises:
            LedgerClientError: 401 on a wrong passcode
        """
        data = await self._request("POST", "/api/login", json={"passcode": passcode})
        return bool(data.get("ok"))

    async def logout(self) -> None:
        await self._request("POST", "/api/logout")

    async def me(self) -> bool:
        """Whether the current session cookie is valid."""
        data = await self._request("GET", "/api/me")
        return bool(data.get("ok"))

    async def get_campaign_state(self, campaign_id: int) -> dict[str, Any]:
        data = await self._request("GET", f"/api/campaigns/{campaign_id}/state")
        return dict(data["state"])

    async def patch_campaign_state(self, campaign_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """Send a partial state update and return the stored state."""
        data = await self._request("PATCH", f"/api/campaigns/{campaign_id}/state", json=changes)
        return dict(data["state"])

    async def get_latest_run(self, campaign_id: int) -> dict[str, Any]:
        """The most recent run of a campaign with its decks and hero names."""
        return dict(await self._request("GET", f"/api/campaigns/{campaign_id}/runs/latest"))

    async def autofill_heroes_from_latest_run(
        self, campaign_id: int, overwrite: bool = False
    ) -> dict[str, str]:
        """
        Fill the campaign sheet's hero slots from the latest run's decks.

        Only empty slots are written unless `overwrite` is set.

        Returns:
            The slots that were written; empty if the latest run has no
            linked decks (or there are no runs) or every slot was kept
        """
        latest = await self.get_latest_run(campaign_id)
        decks = latest.get("decks") or []
        if not decks:
            return {}

        state = await self.get_campaign_state(campaign_id)
        patch = heroes_autofill_patch(state, decks, overwrite=overwrite)
        if patch:
            await self.patch_campaign_state(campaign_id, patch)
        return patch

    async def import_deck_text(self, deck_id: int, text: str) -> dict[str, Any]:
        """
        Replace a deck's contents from deck list text.

        Raises:
            LedgerClientError: 400 "No card lines found" if nothing was recognized
        """
        return dict(await self._request("POST", f"/api/decks/{deck_id}/import", json={"text": text}))

    async def export_deck_text(self, deck_id: int) -> str:
        data = await self._request("GET", f"/api/decks/{deck_id}/export")
        return str(data["text"])

    async def health_check(self) -> bool:
        """
        Check if the server is up.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = await self._client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False


def campaign_state_autosaver(
    client: LedgerClient,
    campaign_id: int,
    on_saved: Callable[[dict[str, Any]], None] | None = None,
    **kwargs: Any,
) -> DebouncedAutosaver:
    """
    Autosaver that writes the campaign sheet through `client`.

    Every schedule() sends the whole local sheet once edits pause.
    Extra keyword arguments go to DebouncedAutosaver.
    """

    async def save(snapshot: dict[str, Any]) -> dict[str, Any]:
        return await client.patch_campaign_state(campaign_id, snapshot)

    return DebouncedAutosaver(save, on_saved=on_saved, **kwargs)
