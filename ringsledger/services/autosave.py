"""
Debounced autosave with newest-request-wins semantics.

Each edit schedules a save of the full local snapshot after a quiet
period. A newer edit restarts the timer and cancels any save still in
flight. Every scheduled save carries a generation number, and a result
that arrives under an older generation is discarded so it can never
overwrite newer local state.

Failures and timeouts are reported through `status`/`error` and are not
retried; the next edit schedules a fresh save.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from ringsledger.config import AUTOSAVE_DEBOUNCE_SECONDS, AUTOSAVE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

SaveFn = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class AutosaveStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class DebouncedAutosaver:
    """
    Debounces snapshot saves and discards superseded results.

    Usage:
        saver = DebouncedAutosaver(save_fn, on_saved=apply_server_state)
        saver.schedule(local_state)   # on every edit
        ...
        await saver.flush()           # before leaving the page
    """

    def __init__(
        self,
        save: SaveFn,
        *,
        on_saved: Callable[[dict[str, Any]], None] | None = None,
        debounce_seconds: float = AUTOSAVE_DEBOUNCE_SECONDS,
        timeout_seconds: float = AUTOSAVE_TIMEOUT_SECONDS,
    ) -> None:
        self._save = save
        self._on_saved = on_saved
        self.debounce_seconds = debounce_seconds
        self.timeout_seconds = timeout_seconds

        self._generation = 0
        self._task: asyncio.Task[None] | None = None

        self.status = AutosaveStatus.IDLE
        self.error: str | None = None
        self.last_saved: dict[str, Any] | None = None

    @property
    def generation(self) -> int:
        """Token of the most recently scheduled save."""
        return self._generation

    def schedule(self, snapshot: dict[str, Any]) -> None:
        """
        Schedule a save of `snapshot`, superseding anything pending or in flight.

        Must be called from a running event loop.
        """
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()

        self.status = AutosaveStatus.PENDING
        self.error = None
        self._task = asyncio.create_task(self._run(self._generation, dict(snapshot)))

    async def _run(self, generation: int, snapshot: dict[str, Any]) -> None:
        await asyncio.sleep(self.debounce_seconds)

        self.status = AutosaveStatus.SAVING
        try:
            result = await asyncio.wait_for(self._save(snapshot), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            if generation == self._generation:
                self.status = AutosaveStatus.ERROR
                self.error = f"Save timed out after {self.timeout_seconds:g}s"
                logger.warning("Autosave timed out (generation %d)", generation)
            return
        except Exception as e:
            if generation == self._generation:
                self.status = AutosaveStatus.ERROR
                self.error = str(e) or type(e).__name__
                logger.warning("Autosave failed (generation %d): %s", generation, e)
            return

        if generation != self._generation:
            logger.debug("Discarding stale autosave result (generation %d)", generation)
            return

        self.status = AutosaveStatus.SAVED
        self.last_saved = result
        if self._on_saved is not None:
            self._on_saved(result)

    async def flush(self) -> None:
        """Wait until the newest scheduled save has finished."""
        while self._task is not None:
            task = self._task
            await asyncio.wait({task})
            if task is self._task:
                return

    async def aclose(self) -> None:
        """Cancel any pending or in-flight save."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
