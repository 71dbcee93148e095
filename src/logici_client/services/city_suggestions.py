"""Debounced city autocomplete for the search bar."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote

from logici_client.app.config import get_settings
from logici_client.infra.http import ApiClient, ApiError

logger = logging.getLogger(__name__)

SEARCH_ROUTE = "/WarehouseSolution"


class CitySuggestionClient:
    """Queries ``/api/cities`` once typing pauses for the debounce window.

    Each keystroke cancels the pending lookup, so only the latest text is
    ever sent.
    """

    def __init__(self, client: ApiClient, debounce_ms: int | None = None):
        self.client = client
        self.debounce = (debounce_ms if debounce_ms is not None else get_settings().suggestion_debounce_ms) / 1000
        self.text = ""
        self.suggestions: list[str] = []
        self.visible = False
        self._pending: asyncio.Task | None = None

    def set_text(self, text: str) -> asyncio.Task | None:
        """Record a keystroke and (re)schedule the lookup."""
        self.text = text
        self._cancel_pending()
        if not text.strip():
            self.suggestions = []
            self.visible = False
            return None
        self._pending = asyncio.create_task(self._debounced_fetch(text))
        return self._pending

    async def _debounced_fetch(self, text: str) -> None:
        await asyncio.sleep(self.debounce)
        suggestions = await self.fetch(text)
        if text != self.text:
            return
        self.suggestions = suggestions
        self.visible = bool(suggestions)

    async def fetch(self, query: str) -> list[str]:
        """Fetch suggestions immediately; failures yield an empty list."""
        try:
            body = await self.client.get("/api/cities", params={"query": query})
        except ApiError as exc:
            logger.warning("City suggestions failed for %r: %s", query, exc.message)
            return []
        if isinstance(body, dict):
            body = body.get("data", [])
        if not isinstance(body, list):
            return []
        return [str(city) for city in body if city]

    def dismiss(self) -> None:
        self.visible = False

    def select(self, city: str) -> str:
        """Pick a suggestion; returns the search route to navigate to."""
        self._cancel_pending()
        self.text = city
        self.dismiss()
        return search_route(city)

    async def aclose(self) -> None:
        task = self._pending
        self._cancel_pending()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None


def search_route(query: str) -> str:
    return f"{SEARCH_ROUTE}?query={quote(query.strip(), safe='')}"
