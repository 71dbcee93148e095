"""Warehouse search results: paginated fetch and view-tracked navigation.

Read failures never escape this module. Any transport, HTTP or
``success: false`` failure degrades to an empty result set.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from logici_client.app.config import get_settings
from logici_client.domain.contracts import Filter, PaginationState
from logici_client.domain.schemas import ListingPage, Warehouse
from logici_client.infra.http import ApiClient, ApiError

logger = logging.getLogger(__name__)

PUBLIC_LISTING_PATH = "/api/public/warehouses"
PRIVATE_LISTING_PATH = "/api/warehouses"

NO_RESULTS_TEXT = "No warehouses found matching your criteria. Please try different filters."


@dataclass(frozen=True)
class _FetchTag:
    """Identity of one fetch; responses whose tag is stale are dropped."""
    generation: int
    filter: Filter
    page: int
    is_public: bool


class WarehouseResults:
    """Owns the result list and pagination for one committed filter.

    ``set_filter`` resets to page 1 and fetches once; ``set_page`` and
    ``set_public`` fetch without touching the page. When requests overlap,
    only the most recently requested one may commit.
    """

    def __init__(
        self,
        client: ApiClient,
        filter: Filter | None = None,
        is_public: bool = True,
        limit: int | None = None,
    ):
        self.client = client
        self.filter = filter if filter is not None else Filter(fetch_all=True)
        self.is_public = is_public
        self.pagination = PaginationState(limit=limit or get_settings().search_page_size)
        self.warehouses: list[Warehouse] = []
        self.loading = False
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def set_filter(self, filter: Filter) -> None:
        self.filter = filter
        self.pagination.page = 1
        await self.refresh()

    async def set_page(self, page: int) -> None:
        self.pagination.go_to(page)
        await self.refresh()

    async def next_page(self) -> None:
        if self.pagination.has_next:
            await self.set_page(self.pagination.page + 1)

    async def previous_page(self) -> None:
        if self.pagination.has_previous:
            await self.set_page(self.pagination.page - 1)

    async def set_public(self, is_public: bool) -> None:
        self.is_public = is_public
        await self.refresh()

    async def refresh(self) -> None:
        """Fetch the current filter+page and wait for it to settle."""
        task = self._schedule()
        try:
            await task
        except asyncio.CancelledError:
            if not self._closed:
                raise

    async def close(self) -> None:
        """Cancel in-flight fetches; later responses are ignored."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Derived view state
    # ------------------------------------------------------------------

    @property
    def total(self) -> int:
        return self.pagination.total

    @property
    def pages(self) -> int:
        return self.pagination.pages

    @property
    def has_previous(self) -> bool:
        return self.pagination.has_previous

    @property
    def has_next(self) -> bool:
        return self.pagination.has_next

    @property
    def page_numbers(self) -> list[int]:
        return self.pagination.page_numbers()

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.warehouses

    @property
    def summary_text(self) -> str:
        if self.total > 0:
            suffix = f" in {self.filter.location}" if self.filter.location else ""
            return f"{self.total} warehouses found{suffix}"
        return NO_RESULTS_TEXT

    def card_title(self, warehouse: Warehouse) -> str:
        return f"{warehouse.build_up_area:,.0f} Sq. Ft. warehouse available in {warehouse.city}"

    def card_image_url(self, warehouse: Warehouse) -> str:
        return self.client.image_url(warehouse.first_image)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _schedule(self) -> asyncio.Task:
        self._generation += 1
        tag = _FetchTag(
            generation=self._generation,
            filter=self.filter,
            page=self.pagination.page,
            is_public=self.is_public,
        )
        task = asyncio.create_task(self._fetch(tag))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _is_current(self, tag: _FetchTag) -> bool:
        return not self._closed and tag.generation == self._generation

    async def _fetch(self, tag: _FetchTag) -> None:
        self.loading = True
        params = {"page": tag.page, "limit": self.pagination.limit, **tag.filter.to_query_params()}
        path = PUBLIC_LISTING_PATH if tag.is_public else PRIVATE_LISTING_PATH

        warehouses: list[Warehouse] = []
        total = 0
        try:
            body = await self.client.get(path, params=params, auth=not tag.is_public)
            listing = ListingPage.model_validate(body)
            if listing.success:
                warehouses, total = listing.data, listing.total
            else:
                logger.warning("Warehouse listing reported failure for %s", params)
        except ApiError as exc:
            logger.warning("Warehouse listing failed (%s): %s", path, exc.message)
        except ValidationError as exc:
            logger.warning("Warehouse listing returned an unexpected payload: %s", exc)
        finally:
            if self._is_current(tag):
                self.loading = False

        if not self._is_current(tag):
            logger.debug("Discarding stale warehouse listing for generation %d", tag.generation)
            return

        self.warehouses = warehouses
        self.pagination.update_total(total)
        if self.pagination.page != tag.page:
            # Result set shrank below the requested page; follow the clamp.
            self._schedule()


class ViewTracker:
    """Records a best-effort view before navigating to a listing's details."""

    def __init__(self, client: ApiClient, is_public: bool = True):
        self.client = client
        self.is_public = is_public
        self.is_tracking = False

    def details_route(self, warehouse_id: int | str) -> str:
        if self.is_public:
            return f"/warehouse-details/{warehouse_id}"
        return f"/user-panel/warehouse-details/{warehouse_id}"

    async def view_details(self, warehouse_id: int | str) -> str | None:
        """Track the view, then return the details route.

        Returns None without tracking while an earlier call is in flight.
        """
        if self.is_tracking:
            return None

        self.is_tracking = True
        path = (
            f"{PUBLIC_LISTING_PATH}/{warehouse_id}/view"
            if self.is_public
            else f"{PRIVATE_LISTING_PATH}/{warehouse_id}/view"
        )
        try:
            await self.client.post(path, json={}, auth=not self.is_public)
        except ApiError as exc:
            logger.warning("View tracking failed for warehouse %s: %s", warehouse_id, exc.message)
        finally:
            self.is_tracking = False
        return self.details_route(warehouse_id)
