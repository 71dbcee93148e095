"""Filter state holder for the warehouse search bar."""

from __future__ import annotations

import logging
from typing import Callable, Mapping

from logici_client.domain.contracts import Filter
from logici_client.services.range_selector import RangeSelector

logger = logging.getLogger(__name__)

SIZE_BOUNDS = (500, 20000)
SIZE_STEP = 100
BUDGET_BOUNDS = (10, 100)
BUDGET_STEP = 1


class FilterState:
    """Owns the uncommitted filter selection and its two range selectors.

    Nothing reaches the result fetcher until ``apply()`` or ``reset()`` is
    called; both hand the committed ``Filter`` to ``on_apply``.
    """

    def __init__(
        self,
        on_apply: Callable[[Filter], None] | None = None,
        search_query: str | None = None,
    ):
        self.on_apply = on_apply
        self.size = RangeSelector(*SIZE_BOUNDS, step=SIZE_STEP)
        self.budget = RangeSelector(*BUDGET_BOUNDS, step=BUDGET_STEP)
        self.storage_type: str = ""
        self.location: str = search_query or ""

    @classmethod
    def from_query_params(
        cls,
        params: Mapping[str, str],
        on_apply: Callable[[Filter], None] | None = None,
    ) -> FilterState:
        """Seed the holder from URL query parameters."""
        seeded = Filter.from_query_params(params)
        state = cls(on_apply=on_apply, search_query=seeded.location)
        if seeded.size_range is not None:
            state.size.set_value(_clamped(seeded.size_range, SIZE_BOUNDS))
        if seeded.budget_range is not None:
            state.budget.set_value(_clamped(seeded.budget_range, BUDGET_BOUNDS))
        state.storage_type = seeded.storage_type or ""
        return state

    def sync_search_query(self, query: str | None) -> None:
        """Follow an externally supplied search query (e.g. the hero search bar)."""
        if query is not None:
            self.location = query

    def current(self) -> Filter:
        """The filter that ``apply()`` would commit right now."""
        return Filter(
            location=self.location.strip() or None,
            size_range=self.size.values,
            budget_range=self.budget.values,
            storage_type=self.storage_type or None,
        )

    def apply(self) -> Filter:
        committed = self.current()
        logger.debug("Applying filters: %s", committed)
        if self.on_apply is not None:
            self.on_apply(committed)
        return committed

    def reset(self) -> Filter:
        self.size.set_value(SIZE_BOUNDS)
        self.budget.set_value(BUDGET_BOUNDS)
        self.storage_type = ""
        self.location = ""
        committed = Filter()
        if self.on_apply is not None:
            self.on_apply(committed)
        return committed


def _clamped(value: tuple[float, float], bounds: tuple[float, float]) -> tuple[float, float]:
    low = max(bounds[0], min(bounds[1], value[0]))
    high = max(bounds[0], min(bounds[1], value[1]))
    return (min(low, high), max(low, high))
