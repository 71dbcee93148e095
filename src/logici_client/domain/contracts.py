"""Typed dataclasses for client-side state passed between services."""

import math
from dataclasses import dataclass
from typing import Mapping

Range = tuple[float, float]


@dataclass(frozen=True)
class Filter:
    """Committed warehouse search filter.

    Built on every Apply/Reset and never persisted. ``None`` means the
    criterion is not applied.
    """
    location: str | None = None
    size_range: Range | None = None
    budget_range: Range | None = None
    storage_type: str | None = None
    fetch_all: bool = False

    def to_query_params(self) -> dict[str, str | float]:
        """Map the filter to the listing endpoint's query parameters."""
        params: dict[str, str | float] = {}
        if self.location:
            params["location"] = self.location
        if self.size_range is not None:
            params["min_size"] = _plain_number(self.size_range[0])
            params["max_size"] = _plain_number(self.size_range[1])
        if self.budget_range is not None:
            params["min_rent"] = _plain_number(self.budget_range[0])
            params["max_rent"] = _plain_number(self.budget_range[1])
        if self.storage_type:
            params["warehouse_type"] = self.storage_type
        return params

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "Filter":
        """Re-derive a filter from URL query parameters on initial load.

        Accepts both the search-bar ``query`` key and the listing API keys.
        Malformed or half-specified ranges are ignored.
        """
        location = (params.get("location") or params.get("query") or "").strip() or None
        return cls(
            location=location,
            size_range=_range_from(params, "min_size", "max_size"),
            budget_range=_range_from(params, "min_rent", "max_rent"),
            storage_type=(params.get("warehouse_type") or "").strip() or None,
            fetch_all=str(params.get("fetch_all", "")).lower() in ("1", "true", "yes"),
        )


def _plain_number(value: float) -> float | int:
    return int(value) if float(value).is_integer() else value


def _range_from(params: Mapping[str, str], low_key: str, high_key: str) -> Range | None:
    try:
        low = float(params[low_key])
        high = float(params[high_key])
    except (KeyError, TypeError, ValueError):
        return None
    if low > high:
        return None
    return (low, high)


@dataclass
class PaginationState:
    """Page cursor over a server-side total.

    ``page`` always stays within ``[1, max(1, pages)]``.
    """
    page: int = 1
    limit: int = 10
    total: int = 0

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    def clamp(self, page: int) -> int:
        return max(1, min(page, max(1, self.pages)))

    def go_to(self, page: int) -> int:
        self.page = self.clamp(page)
        return self.page

    def update_total(self, total: int) -> None:
        """Record a new server total, keeping ``page`` in bounds."""
        self.total = max(0, total)
        self.page = self.clamp(self.page)

    def page_numbers(self) -> list[int]:
        return list(range(1, self.pages + 1))
