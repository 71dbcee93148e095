"""Booking and inquiry management for owners and admins.

Records come in two kinds, inquiries and confirmed (paid) bookings, with
disjoint status vocabularies. Every mutation carries the record's own
``type`` back to the backend.

Status changes are applied optimistically. When the backend rejects one,
the record is rolled back and flagged ``sync_failed`` until ``retry``
succeeds.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Union

from pydantic import ValidationError

from logici_client.app.config import get_settings
from logici_client.domain.contracts import PaginationState
from logici_client.domain.enums import (
    STATUS_VOCABULARY,
    BannerKind,
    BookingKind,
    BookingTypeFilter,
)
from logici_client.domain.schemas import (
    BookingStats,
    BookingSummary,
    ConfirmedBooking,
    InquiryBooking,
    parse_booking,
)
from logici_client.infra.http import ApiClient, ApiError, AuthenticationRequired
from logici_client.services.formatting import format_inr, status_label
from logici_client.services.message_normalizer import normalize_message

logger = logging.getLogger(__name__)

Booking = Union[InquiryBooking, ConfirmedBooking]


# ---------------------------------------------------------------------------
# Banner
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Notice:
    message: str
    kind: BannerKind
    expires_at: float


class Banner:
    """Single dismissible message that expires after a fixed duration."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._notice: Notice | None = None

    def show(self, message: str, kind: BannerKind, seconds: float) -> None:
        self._notice = Notice(message, kind, self._clock() + seconds)

    def success(self, message: str, seconds: float | None = None) -> None:
        self.show(message, BannerKind.SUCCESS, seconds or get_settings().success_banner_seconds)

    def error(self, message: str, seconds: float | None = None) -> None:
        self.show(message, BannerKind.ERROR, seconds or get_settings().error_banner_seconds)

    def current(self) -> Notice | None:
        notice = self._notice
        if notice is not None and self._clock() >= notice.expires_at:
            self._notice = None
            return None
        return notice

    def dismiss(self) -> None:
        self._notice = None


# ---------------------------------------------------------------------------
# Status vocabulary
# ---------------------------------------------------------------------------


def status_options(kind: BookingKind | str) -> list[tuple[str, str]]:
    """(value, label) pairs valid for records of *kind*."""
    vocabulary = STATUS_VOCABULARY[BookingKind(kind)]
    return [(member.value, status_label(member)) for member in vocabulary]


def coerce_status(kind: BookingKind | str, status: str):
    """Validate *status* against the vocabulary of *kind*.

    Raises ValueError when the status belongs to another kind.
    """
    vocabulary = STATUS_VOCABULARY[BookingKind(kind)]
    try:
        return vocabulary(status)
    except ValueError:
        allowed = ", ".join(member.value for member in vocabulary)
        raise ValueError(f"Status {status!r} is not valid for {kind} records (expected one of: {allowed})") from None


_KINDS_BY_TYPE_FILTER: dict[BookingTypeFilter, tuple[BookingKind, ...]] = {
    BookingTypeFilter.ALL: (BookingKind.INQUIRY, BookingKind.CONFIRMED),
    BookingTypeFilter.INQUIRIES: (BookingKind.INQUIRY,),
    BookingTypeFilter.CONFIRMED: (BookingKind.CONFIRMED,),
}


@dataclass
class PendingChange:
    """A status change the backend has not acknowledged."""
    status: str
    extra: dict[str, Any] = field(default_factory=dict)
    error: str = ""


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------


class _BookingBoardBase(ABC):
    """Shared listing, filtering and status-update behaviour."""

    list_path: ClassVar[str]
    filter_names: ClassVar[tuple[str, ...]]
    success_seconds_setting: ClassVar[str] = "success_banner_seconds"

    def __init__(self, client: ApiClient, banner: Banner | None = None, limit: int | None = None):
        self.client = client
        self.banner = banner or Banner()
        self.pagination = PaginationState(limit=limit or get_settings().management_page_size)
        self.filters: dict[str, str] = {name: "" for name in self.filter_names}
        self.filters["type"] = BookingTypeFilter.ALL.value
        self.records: list[Booking] = []
        self.loading = False
        self.updating: set[int | str] = set()
        self.sync_failed: dict[int | str, PendingChange] = {}
        self._closed = False

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        self.loading = True
        params = {"page": self.pagination.page, "limit": self.pagination.limit, **self.filters}
        try:
            body = await self.client.get(self.list_path, params=params, auth=True)
            records = [parse_booking(row) for row in body.get("data") or []]
            total = int((body.get("pagination") or {}).get("total") or 0)
        except AuthenticationRequired:
            records, total = [], 0
        except ApiError as exc:
            logger.warning("Booking listing failed: %s", exc.message)
            self.banner.error(exc.message)
            records, total = [], 0
        except (ValidationError, AttributeError, TypeError, ValueError) as exc:
            logger.warning("Booking listing returned an unexpected payload: %s", exc)
            self.banner.error("Failed to fetch bookings")
            records, total = [], 0
        else:
            self._on_listing(body)
        finally:
            self.loading = False

        if self._closed:
            return
        self.records = records
        self.pagination.update_total(total)

    def _on_listing(self, body: dict) -> None:
        """Hook for board-specific extras carried on the listing response."""

    def status_filter_options(self) -> list[tuple[str, str]]:
        """Status choices for the current ``type`` filter; "" means all."""
        kinds = _KINDS_BY_TYPE_FILTER[BookingTypeFilter(self.filters["type"])]
        options = [("", "All Statuses")]
        for kind in kinds:
            options.extend(status_options(kind))
        return options

    async def set_filter(self, name: str, value: str) -> None:
        if name not in self.filters:
            raise KeyError(f"Unknown filter: {name}")
        if name == "type":
            value = BookingTypeFilter(value).value
            self.filters["type"] = value
            if self.filters["status"] not in {v for v, _ in self.status_filter_options()}:
                self.filters["status"] = ""
        elif name == "status" and value not in {v for v, _ in self.status_filter_options()}:
            raise ValueError(f"Status {value!r} is not offered for type {self.filters['type']!r}")
        self.filters[name] = value
        self.pagination.page = 1
        await self.refresh()

    async def set_page(self, page: int) -> None:
        self.pagination.go_to(page)
        await self.refresh()

    def close(self) -> None:
        """Stop applying responses to this board."""
        self._closed = True

    # ------------------------------------------------------------------
    # Lookup and display
    # ------------------------------------------------------------------

    def find(self, record_id: int | str) -> Booking | None:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def status_options(self, record: Booking) -> list[tuple[str, str]]:
        return status_options(record.type)

    def display_message(self, record: Booking) -> str:
        return normalize_message(record.message)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def update_status(self, record_id: int | str, status: str, **extra: Any) -> bool:
        """Set a record's status; returns True once the backend confirms.

        Repeat calls for a record with a mutation in flight are ignored.
        """
        record = self.find(record_id)
        if record is None:
            raise KeyError(f"No booking with id {record_id!r} on this page")
        if record_id in self.updating:
            return False

        new_status = coerce_status(record.type, status)
        self.updating.add(record_id)
        self.sync_failed.pop(record_id, None)
        self._replace(
            record.model_copy(update={"status": new_status, "updated_at": datetime.now(timezone.utc)})
        )
        try:
            await self._send_status(record, new_status.value, **extra)
        except ApiError as exc:
            self._replace(record)
            if not isinstance(exc, AuthenticationRequired):
                self.sync_failed[record_id] = PendingChange(new_status.value, dict(extra), exc.message)
                self.banner.error(f"Failed to update booking status: {exc.message}")
            logger.warning("Status update for %s %s failed: %s", record.type, record_id, exc.message)
            return False
        finally:
            self.updating.discard(record_id)

        self.banner.success(
            f"Booking status updated to {new_status.value}",
            getattr(get_settings(), self.success_seconds_setting),
        )
        await self._after_status_change()
        return True

    async def retry(self, record_id: int | str) -> bool:
        """Re-send a status change that previously failed."""
        pending = self.sync_failed.get(record_id)
        if pending is None:
            return False
        return await self.update_status(record_id, pending.status, **pending.extra)

    @abstractmethod
    async def _send_status(self, record: Booking, status: str, **extra: Any) -> None:
        """Persist one record's status on the backend."""

    async def _after_status_change(self) -> None:
        pass

    def _replace(self, updated: Booking) -> None:
        for index, record in enumerate(self.records):
            if record.id == updated.id and record.type == updated.type:
                self.records[index] = updated
                return


class BookingBoard(_BookingBoardBase):
    """Owner-scoped bookings and inquiries with dashboard stats."""

    list_path = "/api/bookings"
    filter_names = ("status", "warehouse_id", "type")
    success_seconds_setting = "user_success_banner_seconds"

    def __init__(self, client: ApiClient, banner: Banner | None = None, limit: int | None = None):
        super().__init__(client, banner, limit)
        self.stats: BookingStats | None = None

    async def refresh(self) -> None:
        await super().refresh()
        await self.refresh_stats()

    async def refresh_stats(self) -> None:
        try:
            body = await self.client.get("/api/bookings/stats", auth=True)
            stats = BookingStats.model_validate(body.get("data") or {})
        except (ApiError, ValidationError, AttributeError) as exc:
            logger.warning("Booking stats unavailable: %s", exc)
            return
        if not self._closed:
            self.stats = stats

    @property
    def revenue_text(self) -> str:
        return format_inr(self.stats.revenue.total if self.stats else 0)

    async def _send_status(self, record: Booking, status: str, **extra: Any) -> None:
        await self.client.put(
            f"/api/bookings/{record.id}/status",
            json={"status": status, "type": record.type},
            auth=True,
        )

    async def _after_status_change(self) -> None:
        await self.refresh_stats()


class AdminBookingBoard(_BookingBoardBase):
    """Cross-tenant booking moderation: delete, bulk update and summary."""

    list_path = "/admin/bookings"
    filter_names = ("status", "search", "type")

    def __init__(self, client: ApiClient, banner: Banner | None = None, limit: int | None = None):
        super().__init__(client, banner, limit)
        self.summary: BookingSummary | None = None

    def _on_listing(self, body: dict) -> None:
        summary = body.get("summary")
        self.summary = BookingSummary.model_validate(summary) if summary else None

    @property
    def revenue_text(self) -> str:
        return format_inr(self.summary.total_revenue if self.summary else 0)

    async def update_status(self, record_id: int | str, status: str, notes: str = "") -> bool:
        return await super().update_status(record_id, status, notes=notes)

    async def _send_status(self, record: Booking, status: str, **extra: Any) -> None:
        await self.client.put(
            f"/admin/bookings/{record.id}/status",
            json={"status": status, "notes": extra.get("notes", ""), "type": record.type},
            auth=True,
        )

    async def delete(self, record_id: int | str, confirm: Callable[[Booking], bool]) -> bool:
        """Delete a record after *confirm* approves it; returns True on success."""
        record = self.find(record_id)
        if record is None:
            raise KeyError(f"No booking with id {record_id!r} on this page")
        if record_id in self.updating or not confirm(record):
            return False

        self.updating.add(record_id)
        try:
            await self.client.delete(
                f"/admin/bookings/{record.id}", json={"type": record.type}, auth=True
            )
        except ApiError as exc:
            if not isinstance(exc, AuthenticationRequired):
                self.banner.error(f"Failed to delete booking: {exc.message}")
            logger.warning("Delete of %s %s failed: %s", record.type, record_id, exc.message)
            return False
        finally:
            self.updating.discard(record_id)

        self.records = [r for r in self.records if not (r.id == record.id and r.type == record.type)]
        self.sync_failed.pop(record_id, None)
        page = self.pagination.page
        self.pagination.update_total(self.pagination.total - 1)
        self.banner.success("Booking deleted successfully")
        if self.pagination.page != page and not self._closed:
            await self.refresh()
        return True

    async def get_detail(self, record_id: int | str, kind: BookingKind | str) -> Booking:
        body = await self.client.get(
            f"/admin/bookings/{record_id}", params={"type": BookingKind(kind).value}, auth=True
        )
        return parse_booking(body.get("data") or {})

    async def bulk_update(
        self,
        record_ids: list[int | str],
        status: str,
        kind: BookingKind | str = BookingKind.INQUIRY,
    ) -> bool:
        """Set one status on many records of the same kind."""
        kind = BookingKind(kind)
        new_status = coerce_status(kind, status)
        try:
            await self.client.put(
                "/admin/bookings/bulk-update",
                json={"bookingIds": list(record_ids), "status": new_status.value, "type": kind.value},
                auth=True,
            )
        except ApiError as exc:
            if not isinstance(exc, AuthenticationRequired):
                self.banner.error(f"Failed to update bookings: {exc.message}")
            return False

        targets = set(record_ids)
        now = datetime.now(timezone.utc)
        self.records = [
            r.model_copy(update={"status": new_status, "updated_at": now})
            if r.id in targets and r.type == kind.value
            else r
            for r in self.records
        ]
        self.banner.success(f"{len(targets)} bookings updated to {new_status.value}")
        return True
