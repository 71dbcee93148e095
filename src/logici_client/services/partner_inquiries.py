"""Partner-facing inquiry lists: allocated and unallocated tabs."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from logici_client.domain.enums import InquiryTab, PartnerInquiryStatus, SortOrder
from logici_client.domain.schemas import PartnerInquiry
from logici_client.infra.http import ApiClient, ApiError, AuthenticationRequired
from logici_client.services.booking_management import Banner, PendingChange

logger = logging.getLogger(__name__)

INQUIRIES_PATH = "/api/partner/inquiries"

TAB_PATHS: dict[InquiryTab, str] = {
    InquiryTab.ALLOCATED: INQUIRIES_PATH,
    InquiryTab.UNALLOCATED: f"{INQUIRIES_PATH}/unallocated",
}

ALL_STATUSES = "all"

FETCH_FAILED_MESSAGE = "Failed to fetch inquiries"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class PartnerInquiryBoard:
    """Inquiries visible to a partner, filtered and sorted client-side."""

    def __init__(self, client: ApiClient, banner: Banner | None = None):
        self.client = client
        self.banner = banner or Banner()
        self.tab = InquiryTab.ALLOCATED
        self.status_filter = ALL_STATUSES
        self.sort_order = SortOrder.NEWEST_FIRST
        self.inquiries: list[PartnerInquiry] = []
        self.loading = False
        self.updating: set[int | str] = set()
        self.sync_failed: dict[int | str, PendingChange] = {}
        self._closed = False

    async def set_tab(self, tab: InquiryTab | str) -> None:
        self.tab = InquiryTab(tab)
        await self.refresh()

    async def refresh(self) -> None:
        """Load the active tab; any failure leaves an empty list."""
        self.loading = True
        path = TAB_PATHS[self.tab]
        try:
            body = await self.client.get(path, auth=True)
            inquiries = [PartnerInquiry.model_validate(row) for row in body.get("data") or []]
        except AuthenticationRequired:
            inquiries = []
        except ApiError as exc:
            logger.warning("Partner inquiries unavailable (%s): %s", path, exc.message)
            self.banner.error(exc.message or FETCH_FAILED_MESSAGE)
            inquiries = []
        except (ValidationError, AttributeError, TypeError) as exc:
            logger.warning("Partner inquiries returned an unexpected payload (%s): %s", path, exc)
            self.banner.error(FETCH_FAILED_MESSAGE)
            inquiries = []
        finally:
            self.loading = False

        if self._closed:
            return
        self.inquiries = inquiries

    def close(self) -> None:
        """Stop applying responses to this board."""
        self._closed = True

    def set_status_filter(self, status: str) -> None:
        if status != ALL_STATUSES:
            status = PartnerInquiryStatus(status).value
        self.status_filter = status

    def set_sort_order(self, order: SortOrder | str) -> None:
        self.sort_order = SortOrder(order)

    def visible(self) -> list[PartnerInquiry]:
        """Inquiries matching the status filter, in created-at order."""
        rows = [
            inquiry
            for inquiry in self.inquiries
            if self.status_filter == ALL_STATUSES or inquiry.status.value == self.status_filter
        ]
        return sorted(
            rows,
            key=lambda inquiry: _aware(inquiry.created_at),
            reverse=self.sort_order is SortOrder.NEWEST_FIRST,
        )

    async def update_status(self, inquiry_id: int | str, status: str) -> bool:
        """Optimistically set a status, rolling back if the backend refuses."""
        new_status = PartnerInquiryStatus(status)
        index = next((i for i, row in enumerate(self.inquiries) if row.id == inquiry_id), None)
        if index is None:
            raise KeyError(f"No inquiry with id {inquiry_id!r}")
        if inquiry_id in self.updating:
            return False

        previous = self.inquiries[index]
        self.updating.add(inquiry_id)
        self.sync_failed.pop(inquiry_id, None)
        self.inquiries[index] = previous.model_copy(update={"status": new_status})
        try:
            await self.client.put(
                f"{INQUIRIES_PATH}/{inquiry_id}/status",
                json={"status": new_status.value},
                auth=True,
            )
        except ApiError as exc:
            self._restore(previous)
            if not isinstance(exc, AuthenticationRequired):
                self.sync_failed[inquiry_id] = PendingChange(new_status.value, error=exc.message)
                self.banner.error(exc.message or "Failed to update status")
            return False
        finally:
            self.updating.discard(inquiry_id)

        self.banner.success("Status updated successfully")
        return True

    async def retry(self, inquiry_id: int | str) -> bool:
        pending = self.sync_failed.get(inquiry_id)
        if pending is None:
            return False
        return await self.update_status(inquiry_id, pending.status)

    def _restore(self, previous: PartnerInquiry) -> None:
        for i, row in enumerate(self.inquiries):
            if row.id == previous.id:
                self.inquiries[i] = previous
                return


def _aware(value: datetime | None) -> datetime:
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
