"""Pydantic v2 schemas for backend response payloads."""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

from logici_client.domain.enums import (
    BookingKind,
    ConfirmedBookingStatus,
    InquiryStatus,
    PartnerInquiryStatus,
)


class _Payload(BaseModel):
    """Base for backend payloads: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class User(_Payload):
    """Authenticated account as returned by /me or /auth/login."""

    id: int | str
    first_name: str | None = Field(None, validation_alias=AliasChoices("first_name", "firstName"))
    last_name: str | None = Field(None, validation_alias=AliasChoices("last_name", "lastName"))
    email: str | None = None
    mobile: str | None = Field(None, validation_alias=AliasChoices("mobile", "mobileNumber"))
    country: str | None = None
    state: str | None = None
    city: str | None = None
    role_id: int | str | None = None
    is_admin: bool = Field(False, validation_alias=AliasChoices("is_admin", "isAdmin"))
    created_at: datetime | None = Field(None, validation_alias=AliasChoices("created_at", "createdAt"))
    last_login: datetime | None = Field(None, validation_alias=AliasChoices("last_login", "updatedAt"))

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


# ---------------------------------------------------------------------------
# Warehouse search
# ---------------------------------------------------------------------------


class Warehouse(_Payload):
    """Read-only listing projection shown in search results."""

    id: int | str
    name: str | None = None
    city: str | None = None
    state: str | None = None
    build_up_area: float = 0
    rent: float = 0
    warehouse_type: str | None = None
    images: str | list[str] | None = None

    @property
    def first_image(self) -> str | None:
        """First image path from either a comma-joined string or a list."""
        if isinstance(self.images, str):
            first = self.images.split(",")[0].strip()
            return first or None
        if isinstance(self.images, list) and self.images:
            return self.images[0]
        return None


class ListingPage(_Payload):
    """Envelope of GET /api/(public/)warehouses."""

    success: bool = False
    data: list[Warehouse] = []
    total: int = 0


# ---------------------------------------------------------------------------
# Bookings and inquiries
# ---------------------------------------------------------------------------


class WarehouseRef(_Payload):
    """Warehouse attributes embedded in booking records."""

    id: int | str | None = None
    name: str | None = None
    city: str | None = None
    state: str | None = None
    warehouse_type: str | None = None
    address: str | None = None


class _ContactRecord(_Payload):
    """Contact fields shared by every booking and inquiry record."""

    id: int | str
    full_name: str | None = Field(None, alias="fullName")
    email: str | None = None
    phone_number: str | None = Field(None, alias="phoneNumber")
    company_name: str | None = Field(None, alias="companyName")
    inquiry_type: str | None = Field(None, alias="inquiryType")
    message: str | None = None
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")
    warehouse: WarehouseRef | None = None


class InquiryBooking(_ContactRecord):
    """Free-form interest submission handled in booking management."""

    type: Literal["inquiry"] = Field("inquiry", frozen=True)
    status: InquiryStatus = InquiryStatus.PENDING
    is_paid: bool = False


class ConfirmedBooking(_ContactRecord):
    """Paid, listing-specific reservation."""

    type: Literal["confirmed"] = Field("confirmed", frozen=True)
    status: ConfirmedBookingStatus = ConfirmedBookingStatus.CONFIRMED
    is_paid: bool = True
    amount_paid: int = 0
    booking_number: str | None = None
    payment_method: str | None = None
    razorpay_payment_id: str | None = None
    payment_date: datetime | None = None
    owner: dict[str, Any] | None = None


BookingRecord = Annotated[Union[InquiryBooking, ConfirmedBooking], Field(discriminator="type")]

_booking_adapter = TypeAdapter(BookingRecord)


def parse_booking(raw: dict[str, Any]) -> InquiryBooking | ConfirmedBooking:
    """Parse one backend booking row into its tagged variant.

    Rows without a ``type`` are classified by ``is_paid``.
    """
    if not raw.get("type"):
        kind = BookingKind.CONFIRMED if raw.get("is_paid") else BookingKind.INQUIRY
        raw = {**raw, "type": kind.value}
    return _booking_adapter.validate_python(raw)


class PartnerInquiry(_ContactRecord):
    """Inquiry routed to a partner's dashboard."""

    status: PartnerInquiryStatus = PartnerInquiryStatus.PENDING


class PaginationInfo(_Payload):
    total: int = 0
    page: int = 1
    limit: int = 10
    pages: int = 0


class BookingSummary(_Payload):
    """Admin listing summary: counts by kind and revenue in paise."""

    total_inquiries: int = 0
    total_confirmed: int = 0
    total_revenue: int = 0


class InquiryCounts(_Payload):
    total: int = 0
    pending: int = 0
    contacted: int = 0
    resolved: int = 0


class ConfirmedCounts(_Payload):
    total: int = 0
    active: int = 0
    completed: int = 0


class RevenueFigure(_Payload):
    total: int = 0
    formatted: str | None = None


class BookingStats(_Payload):
    """Owner dashboard statistics from GET /api/bookings/stats."""

    inquiries: InquiryCounts = InquiryCounts()
    confirmed_bookings: ConfirmedCounts = ConfirmedCounts()
    revenue: RevenueFigure = RevenueFigure()
