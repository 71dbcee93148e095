"""Domain enumerations for the warehouse marketplace client.

All enums use the (str, Enum) pattern so values serialize straight into
query strings and JSON bodies.
"""

from enum import Enum


class InquiryType(str, Enum):
    """Branch selector for step two of the contact form."""

    WAREHOUSE_AVAILABILITY = "Warehouse Availability Inquiry"
    AI_PREDICTIVE_ANALYTICS = "AI & Predictive Analytics Solutions"
    SHORT_TERM_STORAGE = "Short-Term Storage & Leasing"
    FULL_SERVICE_FULFILLMENT = "Full-Service Warehousing & Fulfillment"


class FormStep(int, Enum):
    """Phase of the multi-step inquiry form."""

    CONTACT_INFO = 1
    INQUIRY_DETAILS = 2


class StorageType(str, Enum):
    """Warehouse storage categories offered in the search filter."""

    COLD_STORAGE = "Cold Storage"
    DRY_STORAGE = "Dry Storage"
    HAZARDOUS_GOODS = "Hazardous Goods"


class BookingKind(str, Enum):
    """Discriminant separating free-form inquiries from paid bookings."""

    INQUIRY = "inquiry"
    CONFIRMED = "confirmed"


class InquiryStatus(str, Enum):
    """Status vocabulary of a booking-management inquiry."""

    PENDING = "pending"
    CONTACTED = "contacted"
    RESOLVED = "resolved"


class ConfirmedBookingStatus(str, Enum):
    """Status vocabulary of a confirmed (paid) booking."""

    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PartnerInquiryStatus(str, Enum):
    """Status vocabulary of an inquiry allocated to a partner."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class BookingTypeFilter(str, Enum):
    """Which record kinds a management listing should include."""

    ALL = "all"
    INQUIRIES = "inquiries"
    CONFIRMED = "confirmed"


class InquiryTab(str, Enum):
    """Partner inquiry listing tabs."""

    ALLOCATED = "allocated"
    UNALLOCATED = "unallocated"


class SortOrder(str, Enum):
    """Created-at ordering for inquiry lists."""

    NEWEST_FIRST = "desc"
    OLDEST_FIRST = "asc"


class BannerKind(str, Enum):
    """Tone of a dismissible management banner."""

    SUCCESS = "success"
    ERROR = "error"


STATUS_VOCABULARY: dict[BookingKind, type[Enum]] = {
    BookingKind.INQUIRY: InquiryStatus,
    BookingKind.CONFIRMED: ConfirmedBookingStatus,
}
