"""Two-step contact/inquiry form: validation gating and multipart submission.

Step 1 collects contact details. Step 2 collects a field set chosen by the
inquiry type, plus message, attachment and consent. Nothing reaches the
network until both steps validate.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, fields
from datetime import date

from logici_client.domain.enums import FormStep, InquiryType
from logici_client.infra.http import ApiClient, ApiError

logger = logging.getLogger(__name__)

SUBMIT_PATH = "/api/public/inquiries"

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
PHONE_PATTERN = re.compile(r"\d{10}")

OTHERS = "Others"

# ---------------------------------------------------------------------------
# Option catalogs
# ---------------------------------------------------------------------------

INDUSTRY_TYPES = [
    "Retail & E-commerce",
    "FMCG",
    "Health & Pharmaceuticals",
    "Automotive",
    "Manufacturing",
    "Finance",
    "Logistics",
    "Real Estate",
    OTHERS,
]
SPACE_TYPES = ["Cold Storage", "Dry Storage", "Hazardous Goods"]
LEASE_DURATIONS = ["1-3 months", "6-12 months", "Custom"]
CURRENT_SYSTEMS = ["Zoho", "Odoo", "SAP", OTHERS, "None"]
FLEXIBILITY_REQUIREMENTS = [
    "24/7 Access",
    "Scalability of Space",
    "Climate Control",
    "Security Monitoring",
    "Technology Integration",
    "Transport Hub Access",
]
FULFILLMENT_SERVICES = [
    "Inventory Management",
    "Order Packaging",
    "Kitting and Assembly",
    "Pick and Pack Services",
    "Last-Mile Delivery",
    "Cross-Docking",
    "Custom Labeling",
    "Quality Inspections",
]

CHOICE_GROUPS: dict[str, list[str]] = {
    "flexibility_requirements": FLEXIBILITY_REQUIREMENTS,
    "fulfillment_services": FULFILLMENT_SERVICES,
}

# Step-2 fields per inquiry type, before "please specify" gating.
BRANCH_FIELDS: dict[InquiryType, tuple[str, ...]] = {
    InquiryType.WAREHOUSE_AVAILABILITY: (
        "location_preference",
        "industry_type",
        "space_type",
        "lease_duration",
        "preferred_start_date",
    ),
    InquiryType.AI_PREDICTIVE_ANALYTICS: (
        "industry_type",
        "space_type",
        "current_system",
        "preferred_start_date",
    ),
    InquiryType.SHORT_TERM_STORAGE: (
        "industry_type",
        "space_type",
        "start_date",
        "end_date",
        "flexibility_requirements",
    ),
    InquiryType.FULL_SERVICE_FULFILLMENT: (
        "industry_type",
        "space_type",
        "fulfillment_services",
    ),
}

# Free-text companion field -> (select it depends on, triggering value)
SPECIFY_FIELDS: dict[str, tuple[str, str]] = {
    "industry_other": ("industry_type", OTHERS),
    "wms_other": ("current_system", OTHERS),
}

CONTACT_FIELDS = (
    "full_name",
    "email",
    "phone_number",
    "company_name",
    "preferred_contact_method",
    "preferred_contact_time",
)
COMMON_STEP_TWO_FIELDS = ("inquiry_type", "message", "consent")


@dataclass
class Attachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class ContactFormDraft:
    """Superset of every field across the four inquiry branches."""
    full_name: str = ""
    email: str = ""
    phone_number: str = ""
    company_name: str = ""
    preferred_contact_method: str = ""
    preferred_contact_time: str = ""
    inquiry_type: str = ""
    message: str = ""
    consent: bool = False
    attachment: Attachment | None = None
    location_preference: str = ""
    industry_type: str = ""
    industry_other: str = ""
    space_type: str = ""
    lease_duration: str = ""
    preferred_start_date: str = ""
    current_system: str = ""
    wms_other: str = ""
    start_date: str = ""
    end_date: str = ""
    flexibility_requirements: list[str] = field(default_factory=list)
    fulfillment_services: list[str] = field(default_factory=list)


FIELD_NAMES = frozenset(f.name for f in fields(ContactFormDraft))


def wire_name(name: str) -> str:
    """camelCase form-field name the backend expects."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def visible_fields(draft: ContactFormDraft) -> list[str]:
    """Step-2 branch fields to collect for the draft's current selections.

    Recomputed from scratch on every call; depends only on ``inquiry_type``
    and the companion selects.
    """
    try:
        inquiry_type = InquiryType(draft.inquiry_type)
    except ValueError:
        return []

    result: list[str] = []
    for name in BRANCH_FIELDS[inquiry_type]:
        result.append(name)
        for other, (select, trigger) in SPECIFY_FIELDS.items():
            if select == name and getattr(draft, select) == trigger:
                result.append(other)
    return result


def validate_contact_info(draft: ContactFormDraft) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not draft.full_name.strip():
        errors["full_name"] = "Full Name is required"
    if not draft.email or not EMAIL_PATTERN.fullmatch(draft.email.strip()):
        errors["email"] = "Valid Email is required"
    if not draft.phone_number:
        errors["phone_number"] = "Phone Number is required"
    elif not PHONE_PATTERN.fullmatch(draft.phone_number):
        errors["phone_number"] = "Phone Number must be 10 digits"
    if not draft.company_name.strip():
        errors["company_name"] = "Company Name is required"
    return errors


def validate_inquiry_details(draft: ContactFormDraft, today: date | None = None) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not draft.inquiry_type:
        errors["inquiry_type"] = "Please select an Inquiry Type"
    if not draft.consent:
        errors["consent"] = "You must agree to the terms to continue"

    today = today or date.today()
    visible = visible_fields(draft)
    for name in ("preferred_start_date", "start_date"):
        parsed = _parse_date(getattr(draft, name)) if name in visible else None
        if parsed is not None and parsed < today:
            errors[name] = "Date cannot be in the past"
    if "end_date" in visible:
        start = _parse_date(draft.start_date)
        end = _parse_date(draft.end_date)
        if end is not None and end < (start or today):
            errors["end_date"] = "End date must be on or after the start date"
    return errors


def _parse_date(value: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class InquiryForm:
    """State machine driving the two-step inquiry form."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.draft = ContactFormDraft()
        self.step = FormStep.CONTACT_INFO
        self.errors: dict[str, str] = {}
        self.is_submitting = False
        self.submit_error: str | None = None
        self.submitted = False

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def set_field(self, name: str, value) -> None:
        """Set one draft field.

        Switching ``inquiry_type`` keeps values entered for other branches;
        they are simply not submitted while their branch is hidden.
        """
        if name not in FIELD_NAMES:
            raise KeyError(f"Unknown form field: {name}")
        setattr(self.draft, name, value)

    def toggle_choice(self, name: str, value: str, checked: bool) -> None:
        """Add or remove *value* in a checkbox group."""
        if name not in CHOICE_GROUPS:
            raise KeyError(f"Not a checkbox group: {name}")
        current = list(getattr(self.draft, name))
        if checked and value not in current:
            current.append(value)
        elif not checked:
            current = [item for item in current if item != value]
        setattr(self.draft, name, current)

    def attach(self, attachment: Attachment | None) -> None:
        self.draft.attachment = attachment

    def visible_fields(self) -> list[str]:
        return visible_fields(self.draft)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def next_step(self) -> bool:
        """Advance to step 2 if the contact details validate."""
        self.errors = validate_contact_info(self.draft)
        if self.errors:
            return False
        self.step = FormStep.INQUIRY_DETAILS
        return True

    def back(self) -> None:
        self.step = FormStep.CONTACT_INFO

    async def submit(self) -> bool:
        """Validate step 2 and POST the draft; returns True on success.

        Ignored while a previous submission is in flight. On failure the
        draft is left intact so the user can resubmit.
        """
        if self.is_submitting or self.step is not FormStep.INQUIRY_DETAILS:
            return False

        self.errors = validate_inquiry_details(self.draft)
        if self.errors:
            return False

        self.is_submitting = True
        self.submit_error = None
        try:
            body = await self.client.post(SUBMIT_PATH, files=self.multipart_parts())
            if not (isinstance(body, dict) and body.get("success")):
                message = body.get("message") if isinstance(body, dict) else None
                raise ApiError(message or "Failed to submit inquiry")
        except ApiError as exc:
            logger.warning("Inquiry submission failed: %s", exc.message)
            self.submit_error = exc.message or "An error occurred while submitting the form"
            return False
        finally:
            self.is_submitting = False

        logger.info("Inquiry submitted (%s)", self.draft.inquiry_type)
        self.draft = ContactFormDraft()
        self.step = FormStep.CONTACT_INFO
        self.errors = {}
        self.submitted = True
        return True

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def multipart_parts(self) -> list[tuple[str, tuple]]:
        """Encode the draft as multipart parts.

        List-valued fields become repeated parts. Only contact fields, the
        common step-2 fields and the active branch's visible fields are sent.
        """
        names = [*CONTACT_FIELDS, *COMMON_STEP_TWO_FIELDS, *self.visible_fields()]
        parts: list[tuple[str, tuple]] = []
        for name in names:
            value = getattr(self.draft, name)
            key = wire_name(name)
            if isinstance(value, list):
                parts.extend((key, (None, str(item))) for item in value)
            elif isinstance(value, bool):
                parts.append((key, (None, "true" if value else "false")))
            elif value:
                parts.append((key, (None, str(value))))

        attachment = self.draft.attachment
        if attachment is not None:
            parts.append(
                ("attachment", (attachment.filename, attachment.content, attachment.content_type))
            )
        return parts
