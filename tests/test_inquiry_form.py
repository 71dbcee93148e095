"""Tests for the two-step InquiryForm: gating, branch fields, submission."""

import asyncio
from datetime import date

import pytest

from conftest import json_response
from logici_client.domain.enums import FormStep, InquiryType
from logici_client.services.inquiry_form import (
    SUBMIT_PATH,
    Attachment,
    ContactFormDraft,
    InquiryForm,
    validate_inquiry_details,
    visible_fields,
    wire_name,
)


def _fill_contact(form: InquiryForm) -> None:
    form.set_field("full_name", "Ravi Kumar")
    form.set_field("email", "ravi@example.com")
    form.set_field("phone_number", "9876543210")
    form.set_field("company_name", "Kumar Logistics")


def _ready_form(client, inquiry_type: InquiryType = InquiryType.FULL_SERVICE_FULFILLMENT) -> InquiryForm:
    form = InquiryForm(client)
    _fill_contact(form)
    assert form.next_step()
    form.set_field("inquiry_type", inquiry_type.value)
    form.set_field("consent", True)
    return form


# ---------------------------------------------------------------------------
# Step 1
# ---------------------------------------------------------------------------


class TestContactStep:
    def test_empty_step_one_reports_every_field(self) -> None:
        form = InquiryForm(client=None)

        assert not form.next_step()

        assert form.step is FormStep.CONTACT_INFO
        assert form.errors == {
            "full_name": "Full Name is required",
            "email": "Valid Email is required",
            "phone_number": "Phone Number is required",
            "company_name": "Company Name is required",
        }

    def test_invalid_email_and_short_phone(self) -> None:
        form = InquiryForm(client=None)
        _fill_contact(form)
        form.set_field("email", "ravi@example")
        form.set_field("phone_number", "98765")

        assert not form.next_step()
        assert form.errors == {
            "email": "Valid Email is required",
            "phone_number": "Phone Number must be 10 digits",
        }

    def test_valid_step_one_advances(self) -> None:
        form = InquiryForm(client=None)
        _fill_contact(form)

        assert form.next_step()
        assert form.step is FormStep.INQUIRY_DETAILS
        assert form.errors == {}

        form.back()
        assert form.step is FormStep.CONTACT_INFO
        assert form.draft.full_name == "Ravi Kumar"

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(KeyError):
            InquiryForm(client=None).set_field("favourite_colour", "blue")


# ---------------------------------------------------------------------------
# Branch fields
# ---------------------------------------------------------------------------


class TestVisibleFields:
    def test_no_inquiry_type_means_no_branch_fields(self) -> None:
        assert visible_fields(ContactFormDraft()) == []

    def test_industry_other_appears_only_for_others(self) -> None:
        draft = ContactFormDraft(inquiry_type=InquiryType.SHORT_TERM_STORAGE.value)
        assert "industry_other" not in visible_fields(draft)

        draft.industry_type = "Others"
        fields = visible_fields(draft)
        assert fields.index("industry_other") == fields.index("industry_type") + 1

    def test_wms_other_only_in_analytics_branch(self) -> None:
        draft = ContactFormDraft(
            inquiry_type=InquiryType.AI_PREDICTIVE_ANALYTICS.value,
            current_system="Others",
        )
        assert "wms_other" in visible_fields(draft)

        draft.inquiry_type = InquiryType.WAREHOUSE_AVAILABILITY.value
        assert "wms_other" not in visible_fields(draft)
        assert "current_system" not in visible_fields(draft)

    def test_branch_switch_changes_field_set(self) -> None:
        form = InquiryForm(client=None)
        form.set_field("inquiry_type", InquiryType.WAREHOUSE_AVAILABILITY.value)
        assert "lease_duration" in form.visible_fields()

        form.set_field("inquiry_type", InquiryType.FULL_SERVICE_FULFILLMENT.value)
        assert form.visible_fields() == ["industry_type", "space_type", "fulfillment_services"]

    def test_toggle_choice(self) -> None:
        form = InquiryForm(client=None)
        form.toggle_choice("fulfillment_services", "Cross-Docking", True)
        form.toggle_choice("fulfillment_services", "Custom Labeling", True)
        form.toggle_choice("fulfillment_services", "Cross-Docking", True)
        form.toggle_choice("fulfillment_services", "Custom Labeling", False)
        assert form.draft.fulfillment_services == ["Cross-Docking"]

        with pytest.raises(KeyError):
            form.toggle_choice("industry_type", "FMCG", True)


# ---------------------------------------------------------------------------
# Step 2 validation
# ---------------------------------------------------------------------------


class TestDetailsValidation:
    def test_requires_type_and_consent(self) -> None:
        errors = validate_inquiry_details(ContactFormDraft())
        assert set(errors) == {"inquiry_type", "consent"}

    def test_past_dates_rejected(self) -> None:
        draft = ContactFormDraft(
            inquiry_type=InquiryType.SHORT_TERM_STORAGE.value,
            consent=True,
            start_date="2026-01-10",
            end_date="2026-01-05",
        )
        errors = validate_inquiry_details(draft, today=date(2026, 1, 1))
        assert errors == {"end_date": "End date must be on or after the start date"}

        errors = validate_inquiry_details(draft, today=date(2026, 2, 1))
        assert "start_date" in errors

    def test_hidden_dates_are_not_validated(self) -> None:
        draft = ContactFormDraft(
            inquiry_type=InquiryType.FULL_SERVICE_FULFILLMENT.value,
            consent=True,
            start_date="2001-01-01",
        )
        assert validate_inquiry_details(draft, today=date(2026, 1, 1)) == {}


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestMultipart:
    def test_wire_names(self) -> None:
        assert wire_name("phone_number") == "phoneNumber"
        assert wire_name("preferred_contact_time") == "preferredContactTime"
        assert wire_name("consent") == "consent"

    def test_only_active_branch_is_serialized(self) -> None:
        form = _ready_form(client=None, inquiry_type=InquiryType.WAREHOUSE_AVAILABILITY)
        form.set_field("location_preference", "Pune")
        form.set_field("inquiry_type", InquiryType.FULL_SERVICE_FULFILLMENT.value)
        form.toggle_choice("fulfillment_services", "Cross-Docking", True)
        form.toggle_choice("fulfillment_services", "Last-Mile Delivery", True)

        parts = form.multipart_parts()
        names = [name for name, _ in parts]

        assert "locationPreference" not in names
        assert names.count("fulfillmentServices") == 2
        assert ("consent", (None, "true")) in parts
        assert ("fullName", (None, "Ravi Kumar")) in parts
        # values are kept in the draft for when the branch comes back
        assert form.draft.location_preference == "Pune"

    def test_attachment_is_a_file_part(self) -> None:
        form = _ready_form(client=None)
        form.attach(Attachment("plan.pdf", b"%PDF-1.4", "application/pdf"))
        assert form.multipart_parts()[-1] == ("attachment", ("plan.pdf", b"%PDF-1.4", "application/pdf"))


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


class TestSubmit:
    async def test_successful_submit_resets_form(self, make_client) -> None:
        client = make_client(lambda request: json_response({"success": True, "data": {"id": 11}}))
        form = _ready_form(client)
        form.toggle_choice("fulfillment_services", "Order Packaging", True)
        form.toggle_choice("fulfillment_services", "Quality Inspections", True)

        assert await form.submit()

        request = client.requests[0]
        assert request.method == "POST"
        assert request.url.path == SUBMIT_PATH
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert request.content.count(b'name="fulfillmentServices"') == 2
        assert form.submitted
        assert form.step is FormStep.CONTACT_INFO
        assert form.draft == ContactFormDraft()

    async def test_failed_submit_keeps_draft(self, make_client) -> None:
        client = make_client(lambda request: json_response({"message": "Server exploded"}, 500))
        form = _ready_form(client)

        assert not await form.submit()

        assert form.submit_error == "Server exploded"
        assert form.step is FormStep.INQUIRY_DETAILS
        assert form.draft.full_name == "Ravi Kumar"
        assert not form.is_submitting

    async def test_invalid_step_two_sends_nothing(self, make_client) -> None:
        client = make_client(lambda request: json_response({"success": True}))
        form = _ready_form(client)
        form.set_field("consent", False)

        assert not await form.submit()
        assert form.errors == {"consent": "You must agree to the terms to continue"}
        assert client.requests == []

    async def test_submit_from_step_one_is_ignored(self, make_client) -> None:
        client = make_client(lambda request: json_response({"success": True}))
        form = InquiryForm(client)
        assert not await form.submit()
        assert client.requests == []

    async def test_double_submit_sends_once(self, make_client) -> None:
        gate = asyncio.Event()

        async def _handler(request):
            await gate.wait()
            return json_response({"success": True})

        client = make_client(_handler)
        form = _ready_form(client)
        first = asyncio.create_task(form.submit())
        await asyncio.sleep(0)

        assert not await form.submit()

        gate.set()
        assert await first
        assert len(client.requests) == 1
