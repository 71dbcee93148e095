"""Display helpers for management views: currency, status and kind labels."""

from enum import Enum

from logici_client.domain.enums import BookingKind

# Labels that differ from the plain title-cased value.
_STATUS_LABELS: dict[str, str] = {
    "in_progress": "In Progress",
}


def format_inr(paise: int | float | None) -> str:
    """Format an amount held in paise as rupees with Indian digit grouping.

    >>> format_inr(12345670)
    '₹1,23,456.70'
    """
    amount = int(round(paise or 0))
    sign = "-" if amount < 0 else ""
    rupees, fraction = divmod(abs(amount), 100)
    return f"{sign}₹{_group_indian(rupees)}.{fraction:02d}"


def _group_indian(value: int) -> str:
    digits = str(value)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join([*groups, tail])


def status_label(status: str | Enum) -> str:
    value = status.value if isinstance(status, Enum) else str(status)
    if value in _STATUS_LABELS:
        return _STATUS_LABELS[value]
    return value[:1].upper() + value[1:]


def kind_label(kind: str, is_paid: bool = False) -> str:
    """Badge text: paid records read "Paid", everything else "Inquiry"."""
    if kind == BookingKind.CONFIRMED or is_paid:
        return "Paid"
    return "Inquiry"
