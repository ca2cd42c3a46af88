"""Inquiry status transitions."""
import logging

from app.models.inquiry import Inquiry, InquiryStatus

log = logging.getLogger("uvicorn.error")

TRANSITIONS: dict[InquiryStatus, frozenset[InquiryStatus]] = {
    InquiryStatus.new: frozenset({InquiryStatus.responded, InquiryStatus.closed}),
    InquiryStatus.responded: frozenset({InquiryStatus.responded, InquiryStatus.booked, InquiryStatus.closed}),
    InquiryStatus.booked: frozenset({InquiryStatus.closed}),
    InquiryStatus.closed: frozenset(),
}


def can_transition(current: InquiryStatus, target: InquiryStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def mark_responded(inquiry: Inquiry) -> bool:
    """Move the inquiry to responded after a partner reply. Idempotent.

    A booked or closed inquiry keeps its status; the reply itself is still stored.
    Returns whether the inquiry is now in responded state.
    """
    current = inquiry.status or InquiryStatus.new
    if not can_transition(current, InquiryStatus.responded):
        # TODO: confirm with product whether a late reply should reopen booked/closed inquiries
        log.warning(
            "[Leads] Partner responded to inquiry %s in status %s; status left unchanged",
            inquiry.id,
            current.value,
        )
        return False
    inquiry.status = InquiryStatus.responded
    return True
