"""Tests for inquiry matching, lead assignment and lead responses."""

from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.errors import NotFound
from app.models.inquiry import Category, Inquiry, InquiryStatus, LeadAssignment
from app.models.partner import VerificationStatus
from app.models.user import UserRole
from app.schemas.inquiry import InquiryCreate
from app.services.matching import (
    find_candidate_partners,
    get_inquiry_responses,
    parse_service_categories,
    respond_to_lead,
    serves_category,
    submit_inquiry,
)


@pytest.fixture
def client_user(make_user):
    return make_user("client@x.com", UserRole.client, city="Mumbai")


@pytest.fixture
def submit(db, client_user, settings):
    def _submit(city="Mumbai", category=Category.wedding, **fields):
        data = InquiryCreate(category=category, city=city, **fields)
        return submit_inquiry(db, client_user.id, data, settings=settings)

    return _submit


def _lead_partner_ids(db, inquiry_id):
    return {l.partner_id for l in db.query(LeadAssignment).filter(LeadAssignment.inquiry_id == inquiry_id)}


def _lead_for(db, inquiry_id, partner_id):
    return (
        db.query(LeadAssignment)
        .filter(LeadAssignment.inquiry_id == inquiry_id, LeadAssignment.partner_id == partner_id)
        .one()
    )


# =============================================================================
# Category helpers
# =============================================================================

def test_parse_service_categories():
    assert parse_service_categories(None) == []
    assert parse_service_categories("") == []
    assert parse_service_categories('["wedding", "event"]') == ["wedding", "event"]
    with pytest.raises(ValueError):
        parse_service_categories("wedding,event")
    with pytest.raises(ValueError):
        parse_service_categories('{"wedding": true}')


def test_serves_category_is_exact_or_wildcard():
    assert serves_category([], "wedding")
    assert serves_category(["portrait", "wedding"], "wedding")
    assert not serves_category(["pre-wedding"], "wedding")
    assert not serves_category(["Wedding"], "wedding")


# =============================================================================
# Broad match
# =============================================================================

def test_broad_match_is_case_insensitive_substring_on_city_or_category(db, make_partner):
    by_city = make_partner("city@x.com", "Navi MUMBAI", ["fashion"])
    by_category = make_partner("cat@x.com", "Pune", ["WEDDING"])
    neither = make_partner("none@x.com", "Delhi", ["portrait"])
    unverified = make_partner("pending@x.com", "Mumbai", ["wedding"], status=VerificationStatus.pending)

    ids = {p.id for p in find_candidate_partners(db, "mumbai", "wedding")}

    assert ids == {by_city.id, by_category.id}
    assert neither.id not in ids
    assert unverified.id not in ids


def test_broad_match_treats_like_wildcards_literally(db, make_partner):
    make_partner("p@x.com", "Mumbai", ["wedding"])

    assert find_candidate_partners(db, "%", "_") == []


# =============================================================================
# SubmitInquiry
# =============================================================================

def test_eligibility_filter(db, submit, make_partner):
    """A wildcard partner in Delhi never passes the broad city-or-category query for Mumbai, so this one is in Navi Mumbai."""
    p1 = make_partner("p1@x.com", "Mumbai", ["wedding"])
    p2 = make_partner("p2@x.com", "Navi Mumbai", [])
    p3 = make_partner("p3@x.com", "Mumbai", ["wedding"], status=VerificationStatus.pending)

    result = submit()

    assert _lead_partner_ids(db, result.inquiry.id) == {p1.id, p2.id}
    assert p3.id not in _lead_partner_ids(db, result.inquiry.id)
    assert result.assigned_count == 2


def test_wildcard_partner_outside_city_is_not_matched(db, submit, make_partner):
    # The broad query must find a partner first; an empty category list does not match "wedding"
    p1 = make_partner("p1@x.com", "Mumbai", ["wedding"])
    make_partner("p2@x.com", "Delhi", [])

    result = submit()

    assert _lead_partner_ids(db, result.inquiry.id) == {p1.id}


def test_city_match_alone_is_not_enough(db, submit, make_partner):
    make_partner("fashion@x.com", "Mumbai", ["fashion"])

    result = submit()

    assert result.assigned_count == 0
    assert _lead_partner_ids(db, result.inquiry.id) == set()


def test_category_substring_needs_exact_element(db, submit, make_partner):
    make_partner("pre@x.com", "Pune", ["pre-wedding"])
    exact = make_partner("exact@x.com", "Pune", ["wedding"])

    result = submit()

    assert _lead_partner_ids(db, result.inquiry.id) == {exact.id}


def test_inquiry_is_stored_new_with_unresponded_leads(db, submit, make_partner, client_user):
    make_partner("p1@x.com", "Mumbai", ["wedding"])

    result = submit(budget=Decimal("50000.00"), description="Two-day wedding")

    inquiry = db.get(Inquiry, result.inquiry.id)
    assert inquiry.status == InquiryStatus.new
    assert inquiry.client_id == client_user.id
    assert inquiry.budget == Decimal("50000.00")
    assert inquiry.reference_image_url is None
    assert all(not l.is_responded for l in inquiry.lead_assignments)


def test_mock_upload_substitutes_placeholder_image(db, client_user, settings):
    settings.mock_file_upload = True

    result = submit_inquiry(db, client_user.id, InquiryCreate(category=Category.event, city="Goa"), settings=settings)

    assert result.inquiry.reference_image_url.startswith(settings.mock_image_base_url)


def test_supplied_image_is_kept_in_mock_upload_mode(db, client_user, settings):
    settings.mock_file_upload = True
    data = InquiryCreate(category=Category.event, city="Goa", reference_image_url="https://img.example.com/ref.jpg")

    result = submit_inquiry(db, client_user.id, data, settings=settings)

    assert result.inquiry.reference_image_url == "https://img.example.com/ref.jpg"


def test_malformed_categories_fail_only_that_partner(db, submit, make_partner):
    good = make_partner("good@x.com", "Mumbai", ["wedding"])
    broken = make_partner("broken@x.com", "Mumbai", "not-json")

    result = submit()

    assert result.assigned_count == 1
    assert [o.partner_id for o in result.failed] == [broken.id]
    assert _lead_partner_ids(db, result.inquiry.id) == {good.id}


def test_storage_failure_on_one_lead_keeps_the_others(db, submit, make_partner, monkeypatch):
    first = make_partner("first@x.com", "Mumbai", ["wedding"])
    bad = make_partner("bad@x.com", "Mumbai", ["wedding"])
    last = make_partner("last@x.com", "Mumbai", [])
    first_id, bad_id, last_id = first.id, bad.id, last.id

    real_commit = db.commit

    def flaky_commit():
        if any(isinstance(o, LeadAssignment) and o.partner_id == bad_id for o in db.new):
            raise OperationalError("INSERT INTO lead_assignments", {}, Exception("disk I/O error"))
        real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)

    result = submit()

    assert result.assigned_count == 2
    assert [o.partner_id for o in result.failed] == [bad_id]
    assert "disk I/O error" in result.failed[0].error
    assert _lead_partner_ids(db, result.inquiry.id) == {first_id, last_id}


def test_partners_verified_later_are_not_added(db, submit, make_partner):
    late = make_partner("late@x.com", "Mumbai", ["wedding"], status=VerificationStatus.pending)
    result = submit()

    late.verification_status = VerificationStatus.verified
    db.commit()

    assert _lead_partner_ids(db, result.inquiry.id) == set()


# =============================================================================
# RespondToLead
# =============================================================================

def test_response_marks_lead_and_inquiry(db, submit, make_partner):
    p1 = make_partner("p1@x.com", "Mumbai", ["wedding"])
    inquiry_id = submit().inquiry.id
    lead = _lead_for(db, inquiry_id, p1.id)

    updated = respond_to_lead(db, p1.user_id, lead.id, "Available on that date", Decimal("45000"))

    assert updated.is_responded is True
    assert updated.response_message == "Available on that date"
    assert updated.quoted_price == Decimal("45000")
    assert updated.updated_at is not None
    assert db.get(Inquiry, inquiry_id).status == InquiryStatus.responded


def test_second_response_keeps_inquiry_responded(db, submit, make_partner):
    p1 = make_partner("p1@x.com", "Mumbai", ["wedding"])
    p2 = make_partner("p2@x.com", "Mumbai", [])
    inquiry_id = submit().inquiry.id

    respond_to_lead(db, p1.user_id, _lead_for(db, inquiry_id, p1.id).id, "Yes", None)
    respond_to_lead(db, p2.user_id, _lead_for(db, inquiry_id, p2.id).id, "Also yes", None)

    assert db.get(Inquiry, inquiry_id).status == InquiryStatus.responded


def test_partner_cannot_respond_to_another_partners_lead(db, submit, make_partner):
    owner = make_partner("a@x.com", "Mumbai", ["wedding"])
    other = make_partner("b@x.com", "Delhi", ["portrait"])
    inquiry_id = submit().inquiry.id
    lead = _lead_for(db, inquiry_id, owner.id)

    with pytest.raises(NotFound):
        respond_to_lead(db, other.user_id, lead.id, "Mine now", Decimal("1"))

    db.refresh(lead)
    assert lead.is_responded is False
    assert lead.response_message is None
    assert db.get(Inquiry, inquiry_id).status == InquiryStatus.new


def test_respond_without_profile_is_not_found(db, make_user):
    user = make_user("noprofile@x.com", UserRole.partner)

    with pytest.raises(NotFound) as exc:
        respond_to_lead(db, user.id, 1, "Hi", None)
    assert exc.value.detail == "Partner profile not found"


def test_response_on_booked_inquiry_keeps_status(db, submit, make_partner):
    p1 = make_partner("p1@x.com", "Mumbai", ["wedding"])
    inquiry_id = submit().inquiry.id
    inquiry = db.get(Inquiry, inquiry_id)
    inquiry.status = InquiryStatus.booked
    db.commit()

    lead = respond_to_lead(db, p1.user_id, _lead_for(db, inquiry_id, p1.id).id, "Late reply", None)

    assert lead.is_responded is True
    assert db.get(Inquiry, inquiry_id).status == InquiryStatus.booked


# =============================================================================
# GetInquiryResponses
# =============================================================================

def test_responses_only_include_responded_leads(db, submit, make_partner, client_user):
    p1 = make_partner("p1@x.com", "Mumbai", ["wedding"], business_name="Lens & Light")
    make_partner("p2@x.com", "Mumbai", [])
    inquiry_id = submit().inquiry.id
    respond_to_lead(db, p1.user_id, _lead_for(db, inquiry_id, p1.id).id, "Quote attached", Decimal("30000"))

    inquiry, responses = get_inquiry_responses(db, client_user.id, inquiry_id)

    assert inquiry.id == inquiry_id
    assert len(responses) == 1
    assert responses[0].partner.id == p1.id
    assert responses[0].partner.business_name == "Lens & Light"
    assert responses[0].partner.user.city == "Mumbai"
    assert responses[0].quoted_price == Decimal("30000")


def test_responses_for_another_clients_inquiry_not_found(db, submit, make_user):
    inquiry_id = submit().inquiry.id
    stranger = make_user("stranger@x.com", UserRole.client)

    with pytest.raises(NotFound):
        get_inquiry_responses(db, stranger.id, inquiry_id)
