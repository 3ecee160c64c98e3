from __future__ import annotations

import pytest
from conftest import NOW, make_donor, signed_in

from bloodbridge.models.request import DonationRequestEdit, DonationRequestForm, DonationStatusUpdate
from bloodbridge.models.user import Session
from bloodbridge.schemas.request import request_document
from bloodbridge.services.donation_requests import (
    AccountBlockedError,
    build_edit,
    build_submission,
    can_manage,
    criteria_from_form,
    ensure_can_submit,
    filter_by_status,
    filter_by_urgency,
    find_request,
    is_owner,
    submission_confirmed,
    update_acknowledged,
)
from bloodbridge.services.regions import get_district
from bloodbridge.services.scoring import suggest_donors


def _form(**overrides) -> DonationRequestForm:
    fields = {
        "requesterName": "Rahim Uddin",
        "requesterEmail": "requester@example.com",
        "recipientName": "Karim",
        "recipientDistrict": "16",
        "recipientUpazila": "Savar",
        "hospitalName": "Enam Medical",
        "bloodGroup": "O+",
    }
    fields.update(overrides)
    return DonationRequestForm.model_validate(fields)


def test_criteria_use_the_district_name():
    criteria = criteria_from_form("O+", get_district("16"), "Savar")
    assert (criteria.blood_group, criteria.district, criteria.upazila) == ("O+", "Dhaka", "Savar")

    assert criteria_from_form("O+", None, "Savar").district == ""


def test_submission_embeds_snapshot_and_resolved_district():
    form = _form()
    district = get_district("16")
    donors = [
        make_donor(email=f"d{index}@x.com", availabilityStatus="available" if index == 3 else "resting")
        for index in range(5)
    ]
    suggestions = suggest_donors(donors, criteria_from_form(form.blood_group, district, form.recipient_upazila), NOW)

    document = request_document(build_submission(form, district, suggestions))

    assert document["recipientDistrict"] == "Dhaka"
    assert document["donationStatus"] == "pending"
    assert document["unitsNeeded"] == 1
    assert document["needsAmbulance"] is True
    assert document["urgencyLevel"] == "critical"
    assert document["locationGeo"]["lng"] == pytest.approx(90.4111451)
    assert [rec["email"] for rec in document["aiRecommendations"]] == ["d3@x.com", "d0@x.com", "d1@x.com"]
    assert document["aiRecommendations"][0]["score"] == 14


def test_submission_without_district_has_no_location():
    payload = build_submission(_form(recipientDistrict="999"), None, [])
    assert payload.recipient_district == ""
    assert payload.location_geo is None
    assert payload.ai_recommendations == []


def test_units_needed_must_be_positive():
    with pytest.raises(ValueError):
        _form(unitsNeeded=0)


def test_blocked_accounts_cannot_submit():
    ensure_can_submit(signed_in())
    ensure_can_submit(Session())
    with pytest.raises(AccountBlockedError):
        ensure_can_submit(signed_in(status="blocked"))


def test_urgency_filter_defaults_missing_levels_to_urgent():
    requests = [
        {"_id": "1", "urgencyLevel": "critical"},
        {"_id": "2"},
        {"_id": "3", "urgencyLevel": "flexible"},
        {"_id": "4", "urgencyLevel": "urgent"},
    ]

    assert [item["_id"] for item in filter_by_urgency(requests, "urgent")] == ["2", "4"]
    assert len(filter_by_urgency(requests, "all")) == 4
    assert find_request(requests, "3")["urgencyLevel"] == "flexible"
    assert find_request(requests, "42") is None


def test_ownership_is_case_insensitive():
    request = {"requesterEmail": "Requester@Example.com"}
    assert is_owner(request, "requester@example.com")
    assert not is_owner(request, "someone@example.com")
    assert not is_owner(request, None)
    assert not is_owner({}, "requester@example.com")


def test_submission_confirmation():
    assert submission_confirmed({"insertedId": "abc"})
    assert submission_confirmed({"acknowledged": True})
    assert not submission_confirmed({})


def test_form_rejects_unknown_blood_groups():
    with pytest.raises(ValueError):
        _form(bloodGroup="Z+")


def test_writes_count_when_matched_or_modified():
    assert update_acknowledged({"modifiedCount": 1})
    assert update_acknowledged({"matchedCount": 1, "modifiedCount": 0})
    assert not update_acknowledged({"matchedCount": 0, "modifiedCount": 0})
    assert not update_acknowledged({})


def test_status_change_carries_only_id_and_status():
    change = DonationStatusUpdate.model_validate({"donationStatus": "done", "donorName": "X"})
    assert change.to_remote("r1") == {"id": "r1", "donationStatus": "done"}


def test_status_filter():
    requests = [{"_id": "1", "donationStatus": "pending"}, {"_id": "2", "donationStatus": "done"}, {"_id": "3"}]

    assert [item["_id"] for item in filter_by_status(requests, "done")] == ["2"]
    assert len(filter_by_status(requests, "all")) == 3


def test_edit_keeps_requester_email_and_status():
    existing = {"requesterName": "Rahim", "requesterEmail": "owner@x.com", "donationStatus": "done"}
    edit = DonationRequestEdit.model_validate(
        {"recipientName": "Karim", "recipientDistrict": "Dhaka", "recipientUpazila": "Savar", "bloodGroup": "B-"}
    )

    body = build_edit(existing, edit)

    assert body["requesterName"] == "Rahim"
    assert body["requesterEmail"] == "owner@x.com"
    assert body["donationStatus"] == "done"
    assert body["bloodGroup"] == "B-"


def test_only_owners_and_admins_manage_requests():
    request = {"requesterEmail": "requester@example.com"}

    assert can_manage(request, signed_in())
    assert can_manage(request, signed_in(role="admin", email="admin@x.com"))
    assert not can_manage(request, signed_in(role="volunteer", email="v@x.com"))
    assert not can_manage(request, Session())
