from __future__ import annotations

from datetime import date

import pytest

from bidtracker.errors import BidNotFoundError, BidValidationError
from bidtracker.models.audit import AuditChange, AuditEvent
from bidtracker.models.bid import Bid
from bidtracker.services import bid_service


def _changes(db, event_id: str) -> list[tuple[str, str, str]]:
    rows = (
        db.query(AuditChange)
        .filter(AuditChange.event_id == event_id)
        .order_by(AuditChange.position)
        .all()
    )
    return [(c.field, c.from_value, c.to_value) for c in rows]


def test_create_derives_annual_value_and_writes_no_audit(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload())
    assert bid.id
    assert bid.annual_value_gbp == 400_000
    assert bid.itt_submission_deadline_at == date(2025, 2, 14)
    assert db.query(AuditEvent).count() == 0


def test_create_uses_extension_when_basis_includes_it(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload(tcv_term_basis="initial_plus_extension"))
    assert bid.annual_value_gbp == 300_000


def test_non_two_stage_bids_drop_stage_fields(db, make_payload) -> None:
    bid = bid_service.create_bid(
        db,
        make_payload(
            opportunity_type="single_tender",
            current_stage="itt",
            next_stage_date="2025-04-01",
            psq_received_at="2025-01-01",
            psq_submission_time="10:00",
        ),
    )
    assert bid.current_stage is None
    assert bid.next_stage_date is None
    assert bid.psq_received_at is None
    assert bid.psq_submission_time is None


def test_two_stage_bid_keeps_stage_fields(db, make_payload) -> None:
    bid = bid_service.create_bid(
        db,
        make_payload(
            opportunity_type="two_stage_psq_itt",
            current_stage="psq",
            next_stage_date="2025-04-01",
            psq_submission_time="10:00",
        ),
    )
    assert bid.current_stage == "psq"
    assert bid.next_stage_date == date(2025, 4, 1)
    assert bid.psq_submission_time == "10:00"


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"client_name": "  "}, "All fields are required."),
        ({"status": "maybe"}, "Invalid status."),
        ({"opportunity_type": "framework"}, "Invalid opportunity type."),
        ({"opportunity_type": "two_stage_psq_itt", "current_stage": ""}, "Current stage is required"),
        ({"tcv_term_basis": "annual"}, "Invalid TCV term basis."),
        ({"folder_url": "not a url"}, "Folder URL must be a valid URL."),
        ({"portal_url": "portal"}, "Portal URL must be a valid URL."),
        ({"tcv_gbp": "0"}, "greater than zero"),
        ({"tcv_gbp": ""}, "Total contract value is required."),
        ({"tcv_gbp": "12.5"}, "Total contract value must be a whole number."),
        ({"initial_term_months": "0"}, "at least one month"),
        ({"extension_term_months": "-1"}, "zero or greater"),
        ({"itt_received_at": "06/01/2025"}, "Invalid date provided."),
        ({"psq_submission_time": "25:00"}, "Submission time must be a valid 24-hour time."),
        ({"itt_submission_time": "9am"}, "Submission time must be HH:MM."),
        ({"tcv_gbp": "1e308", "initial_term_months": "1"}, "Unable to calculate annual value."),
    ],
)
def test_create_rejects_invalid_fields(db, make_payload, overrides, message) -> None:
    with pytest.raises(BidValidationError, match=message):
        bid_service.create_bid(db, make_payload(**overrides))
    assert db.query(Bid).count() == 0


def test_update_with_identical_fields_is_a_no_op(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload())
    updated_at = bid.updated_at
    result = bid_service.update_bid(db, bid.id, make_payload(), actor="jo")
    assert result.id == bid.id
    assert result.updated_at == updated_at
    assert db.query(AuditEvent).count() == 0
    assert db.query(AuditChange).count() == 0


def test_update_records_single_status_change(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload())
    bid_service.update_bid(db, bid.id, make_payload(status="won"), actor="jo")

    events = db.query(AuditEvent).all()
    assert len(events) == 1
    event = events[0]
    assert event.action == "update"
    assert event.actor == "jo"
    assert event.bid_id == bid.id
    assert event.bid_id_snapshot == bid.id
    assert event.bid_label == "Acme Council · Facilities management"
    assert _changes(db, event.id) == [("status", "pending", "won")]
    assert db.get(Bid, bid.id).status == "won"


def test_update_diffs_in_fixed_field_order_and_recomputes_annual_value(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload())
    bid_service.update_bid(
        db,
        bid.id,
        make_payload(
            client_name="Acme District Council",
            tcv_term_basis="initial_plus_extension",
            portal_url="",
            itt_received_at="",
        ),
        actor="jo",
    )
    event = db.query(AuditEvent).one()
    assert event.bid_label == "Acme District Council · Facilities management"
    assert _changes(db, event.id) == [
        ("clientName", "Acme Council", "Acme District Council"),
        ("portalUrl", "https://portal.example.com/tenders/42", ""),
        ("ittReceivedAt", "2025-01-06", ""),
        ("tcvTermBasis", "initial_only", "initial_plus_extension"),
        ("annualValueGbp", "400000", "300000"),
    ]
    refreshed = db.get(Bid, bid.id)
    assert refreshed.portal_url is None
    assert refreshed.annual_value_gbp == 300_000


def test_update_switching_away_from_two_stage_clears_stage(db, make_payload) -> None:
    bid = bid_service.create_bid(
        db, make_payload(opportunity_type="two_stage_psq_itt", current_stage="psq")
    )
    bid_service.update_bid(
        db, bid.id, make_payload(opportunity_type="combined_psq_itt", current_stage="psq"), actor="jo"
    )
    event = db.query(AuditEvent).one()
    assert _changes(db, event.id) == [
        ("opportunityType", "two_stage_psq_itt", "combined_psq_itt"),
        ("currentStage", "psq", ""),
    ]
    assert db.get(Bid, bid.id).current_stage is None


def test_update_unknown_bid_raises_not_found(db, make_payload) -> None:
    with pytest.raises(BidNotFoundError):
        bid_service.update_bid(db, "missing", make_payload(), actor="jo")


def test_update_with_invalid_fields_writes_nothing(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload())
    with pytest.raises(BidValidationError):
        bid_service.update_bid(db, bid.id, make_payload(status="won", tcv_gbp="-5"), actor="jo")
    assert db.get(Bid, bid.id).status == "pending"
    assert db.query(AuditEvent).count() == 0


def test_delete_writes_audit_event_then_removes_bid(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload())
    bid_id = bid.id

    event = bid_service.delete_bid(db, bid_id, actor="jo")

    assert db.get(Bid, bid_id) is None
    assert event.action == "delete"
    assert event.actor == "jo"
    assert event.bid_id is None
    assert event.bid_id_snapshot == bid_id
    assert event.bid_label == "Acme Council · Facilities management"
    assert _changes(db, event.id) == [
        ("clientName", "Acme Council", "[deleted]"),
        ("bidName", "Facilities management", "[deleted]"),
        ("status", "pending", "[deleted]"),
        ("folderUrl", "https://sharepoint.example.com/sites/bids/acme", "[deleted]"),
        ("portalUrl", "https://portal.example.com/tenders/42", "[deleted]"),
    ]


def test_delete_keeps_earlier_audit_history(db, make_payload) -> None:
    bid_id = bid_service.create_bid(db, make_payload()).id
    bid_service.update_bid(db, bid_id, make_payload(status="won"), actor="jo")
    bid_service.delete_bid(db, bid_id, actor="jo")

    events = db.query(AuditEvent).all()
    assert sorted(e.action for e in events) == ["delete", "update"]
    assert all(e.bid_id is None and e.bid_id_snapshot == bid_id for e in events)


def test_failed_delete_leaves_no_audit_event(db, make_payload, monkeypatch) -> None:
    bid = bid_service.create_bid(db, make_payload())
    bid_id = bid.id

    def boom(instance):
        raise RuntimeError("delete failed")

    monkeypatch.setattr(db, "delete", boom)
    with pytest.raises(RuntimeError):
        bid_service.delete_bid(db, bid_id, actor="jo")

    assert db.query(AuditEvent).count() == 0
    assert db.query(AuditChange).count() == 0
    assert db.get(Bid, bid_id) is not None


def test_delete_unknown_bid_raises_not_found(db) -> None:
    with pytest.raises(BidNotFoundError):
        bid_service.delete_bid(db, "missing", actor="jo")


def test_get_bid_returns_audit_events(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload())
    bid_service.update_bid(db, bid.id, make_payload(status="bid"), actor="jo")
    found, events = bid_service.get_bid(db, bid.id)
    assert found.id == bid.id
    assert [e.action for e in events] == ["update"]
    assert [c.field for c in events[0].changes] == ["status"]


def test_list_bids_filters_and_sorts(db, make_payload) -> None:
    bid_service.create_bid(db, make_payload(client_name="Beta Trust", status="won"))
    bid_service.create_bid(db, make_payload(client_name="alpha housing"))
    bid_service.create_bid(db, make_payload(client_name="Gamma Alpha Ltd"))

    assert {b.client_name for b in bid_service.list_bids(db, status="won")} == {"Beta Trust"}
    assert len(bid_service.list_bids(db, status="not-a-status")) == 3
    assert {b.client_name for b in bid_service.list_bids(db, query="ALPHA")} == {
        "alpha housing",
        "Gamma Alpha Ltd",
    }
    ascending = [b.client_name for b in bid_service.list_bids(db, sort="client", direction="asc")]
    descending = [b.client_name for b in bid_service.list_bids(db, sort="client")]
    assert descending == list(reversed(ascending))
    assert ascending[0] == "Beta Trust"  # binary collation


def test_reset_all_data_requires_phrase(db, make_payload) -> None:
    bid = bid_service.create_bid(db, make_payload())
    bid_service.update_bid(db, bid.id, make_payload(status="won"), actor="jo")
    bid_service.create_bid(db, make_payload(bid_name="Second"))

    with pytest.raises(BidValidationError):
        bid_service.reset_all_data(db, "delete everything")
    assert db.query(Bid).count() == 2

    assert bid_service.reset_all_data(db, "DELETE ALL BIDS") == (2, 1)
    assert db.query(Bid).count() == 0
    assert db.query(AuditEvent).count() == 0
    assert db.query(AuditChange).count() == 0
