from datetime import datetime

from sqlalchemy.orm import Session, selectinload

from bidtracker.models.audit import AuditEvent
from bidtracker.models.bid import Bid
from bidtracker.services.bid_values import format_date
from bidtracker.services.csv_service import serialize_csv
from bidtracker.services.import_service import IMPORT_HEADERS

BIDS_EXPORT_FILENAME = "bids-export.csv"
AUDIT_EXPORT_FILENAME = "bids-audit-export.csv"

AUDIT_EXPORT_HEADERS = [
    "bidLabel",
    "action",
    "actor",
    "eventCreatedAt",
    "field",
    "fromValue",
    "toValue",
]


def _timestamp(value: datetime | None) -> str:
    return value.isoformat() if value else ""


def _bid_row(bid: Bid) -> list:
    return [
        bid.id,
        bid.client_name,
        bid.bid_name,
        bid.status,
        bid.opportunity_type,
        bid.current_stage,
        format_date(bid.next_stage_date),
        format_date(bid.psq_received_at),
        format_date(bid.psq_clarification_deadline_at),
        format_date(bid.psq_submission_deadline_at),
        bid.psq_submission_time,
        format_date(bid.itt_received_at),
        format_date(bid.itt_clarification_deadline_at),
        format_date(bid.itt_submission_deadline_at),
        bid.itt_submission_time,
        bid.tcv_gbp,
        bid.initial_term_months,
        bid.extension_term_months,
        bid.tcv_term_basis,
        bid.annual_value_gbp,
        bid.portal_url,
        bid.folder_url,
        _timestamp(bid.created_at),
        _timestamp(bid.updated_at),
    ]


def export_bids_csv(db: Session) -> str:
    """All bids, newest first, in the same column layout the importer expects."""
    bids = db.query(Bid).order_by(Bid.created_at.desc()).all()
    return serialize_csv(IMPORT_HEADERS, [_bid_row(bid) for bid in bids])


def export_audit_csv(db: Session) -> str:
    """One row per (event, change); an event without changes still gets one row with blank field/from/to."""
    events = (
        db.query(AuditEvent)
        .options(selectinload(AuditEvent.changes))
        .order_by(AuditEvent.created_at.desc())
        .all()
    )
    rows = []
    for event in events:
        prefix = [event.bid_label or "", event.action, event.actor, _timestamp(event.created_at)]
        if not event.changes:
            rows.append(prefix + ["", "", ""])
            continue
        for change in event.changes:
            rows.append(prefix + [change.field, change.from_value, change.to_value])
    return serialize_csv(AUDIT_EXPORT_HEADERS, rows)
