"""
Bid create/update/delete with an audit trail.

Updates and deletes write the bid change and its AuditEvent (plus one AuditChange per field)
in one transaction. Creation is not audited.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import date
from typing import Callable

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from bidtracker.errors import BidNotFoundError, BidValidationError
from bidtracker.models.audit import AuditChange, AuditEvent
from bidtracker.models.bid import Bid
from bidtracker.models.enums import (
    AuditAction,
    BidStage,
    BidStatus,
    OpportunityType,
    TcvTermBasis,
    parse_enum,
)
from bidtracker.schemas.bid import BidPayload
from bidtracker.services.bid_values import (
    compute_annual_value,
    format_date,
    is_valid_url,
    parse_date,
    parse_time,
    parse_whole_number,
)

logger = logging.getLogger(__name__)

DELETED_MARKER = "[deleted]"
RESET_CONFIRMATION_PHRASE = "DELETE ALL BIDS"


@dataclass(frozen=True)
class BidValues:
    """A validated, normalised bid ready to be written. Field names match Bid columns."""
    client_name: str
    bid_name: str
    status: str
    opportunity_type: str
    current_stage: str | None
    next_stage_date: date | None
    psq_received_at: date | None
    psq_clarification_deadline_at: date | None
    psq_submission_deadline_at: date | None
    psq_submission_time: str | None
    itt_received_at: date | None
    itt_clarification_deadline_at: date | None
    itt_submission_deadline_at: date | None
    itt_submission_time: str | None
    tcv_gbp: int
    initial_term_months: int
    extension_term_months: int | None
    tcv_term_basis: str
    annual_value_gbp: int
    portal_url: str | None
    folder_url: str


def _text(value: str | None) -> str:
    return (value or "").strip()


def _required_int(raw, label: str) -> int:
    try:
        value = parse_whole_number(raw)
    except ValueError:
        raise BidValidationError(f"{label} must be a whole number.") from None
    if value is None:
        raise BidValidationError(f"{label} is required.")
    return value


def _optional_date(raw: str | None) -> date | None:
    try:
        return parse_date(raw)
    except ValueError:
        raise BidValidationError("Invalid date provided.") from None


def _optional_time(raw: str | None) -> str | None:
    try:
        return parse_time(raw)
    except ValueError as e:
        raise BidValidationError(str(e)) from None


def normalize_bid_payload(payload: BidPayload) -> BidValues:
    """Validate submitted fields into BidValues. Raises BidValidationError on the first bad field."""
    client_name = _text(payload.client_name)
    bid_name = _text(payload.bid_name)
    folder_url = _text(payload.folder_url)
    portal_url = _text(payload.portal_url)

    next_stage_date = _optional_date(payload.next_stage_date)
    psq_received_at = _optional_date(payload.psq_received_at)
    psq_clarification_deadline_at = _optional_date(payload.psq_clarification_deadline_at)
    psq_submission_deadline_at = _optional_date(payload.psq_submission_deadline_at)
    psq_submission_time = _optional_time(payload.psq_submission_time)
    itt_received_at = _optional_date(payload.itt_received_at)
    itt_clarification_deadline_at = _optional_date(payload.itt_clarification_deadline_at)
    itt_submission_deadline_at = _optional_date(payload.itt_submission_deadline_at)
    itt_submission_time = _optional_time(payload.itt_submission_time)
    tcv_gbp = _required_int(payload.tcv_gbp, "Total contract value")
    initial_term_months = _required_int(payload.initial_term_months, "Initial term")
    try:
        extension_term_months = parse_whole_number(payload.extension_term_months)
    except ValueError:
        raise BidValidationError("Extension term must be a whole number.") from None

    if not client_name or not bid_name or not folder_url:
        raise BidValidationError("All fields are required.")

    status = parse_enum(BidStatus, _text(payload.status))
    if status is None:
        raise BidValidationError("Invalid status.")

    opportunity_type = parse_enum(OpportunityType, _text(payload.opportunity_type))
    if opportunity_type is None:
        raise BidValidationError("Invalid opportunity type.")

    two_stage = opportunity_type is OpportunityType.two_stage_psq_itt
    current_stage = parse_enum(BidStage, _text(payload.current_stage))
    if two_stage and current_stage is None:
        raise BidValidationError("Current stage is required for two stage bids.")

    tcv_term_basis = parse_enum(TcvTermBasis, _text(payload.tcv_term_basis))
    if tcv_term_basis is None:
        raise BidValidationError("Invalid TCV term basis.")

    if not is_valid_url(folder_url):
        raise BidValidationError("Folder URL must be a valid URL.")
    if portal_url and not is_valid_url(portal_url):
        raise BidValidationError("Portal URL must be a valid URL.")

    if tcv_gbp <= 0:
        raise BidValidationError("Total contract value must be greater than zero.")
    if initial_term_months <= 0:
        raise BidValidationError("Initial term must be at least one month.")
    if extension_term_months is not None and extension_term_months < 0:
        raise BidValidationError("Extension term must be zero or greater.")

    annual_value_gbp = compute_annual_value(
        tcv_gbp, initial_term_months, extension_term_months, tcv_term_basis
    )
    if annual_value_gbp is None:
        raise BidValidationError("Unable to calculate annual value.")

    return BidValues(
        client_name=client_name,
        bid_name=bid_name,
        status=status.value,
        opportunity_type=opportunity_type.value,
        # Stage and PSQ fields only apply to two stage opportunities.
        current_stage=current_stage.value if two_stage else None,
        next_stage_date=next_stage_date if two_stage else None,
        psq_received_at=psq_received_at if two_stage else None,
        psq_clarification_deadline_at=psq_clarification_deadline_at if two_stage else None,
        psq_submission_deadline_at=psq_submission_deadline_at if two_stage else None,
        psq_submission_time=psq_submission_time if two_stage else None,
        itt_received_at=itt_received_at,
        itt_clarification_deadline_at=itt_clarification_deadline_at,
        itt_submission_deadline_at=itt_submission_deadline_at,
        itt_submission_time=itt_submission_time,
        tcv_gbp=tcv_gbp,
        initial_term_months=initial_term_months,
        extension_term_months=extension_term_months,
        tcv_term_basis=tcv_term_basis.value,
        annual_value_gbp=annual_value_gbp,
        portal_url=portal_url or None,
        folder_url=folder_url,
    )


def _str_value(value) -> str:
    return "" if value is None else str(value)


def _number_value(value: int | None) -> str:
    return "" if value is None else str(value)


def _attr(name: str, serialize: Callable) -> Callable:
    return lambda record: serialize(getattr(record, name))


# (audit field key, old-value serializer over Bid, new-value serializer over BidValues),
# evaluated in this order so change rows always come out in the same order.
AUDITED_FIELDS: tuple[tuple[str, Callable, Callable], ...] = tuple(
    (key, _attr(attr, serialize), _attr(attr, serialize))
    for key, attr, serialize in (
        ("clientName", "client_name", _str_value),
        ("bidName", "bid_name", _str_value),
        ("status", "status", _str_value),
        ("portalUrl", "portal_url", _str_value),
        ("opportunityType", "opportunity_type", _str_value),
        ("currentStage", "current_stage", _str_value),
        ("nextStageDate", "next_stage_date", format_date),
        ("psqReceivedAt", "psq_received_at", format_date),
        ("psqClarificationDeadlineAt", "psq_clarification_deadline_at", format_date),
        ("psqSubmissionDeadlineAt", "psq_submission_deadline_at", format_date),
        ("psqSubmissionTime", "psq_submission_time", _str_value),
        ("ittReceivedAt", "itt_received_at", format_date),
        ("ittClarificationDeadlineAt", "itt_clarification_deadline_at", format_date),
        ("ittSubmissionDeadlineAt", "itt_submission_deadline_at", format_date),
        ("ittSubmissionTime", "itt_submission_time", _str_value),
        ("tcvGbp", "tcv_gbp", _number_value),
        ("initialTermMonths", "initial_term_months", _number_value),
        ("extensionTermMonths", "extension_term_months", _number_value),
        ("tcvTermBasis", "tcv_term_basis", _str_value),
        ("annualValueGbp", "annual_value_gbp", _number_value),
        ("folderUrl", "folder_url", _str_value),
    )
)

# Fields captured on the final audit event when a bid is deleted.
DELETE_SNAPSHOT_FIELDS: tuple[tuple[str, str], ...] = (
    ("clientName", "client_name"),
    ("bidName", "bid_name"),
    ("status", "status"),
    ("folderUrl", "folder_url"),
    ("portalUrl", "portal_url"),
)


def diff_bid(current: Bid, values: BidValues) -> list[tuple[str, str, str]]:
    """Return (field, from_value, to_value) for every audited field whose string form changed."""
    changes = []
    for field, old_serializer, new_serializer in AUDITED_FIELDS:
        from_value = old_serializer(current)
        to_value = new_serializer(values)
        if from_value != to_value:
            changes.append((field, from_value, to_value))
    return changes


def bid_label(client_name: str, bid_name: str) -> str:
    return f"{client_name} · {bid_name}"


def _get_bid_or_raise(db: Session, bid_id: str) -> Bid:
    bid = db.query(Bid).filter(Bid.id == bid_id).first() if bid_id else None
    if not bid:
        raise BidNotFoundError(bid_id)
    return bid


def create_bid(db: Session, payload: BidPayload) -> Bid:
    values = normalize_bid_payload(payload)
    bid = Bid(**asdict(values))
    db.add(bid)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(bid)
    logger.info("create_bid: bid_id=%s client=%s", bid.id, bid.client_name)
    return bid


def update_bid(db: Session, bid_id: str, payload: BidPayload, actor: str) -> Bid:
    """
    Apply an edit. When no audited field changes nothing is written and the bid is returned
    as-is; otherwise the row update, its AuditEvent and AuditChanges commit together.
    """
    values = normalize_bid_payload(payload)
    current = _get_bid_or_raise(db, bid_id)
    changes = diff_bid(current, values)
    if not changes:
        logger.info("update_bid: bid_id=%s no changes", bid_id)
        return current

    try:
        for name, value in asdict(values).items():
            setattr(current, name, value)
        event = AuditEvent(
            bid_id=current.id,
            bid_id_snapshot=current.id,
            bid_label=bid_label(values.client_name, values.bid_name),
            action=AuditAction.update.value,
            actor=actor,
        )
        db.add(event)
        for position, (field, from_value, to_value) in enumerate(changes):
            event.changes.append(
                AuditChange(position=position, field=field, from_value=from_value, to_value=to_value)
            )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(current)
    logger.info(
        "update_bid: bid_id=%s actor=%s changed=%s",
        bid_id,
        actor,
        ",".join(field for field, _, _ in changes),
    )
    return current


def delete_bid(db: Session, bid_id: str, actor: str) -> AuditEvent:
    """Write the "delete" audit event, then remove the bid, in one transaction."""
    current = _get_bid_or_raise(db, bid_id)
    try:
        event = AuditEvent(
            bid_id=current.id,
            bid_id_snapshot=current.id,
            bid_label=bid_label(current.client_name, current.bid_name),
            action=AuditAction.delete.value,
            actor=actor,
        )
        db.add(event)
        for position, (field, attr) in enumerate(DELETE_SNAPSHOT_FIELDS):
            event.changes.append(
                AuditChange(
                    position=position,
                    field=field,
                    from_value=_str_value(getattr(current, attr)),
                    to_value=DELETED_MARKER,
                )
            )
        # Event must exist before the row goes; the ORM then nulls its bid_id.
        db.flush()
        db.delete(current)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    logger.info("delete_bid: bid_id=%s actor=%s event_id=%s", bid_id, actor, event.id)
    return event


def get_bid(db: Session, bid_id: str) -> tuple[Bid, list[AuditEvent]]:
    """Return the bid and its audit events, newest first."""
    bid = _get_bid_or_raise(db, bid_id)
    events = (
        db.query(AuditEvent)
        .options(selectinload(AuditEvent.changes))
        .filter(AuditEvent.bid_id_snapshot == bid_id)
        .order_by(AuditEvent.created_at.desc())
        .all()
    )
    return bid, events


def list_bids(
    db: Session,
    status: str | None = None,
    query: str | None = None,
    sort: str | None = None,
    direction: str | None = None,
) -> list[Bid]:
    """
    List bids newest first. An unknown status filter is ignored (shows all); the query matches
    client names case-insensitively; sort="client" orders by client name (dir asc|desc, default desc).
    """
    q = db.query(Bid)
    selected = parse_enum(BidStatus, status) if status else None
    if selected is not None:
        q = q.filter(Bid.status == selected.value)
    search = (query or "").strip()
    if search:
        q = q.filter(func.lower(Bid.client_name).contains(search.lower()))
    if sort == "client":
        client_order = Bid.client_name.asc() if direction == "asc" else Bid.client_name.desc()
        q = q.order_by(client_order, Bid.created_at.desc())
    else:
        q = q.order_by(Bid.created_at.desc())
    return q.all()


def reset_all_data(db: Session, confirmation: str) -> tuple[int, int]:
    """Delete every bid and audit event. Returns (bids_deleted, audit_events_deleted)."""
    if (confirmation or "").strip() != RESET_CONFIRMATION_PHRASE:
        raise BidValidationError("Confirmation phrase did not match. No data was deleted.")
    try:
        db.query(AuditChange).delete(synchronize_session=False)
        audit_deleted = db.query(AuditEvent).delete(synchronize_session=False)
        bids_deleted = db.query(Bid).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.warning("reset_all_data: deleted bids=%s audit_events=%s", bids_deleted, audit_deleted)
    return bids_deleted, audit_deleted
