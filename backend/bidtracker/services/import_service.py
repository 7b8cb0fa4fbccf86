"""
Bulk bid import from CSV.

Unlike manual entry this is lenient: rows failing a required rule are skipped and counted,
and malformed dates, times and numbers are stored as blank rather than rejecting the row.
Imported rows are an initial data load, so no audit events are written.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from bidtracker.errors import ImportHeaderError
from bidtracker.models.bid import Bid
from bidtracker.models.enums import BidStage, BidStatus, OpportunityType, TcvTermBasis, parse_enum
from bidtracker.services.bid_values import (
    compute_annual_value,
    is_valid_url,
    parse_loose_date,
    parse_time,
    parse_whole_number,
)
from bidtracker.services.csv_service import parse_csv

logger = logging.getLogger(__name__)

# id, createdAt and updatedAt are required in the header but ignored on import.
IMPORT_HEADERS = [
    "id",
    "clientName",
    "bidName",
    "status",
    "opportunityType",
    "currentStage",
    "nextStageDate",
    "psqReceivedAt",
    "psqClarificationDeadlineAt",
    "psqSubmissionDeadlineAt",
    "psqSubmissionTime",
    "ittReceivedAt",
    "ittClarificationDeadlineAt",
    "ittSubmissionDeadlineAt",
    "ittSubmissionTime",
    "tcvGbp",
    "initialTermMonths",
    "extensionTermMonths",
    "tcvTermBasis",
    "annualValueGbp",
    "portalUrl",
    "folderUrl",
    "createdAt",
    "updatedAt",
]

STATUS_ALIASES = {
    "pending": BidStatus.pending,
    "pipeline": BidStatus.pipeline,
    "in progress": BidStatus.in_progress,
    "bid": BidStatus.bid,
    "no bid": BidStatus.no_bid,
    "submitted": BidStatus.submitted,
    "won": BidStatus.won,
    "lost": BidStatus.lost,
    "dropped": BidStatus.dropped,
    "abandoned": BidStatus.abandoned,
}


@dataclass
class ImportResult:
    inserted: int
    skipped: int


def normalize_status(value: str) -> BidStatus | None:
    """Map a human-typed status ("No Bid", "no-bid", "IN_PROGRESS") onto BidStatus."""
    key = " ".join((value or "").strip().lower().replace("_", " ").replace("-", " ").split())
    return STATUS_ALIASES.get(key)


def _lenient_int(raw: str) -> int | None:
    try:
        return parse_whole_number(raw)
    except ValueError:
        return None


def _lenient_time(raw: str) -> str | None:
    try:
        return parse_time(raw)
    except ValueError:
        return None


def row_to_bid(row: dict[str, str]) -> Bid | None:
    """Build an unsaved Bid from one CSV row, or None when the row must be skipped."""
    get = lambda key: (row.get(key) or "").strip()

    client_name = get("clientName")
    bid_name = get("bidName")
    status_raw = get("status")
    folder_url = get("folderUrl")
    portal_url = get("portalUrl")
    if not client_name or not bid_name or not status_raw or not folder_url:
        return None

    status = normalize_status(status_raw)
    if status is None:
        return None

    opportunity_type = parse_enum(OpportunityType, get("opportunityType") or OpportunityType.single_tender.value)
    if opportunity_type is None:
        return None

    tcv_term_basis = None
    if get("tcvTermBasis"):
        tcv_term_basis = parse_enum(TcvTermBasis, get("tcvTermBasis"))
        if tcv_term_basis is None:
            return None

    if not is_valid_url(folder_url):
        return None
    if portal_url and not is_valid_url(portal_url):
        return None

    tcv_gbp = _lenient_int(get("tcvGbp"))
    initial_term_months = _lenient_int(get("initialTermMonths"))
    extension_term_months = _lenient_int(get("extensionTermMonths"))
    explicit_annual_value = _lenient_int(get("annualValueGbp"))

    annual_value_gbp = None
    if tcv_gbp is not None and initial_term_months is not None and tcv_term_basis is not None:
        annual_value_gbp = compute_annual_value(
            tcv_gbp, initial_term_months, extension_term_months, tcv_term_basis
        )
    # An explicit annual value in the file wins over the computed one.
    if explicit_annual_value is not None:
        annual_value_gbp = explicit_annual_value

    two_stage = opportunity_type is OpportunityType.two_stage_psq_itt
    current_stage = parse_enum(BidStage, get("currentStage")) if two_stage else None
    if two_stage and current_stage is None:
        return None

    return Bid(
        client_name=client_name,
        bid_name=bid_name,
        status=status.value,
        opportunity_type=opportunity_type.value,
        current_stage=current_stage.value if current_stage else None,
        next_stage_date=parse_loose_date(get("nextStageDate")) if two_stage else None,
        psq_received_at=parse_loose_date(get("psqReceivedAt")) if two_stage else None,
        psq_clarification_deadline_at=(
            parse_loose_date(get("psqClarificationDeadlineAt")) if two_stage else None
        ),
        psq_submission_deadline_at=parse_loose_date(get("psqSubmissionDeadlineAt")) if two_stage else None,
        psq_submission_time=_lenient_time(get("psqSubmissionTime")) if two_stage else None,
        itt_received_at=parse_loose_date(get("ittReceivedAt")),
        itt_clarification_deadline_at=parse_loose_date(get("ittClarificationDeadlineAt")),
        itt_submission_deadline_at=parse_loose_date(get("ittSubmissionDeadlineAt")),
        itt_submission_time=_lenient_time(get("ittSubmissionTime")),
        tcv_gbp=tcv_gbp,
        initial_term_months=initial_term_months,
        extension_term_months=extension_term_months,
        tcv_term_basis=tcv_term_basis.value if tcv_term_basis else None,
        annual_value_gbp=annual_value_gbp,
        portal_url=portal_url or None,
        folder_url=folder_url,
    )


def import_bids_csv(db: Session, text: str) -> ImportResult:
    """
    Validate every row and insert the survivors in a single commit.
    Raises ImportHeaderError (nothing written) when an expected header is missing.
    """
    headers, rows = parse_csv(text)
    header_index = {header: index for index, header in enumerate(headers)}
    missing = [header for header in IMPORT_HEADERS if header not in header_index]
    if missing:
        logger.warning("import_bids_csv: missing headers %s", missing)
        raise ImportHeaderError(missing)

    bids: list[Bid] = []
    skipped = 0
    for row in rows:
        record = {
            header: (row[index] if index < len(row) else "")
            for header, index in header_index.items()
        }
        bid = row_to_bid(record)
        if bid is None:
            skipped += 1
            continue
        bids.append(bid)

    if bids:
        db.add_all(bids)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    logger.info("import_bids_csv: inserted=%s skipped=%s", len(bids), skipped)
    return ImportResult(inserted=len(bids), skipped=skipped)
