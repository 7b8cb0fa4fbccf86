import logging

from fastapi import APIRouter, Depends, HTTPException, Header, Response
from sqlalchemy.orm import Session

from bidtracker.config import DEFAULT_ACTOR
from bidtracker.database import get_db
from bidtracker.errors import BidNotFoundError, BidValidationError
from bidtracker.models.enums import (
    BidStage,
    BidStatus,
    OpportunityType,
    TcvTermBasis,
    bid_stage_label,
    bid_status_label,
    opportunity_type_label,
    tcv_term_basis_label,
)
from bidtracker.schemas.bid import (
    AuditEventResponse,
    BidDetailResponse,
    BidOptionsResponse,
    BidPayload,
    BidResponse,
    OptionResponse,
)
from bidtracker.services import bid_service

router = APIRouter(tags=["bids"])
logger = logging.getLogger(__name__)


def _actor(x_actor: str | None) -> str:
    return (x_actor or "").strip() or DEFAULT_ACTOR


@router.get("/bids/options", response_model=BidOptionsResponse)
def bid_options():
    """Enumerations and their labels for building the bid form and filters."""
    return BidOptionsResponse(
        statuses=[OptionResponse(value=s.value, label=bid_status_label(s.value)) for s in BidStatus],
        opportunity_types=[
            OptionResponse(value=t.value, label=opportunity_type_label(t.value)) for t in OpportunityType
        ],
        stages=[OptionResponse(value=s.value, label=bid_stage_label(s.value)) for s in BidStage],
        tcv_term_bases=[OptionResponse(value=b.value, label=tcv_term_basis_label(b.value)) for b in TcvTermBasis],
    )


@router.get("/bids", response_model=list[BidResponse])
def list_bids(
    status: str | None = None,
    q: str | None = None,
    sort: str | None = None,
    dir: str | None = None,
    db: Session = Depends(get_db),
):
    """List bids newest first; filter by status, search client name, or sort=client&dir=asc|desc."""
    return bid_service.list_bids(db, status=status, query=q, sort=sort, direction=dir)


@router.post("/bids", response_model=BidResponse, status_code=201)
def create_bid(payload: BidPayload, db: Session = Depends(get_db)):
    try:
        return bid_service.create_bid(db, payload)
    except BidValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/bids/{bid_id}", response_model=BidDetailResponse)
def get_bid(bid_id: str, response: Response, db: Session = Depends(get_db)):
    """Single bid with its audit trail, newest event first."""
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
    try:
        bid, events = bid_service.get_bid(db, bid_id)
    except BidNotFoundError:
        raise HTTPException(status_code=404, detail="Bid not found") from None
    detail = BidDetailResponse.model_validate(bid)
    detail.audit_events = [AuditEventResponse.model_validate(e) for e in events]
    return detail


@router.put("/bids/{bid_id}", response_model=BidResponse)
def update_bid(
    bid_id: str,
    payload: BidPayload,
    x_actor: str | None = Header(None, alias="X-Actor"),
    db: Session = Depends(get_db),
):
    """Replace the bid's fields. Writes one audit event when anything changed, nothing otherwise."""
    try:
        return bid_service.update_bid(db, bid_id, payload, actor=_actor(x_actor))
    except BidValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except BidNotFoundError:
        raise HTTPException(status_code=404, detail="Bid not found") from None


@router.delete("/bids/{bid_id}")
def delete_bid(
    bid_id: str,
    x_actor: str | None = Header(None, alias="X-Actor"),
    db: Session = Depends(get_db),
):
    try:
        event = bid_service.delete_bid(db, bid_id, actor=_actor(x_actor))
    except BidNotFoundError:
        raise HTTPException(status_code=404, detail="Bid not found") from None
    return {"status": "ok", "bid_id": bid_id, "audit_event_id": event.id}
