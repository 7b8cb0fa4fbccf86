"""Admin endpoints: bulk import/export, data reset, users and branding."""
import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Response
from sqlalchemy.orm import Session

from bidtracker.database import get_db
from bidtracker.errors import BidValidationError, UserNotFoundError, UserValidationError
from bidtracker.schemas.admin import (
    BrandingResponse,
    BrandingUpdate,
    UserCreate,
    UserPatch,
    UserResponse,
)
from bidtracker.schemas.bid import ImportResultResponse, ResetRequest, ResetResultResponse
from bidtracker.services import bid_service, branding_service, user_service
from bidtracker.services.export_service import (
    AUDIT_EXPORT_FILENAME,
    BIDS_EXPORT_FILENAME,
    export_audit_csv,
    export_bids_csv,
)
from bidtracker.services.import_service import import_bids_csv

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


def _csv_response(body: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/bids/import", response_model=ImportResultResponse)
async def import_bids(file: UploadFile = File(...), db: Session = Depends(get_db)):
    """Insert the valid rows of an uploaded CSV; invalid rows are skipped and counted."""
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Please upload a CSV file.")
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded.") from e
    try:
        result = import_bids_csv(db, text)
    except BidValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    logger.info("import: file=%s inserted=%s skipped=%s", file.filename, result.inserted, result.skipped)
    return ImportResultResponse(inserted=result.inserted, skipped=result.skipped)


@router.get("/bids/export")
def export_bids(db: Session = Depends(get_db)):
    return _csv_response(export_bids_csv(db), BIDS_EXPORT_FILENAME)


@router.get("/bids/export-audit")
def export_audit(db: Session = Depends(get_db)):
    return _csv_response(export_audit_csv(db), AUDIT_EXPORT_FILENAME)


@router.post("/reset", response_model=ResetResultResponse)
def reset_all_data(payload: ResetRequest, db: Session = Depends(get_db)):
    """Delete all bids and audit history. Requires the confirmation phrase."""
    try:
        deleted, audit_deleted = bid_service.reset_all_data(db, payload.confirm)
    except BidValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ResetResultResponse(deleted=deleted, audit_deleted=audit_deleted)


@router.get("/users", response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db)):
    return user_service.list_recent_users(db)


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    try:
        return user_service.create_user(
            db,
            first_name=payload.first_name,
            surname=payload.surname,
            email=payload.email,
            role=payload.role,
            password=payload.password,
        )
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(user_id: str, payload: UserPatch, db: Session = Depends(get_db)):
    try:
        return user_service.update_user(
            db, user_id, first_name=payload.first_name, surname=payload.surname, role=payload.role
        )
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found") from None
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/branding", response_model=BrandingResponse)
def get_branding(db: Session = Depends(get_db)):
    branding = branding_service.get_branding(db)
    if branding is None:
        return BrandingResponse()
    return branding


@router.put("/branding", response_model=BrandingResponse)
def update_branding(payload: BrandingUpdate, db: Session = Depends(get_db)):
    try:
        return branding_service.upsert_branding(
            db,
            company_name=payload.company_name,
            company_website=payload.company_website,
            support_email=payload.support_email,
            logo_path=payload.logo_path,
        )
    except BidValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
