from sqlalchemy.orm import Session

from bidtracker.errors import BidValidationError
from bidtracker.models.branding import AppBranding, BRANDING_ID
from bidtracker.services.bid_values import is_valid_url


def get_branding(db: Session) -> AppBranding | None:
    return db.query(AppBranding).filter(AppBranding.id == BRANDING_ID).first()


def upsert_branding(
    db: Session,
    company_name: str | None,
    company_website: str | None,
    support_email: str | None,
    logo_path: str | None = None,
) -> AppBranding:
    """Create or replace the singleton branding row. Blank values are stored as None."""
    company_name = (company_name or "").strip() or None
    company_website = (company_website or "").strip() or None
    support_email = (support_email or "").strip() or None
    if company_website and not is_valid_url(company_website):
        raise BidValidationError("Company website must be a valid URL.")
    if support_email and "@" not in support_email:
        raise BidValidationError("Support email must include an @ symbol.")

    branding = get_branding(db)
    if branding is None:
        branding = AppBranding(id=BRANDING_ID)
        db.add(branding)
    branding.company_name = company_name
    branding.company_website = company_website
    branding.support_email = support_email
    if logo_path is not None:
        branding.logo_path = logo_path.strip() or None
    db.commit()
    db.refresh(branding)
    return branding
