from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from bidtracker.models.base import Base

BRANDING_ID = 1


class AppBranding(Base):
    """Singleton row (id=1) with the company details shown in the app chrome."""
    __tablename__ = "app_branding"

    id = Column(Integer, primary_key=True, default=BRANDING_ID)
    company_name = Column(String(255), nullable=True)
    company_website = Column(String(512), nullable=True)
    support_email = Column(String(255), nullable=True)
    logo_path = Column(String(512), nullable=True)  # set by the upload handler
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
