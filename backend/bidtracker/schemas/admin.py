from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UserCreate(BaseModel):
    first_name: str = ""
    surname: str = ""
    email: str = ""
    role: str = ""
    password: str = ""


class UserPatch(BaseModel):
    first_name: Optional[str] = None
    surname: Optional[str] = None
    role: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    first_name: str
    surname: str
    email: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BrandingUpdate(BaseModel):
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    support_email: Optional[str] = None
    logo_path: Optional[str] = None


class BrandingResponse(BaseModel):
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    support_email: Optional[str] = None
    logo_path: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
