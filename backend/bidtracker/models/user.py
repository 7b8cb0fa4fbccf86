from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from bidtracker.models.base import Base
from bidtracker.models.bid import new_id
from bidtracker.models.enums import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    first_name = Column(String(255), nullable=False)
    surname = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)  # stored lower-cased
    role = Column(String(20), default=UserRole.engineer.value, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
