import logging

from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from bidtracker.errors import UserNotFoundError, UserValidationError
from bidtracker.models.enums import UserRole, enum_values, parse_enum
from bidtracker.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 10


def hash_password(password: str) -> str:
    return generate_password_hash(password, method="pbkdf2:sha256")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # Unknown or malformed hash format.
        return False


def create_user(
    db: Session,
    first_name: str,
    surname: str,
    email: str,
    role: str,
    password: str,
) -> User:
    """Create a user after the same checks the admin screen applies."""
    first_name = (first_name or "").strip()
    surname = (surname or "").strip()
    email = (email or "").strip().lower()
    password = password or ""

    if not first_name or not surname or not email or not password:
        raise UserValidationError("All fields are required to create a user.")
    if "@" not in email:
        raise UserValidationError("Email address must include an @ symbol.")
    if parse_enum(UserRole, role) is None:
        raise UserValidationError(f"Role must be one of {', '.join(enum_values(UserRole))}.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise UserValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    if db.query(User).filter(User.email == email).first():
        raise UserValidationError("A user with that email already exists.")

    user = User(
        first_name=first_name,
        surname=surname,
        email=email,
        role=role,
        password_hash=hash_password(password),
    )
    db.add(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info("create_user: user_id=%s role=%s", user.id, user.role)
    return user


def list_recent_users(db: Session, limit: int = 20) -> list[User]:
    return db.query(User).order_by(User.created_at.desc()).limit(limit).all()


def update_user(
    db: Session,
    user_id: str,
    first_name: str | None = None,
    surname: str | None = None,
    role: str | None = None,
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFoundError(user_id)
    if first_name is not None:
        if not first_name.strip():
            raise UserValidationError("First name is required.")
        user.first_name = first_name.strip()
    if surname is not None:
        if not surname.strip():
            raise UserValidationError("Surname is required.")
        user.surname = surname.strip()
    if role is not None:
        if parse_enum(UserRole, role) is None:
            raise UserValidationError(f"Role must be one of {', '.join(enum_values(UserRole))}.")
        user.role = role
    db.commit()
    db.refresh(user)
    return user
