"""
Identity service: registration, login, token authentication and role checks.
The bearer token is the only session state; authenticate() never touches the database.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.security import create_access_token, decode_token, hash_password, verify_password
from database.models import Role, User
from services.errors import DuplicateEmail, Forbidden, InvalidCredentials, NotFound, Unauthorized

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def issue_token(user: User) -> str:
    return create_access_token(user.id, Role(user.role).value)


def user_dict(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": Role(user.role).value,
    }


def register(db: Session, name: str, email: str, password: str, role: Role = Role.STUDENT) -> Tuple[User, str]:
    """Create an account and return it with a fresh token."""
    email = _normalize_email(email)
    if db.query(User).filter(User.email == email).first():
        raise DuplicateEmail()

    user = User(name=name.strip(), email=email, hashed_password=hash_password(password), role=Role(role))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # concurrent registration with the same email
        db.rollback()
        raise DuplicateEmail()
    db.refresh(user)

    log.info(f"[REGISTER] user={user.id} role={user.role.value}")
    return user, issue_token(user)


def login(db: Session, email: str, password: str) -> Tuple[User, str]:
    user = db.query(User).filter(User.email == _normalize_email(email)).first()
    if not user or not verify_password(password, user.hashed_password):
        log.info("[LOGIN] rejected credentials")
        raise InvalidCredentials()
    return user, issue_token(user)


def authenticate(token: Optional[str]) -> Identity:
    """Resolve a bearer token to an Identity or raise Unauthorized."""
    if not token:
        raise Unauthorized("No token, authorization denied")

    payload = decode_token(token)
    if payload is None:
        raise Unauthorized("Token is not valid")

    try:
        user_id = int(payload.get("id"))
        role = Role(payload.get("role"))
    except (TypeError, ValueError):
        raise Unauthorized("Token is not valid")

    return Identity(user_id=user_id, role=role)


def authorize(identity: Identity, role: Role) -> Identity:
    if identity.role is not role:
        raise Forbidden(f"Access denied. {role.value} privileges required.")
    return identity


def current_user(db: Session, identity: Identity) -> User:
    user = db.query(User).filter(User.id == identity.user_id).first()
    if not user:
        raise NotFound("User not found")
    return user
