"""
Authentication router.
Handles registration, login and profile for both roles.
Token is sent by the client as a Bearer header; there is no server-side session.
"""

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from database.database import get_db
from database.models import Role
from database.schemas import LoginRequest, RegisterRequest, TokenResponse
from services import identity
from services.identity import Identity

router = APIRouter(prefix="/auth", tags=["auth"])

# auto_error=False so a missing header becomes our own 401 envelope
_bearer = HTTPBearer(auto_error=False)


# ─── Dependencies ──────────────────────────────────────────────────────────────

def get_current_identity(credentials: HTTPAuthorizationCredentials = Depends(_bearer)) -> Identity:
    token = credentials.credentials if credentials else None
    return identity.authenticate(token)


def require_admin(current: Identity = Depends(get_current_identity)) -> Identity:
    return identity.authorize(current, Role.ADMIN)


def require_student(current: Identity = Depends(get_current_identity)) -> Identity:
    return identity.authorize(current, Role.STUDENT)


# ─── Routes ────────────────────────────────────────────────────────────────────

@router.post("/register", response_model=TokenResponse, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return its token."""
    user, token = identity.register(db, request.name, request.email, request.password, request.role)
    return TokenResponse(token=token, user=identity.user_dict(user))


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user, token = identity.login(db, request.email, request.password)
    return TokenResponse(token=token, user=identity.user_dict(user))


@router.get("/me")
def me(current: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Resolve the bearer token to its user."""
    return identity.user_dict(identity.current_user(db, current))
