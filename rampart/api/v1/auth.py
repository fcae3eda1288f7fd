"""JWT login, the current user's upload tier and auth dependencies (get_current_user, require_admin)."""

import logging
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rampart.core.config import settings
from rampart.core.database import get_db
from rampart.core.security import (
    ROLE_ADMIN,
    ROLES,
    can_upload,
    create_access_token,
    decode_access_token,
    verify_password,
)
from rampart.models.user import User
from rampart.schemas.auth import (
    CurrentUser,
    LoginRequest,
    TokenResponse,
    UploadPermissions,
    UserListItem,
    UsersListResponse,
)
from rampart.services.format_router import PROFILES

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)

# Returned by get_current_user when AUTH_ENABLED is False.
LOCAL_ADMIN = CurrentUser(id=0, username="local-admin", role=ROLE_ADMIN)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Send it on uploads as: Authorization: Bearer <access_token>
    """
    user = db.query(User).filter(User.username == body.username).first()
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for %r", body.username)
        raise _unauthorized("Invalid username or password.")
    logger.info("User %s logged in (role=%s)", user.username, user.role)
    return TokenResponse(access_token=create_access_token(sub=user.id, role=user.role))


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """
    Dependency: the user behind the Bearer JWT. With AUTH_ENABLED off every
    request acts as a local admin. The role is re-read from the database so a
    demoted user loses upload rights before the token expires.
    """
    if not settings.AUTH_ENABLED:
        return LOCAL_ADMIN
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _unauthorized("User not found")
    if user.role not in ROLES:
        logger.warning("User %s has unknown role %r", user.username, user.role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account role not recognized")
    return CurrentUser(id=user.id, username=user.username, role=user.role)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.get("/me", response_model=UploadPermissions, response_model_by_alias=True)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UploadPermissions:
    """Current user and the format profiles their role may upload."""
    profiles = [p.name for p in PROFILES.values() if can_upload(current_user.role, p.admin_only)]
    return UploadPermissions(
        username=current_user.username,
        role=current_user.role,
        can_upload=bool(profiles),
        profiles=profiles,
    )


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = db.query(User).order_by(User.id).all()
    return UsersListResponse(users=[UserListItem.model_validate(u) for u in users])
