from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from sweetswirls.database import get_db
from sweetswirls.models.user import User
from sweetswirls.permissions import Capability, can
from sweetswirls.services import auth_service


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Dependency: extract user from the Authorization bearer token."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(401, "Not authenticated")
    payload = auth_service.decode_token(token.strip())
    if not payload:
        raise HTTPException(401, "Invalid or expired token")
    user = auth_service.get_user_by_id(db, payload.get("sub", ""))
    if not user or not user.is_active:
        raise HTTPException(401, "User not found or disabled")
    return user


def require(capability: Capability):
    """Dependency factory: the current user must hold ``capability``."""

    def checker(user: User = Depends(get_current_user)) -> User:
        if not can(user.role, capability):
            raise HTTPException(403, "Insufficient permissions")
        return user

    return checker


def client_ip(request: Request) -> str:
    return request.client.host if request.client else ""
