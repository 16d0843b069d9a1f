from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from sweetswirls.api.deps import client_ip, get_current_user, require
from sweetswirls.database import get_db
from sweetswirls.models.user import User, UserRole
from sweetswirls.permissions import Capability
from sweetswirls.schemas.auth import (
    ActivityLogOut,
    CreateUserRequest,
    LoginRequest,
    LoginResponse,
    UpdateRoleRequest,
    UserOut,
)
from sweetswirls.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])

admin_only = require(Capability.MANAGE_USERS)


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, request: Request, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, data.email, data.password)
    if not user:
        raise HTTPException(401, "Invalid email or password")
    token = auth_service.create_access_token(user)
    auth_service.log_activity(db, user.id, user.email, "login", ip=client_ip(request))
    return LoginResponse(user_id=user.id, name=user.name, email=user.email, role=user.role, token=token)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.get("/users", response_model=list[UserOut])
def list_users(role: UserRole | None = None, user: User = Depends(admin_only), db: Session = Depends(get_db)):
    return auth_service.list_users(db, role=role)


@router.post("/users", response_model=UserOut, status_code=201)
def create_user(data: CreateUserRequest, user: User = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        u = auth_service.create_user(db, data.name, data.email, data.password, data.role)
    except ValueError as e:
        raise HTTPException(400, str(e))
    auth_service.log_activity(db, user.id, user.email, "create_user", detail=f"Created user: {u.email} ({u.role.value})")
    return u


@router.patch("/users/{user_id}/role", response_model=UserOut)
def update_user_role(
    user_id: str, data: UpdateRoleRequest, user: User = Depends(admin_only), db: Session = Depends(get_db)
):
    target = auth_service.update_role(db, user_id, data.role)
    if not target:
        raise HTTPException(404, "User not found")
    auth_service.log_activity(db, user.id, user.email, "update_role", detail=f"{target.email}: role={target.role.value}")
    return target


@router.patch("/users/{user_id}/deactivate", response_model=UserOut)
def deactivate_user(user_id: str, user: User = Depends(admin_only), db: Session = Depends(get_db)):
    try:
        target = auth_service.set_active(db, user_id, False, acting_user_id=user.id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not target:
        raise HTTPException(404, "User not found")
    auth_service.log_activity(db, user.id, user.email, "deactivate_user", detail=target.email)
    return target


@router.patch("/users/{user_id}/activate", response_model=UserOut)
def activate_user(user_id: str, user: User = Depends(admin_only), db: Session = Depends(get_db)):
    target = auth_service.set_active(db, user_id, True)
    if not target:
        raise HTTPException(404, "User not found")
    auth_service.log_activity(db, user.id, user.email, "activate_user", detail=target.email)
    return target


@router.get("/activity", response_model=list[ActivityLogOut])
def activity_logs(
    limit: int = 100, user_id: str | None = None, user: User = Depends(admin_only), db: Session = Depends(get_db)
):
    return auth_service.get_activity_logs(db, limit=limit, user_id=user_id)
