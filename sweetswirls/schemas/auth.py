from datetime import datetime

from pydantic import Field

from sweetswirls.models.user import UserRole
from sweetswirls.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str
    password: str


class LoginResponse(CamelModel):
    user_id: str
    name: str
    email: str
    role: UserRole
    token: str


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""


class CreateUserRequest(CamelModel):
    model_config = {"str_strip_whitespace": True}

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
    role: UserRole = UserRole.TEAM_MEMBER


class UpdateRoleRequest(CamelModel):
    role: UserRole


class ActivityLogOut(CamelModel):
    id: str
    user_id: str
    email: str
    action: str
    detail: str
    ip_address: str
    created_at: datetime | None = None
