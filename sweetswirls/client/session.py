import logging
from collections.abc import Iterable

from pydantic import ValidationError

from sweetswirls.client.storage import TOKEN_KEY, USER_KEY
from sweetswirls.models.user import UserRole
from sweetswirls.permissions import Capability, can
from sweetswirls.schemas.auth import UserOut

logger = logging.getLogger(__name__)


class AuthSession:
    """Current user and token, mirrored into a key/value storage.

    The role checks are plain lookups over the cached user; they never call
    the server.
    """

    def __init__(self, storage):
        self.storage = storage
        self.user: UserOut | None = None
        self.token: str | None = None

    def hydrate(self) -> "AuthSession":
        token = self.storage.get(TOKEN_KEY)
        raw_user = self.storage.get(USER_KEY)
        self.user = None
        self.token = None
        if token and raw_user:
            try:
                self.user = UserOut.model_validate_json(raw_user)
                self.token = token
            except ValidationError:
                logger.warning("Discarding unreadable stored user profile")
                self.clear()
        return self

    def establish(self, token: str, user: UserOut) -> None:
        self.storage.set(TOKEN_KEY, token)
        self.storage.set(USER_KEY, user.model_dump_json(by_alias=True))
        self.token = token
        self.user = user

    def clear(self) -> None:
        self.storage.remove(TOKEN_KEY)
        self.storage.remove(USER_KEY)
        self.token = None
        self.user = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None

    @property
    def role(self) -> UserRole | None:
        return self.user.role if self.user else None

    def has_role(self, role: UserRole) -> bool:
        return self.user is not None and self.user.role == role

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        return self.user is not None and self.user.role in set(roles)

    def can(self, capability: Capability) -> bool:
        return can(self.role, capability)
