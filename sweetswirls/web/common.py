import logging
import pathlib
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlencode

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from sweetswirls.client.api import ApiClient
from sweetswirls.client.errors import ApiError, UnauthorizedError
from sweetswirls.client.session import AuthSession
from sweetswirls.client.storage import TOKEN_KEY, USER_KEY
from sweetswirls.config import settings
from sweetswirls.permissions import Capability

TEMPLATES_DIR = pathlib.Path(__file__).parent.parent / "templates"
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

COOKIE_MAX_AGE = 3600 * settings.ACCESS_TOKEN_EXPIRE_HOURS


def _unit_label(quantity, unit: str | None) -> str:
    if quantity is None:
        return ""
    value = int(quantity) if float(quantity).is_integer() else quantity
    return f"{value} {unit}" if unit else str(value)


def _label(value) -> str:
    raw = getattr(value, "value", value) or ""
    return str(raw).replace("_", " ").title()


def _when(value: datetime | None, fmt: str = "%b %d, %Y %H:%M") -> str:
    """Format a timestamp in the shop's local time; naive values are UTC."""
    if not value:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone().strftime(fmt)


templates.env.filters["qty"] = lambda quantity, unit=None: _unit_label(quantity, unit)
templates.env.filters["label"] = _label
templates.env.filters["when"] = _when
templates.env.globals["Capability"] = Capability
templates.env.globals["app_name"] = settings.APP_NAME


class CookieStorage:
    """Session storage over the request's cookies; writes are replayed onto a response."""

    def __init__(self, cookies: Mapping[str, str]):
        self._values = dict(cookies)
        self._changes: dict[str, str | None] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._changes[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)
        self._changes[key] = None

    def apply(self, response) -> None:
        for key, value in self._changes.items():
            if value is None:
                response.delete_cookie(key)
            else:
                response.set_cookie(key, value, httponly=True, samesite="lax", max_age=COOKIE_MAX_AGE)


def clear_auth_cookies(response) -> None:
    response.delete_cookie(TOKEN_KEY)
    response.delete_cookie(USER_KEY)


def new_api_client(request: Request, session: AuthSession) -> ApiClient:
    transport = getattr(request.app.state, "api_transport", None)
    return ApiClient(session, transport=transport)


@dataclass
class Page:
    request: Request
    session: AuthSession
    storage: CookieStorage
    api: ApiClient

    async def attempt(self, awaitable) -> tuple[Any, ApiError | None]:
        """Await an API call; return ``(result, None)`` or ``(None, error)``.

        A 401 is not returned: it propagates to the application-wide handler
        that sends the browser back to the login page.
        """
        try:
            return await awaitable, None
        except UnauthorizedError:
            raise
        except ApiError as e:
            logger.warning("%s %s: API call failed (%s)", self.request.method, self.request.url.path, e)
            return None, e

    def require(self, capability: Capability) -> None:
        if not self.session.can(capability):
            raise HTTPException(403, "You do not have permission to view this page")

    def render(self, template: str, status_code: int = 200, **context):
        context.setdefault("toast", self.request.query_params.get("toast"))
        context.setdefault("errors", {})
        context.setdefault("values", {})
        context["session"] = self.session
        context["user"] = self.session.user
        response = templates.TemplateResponse(self.request, template, context, status_code=status_code)
        self.storage.apply(response)
        return response

    def redirect(self, url: str, toast: str | None = None):
        if toast:
            sep = "&" if "?" in url else "?"
            url = f"{url}{sep}{urlencode({'toast': toast})}"
        response = RedirectResponse(url, status_code=303)
        self.storage.apply(response)
        return response


async def get_page(request: Request) -> AsyncIterator[Page]:
    """Dependency: an authenticated page context with a ready API client."""
    storage = CookieStorage(request.cookies)
    session = AuthSession(storage).hydrate()
    if not session.is_authenticated:
        raise UnauthorizedError("Please sign in")
    async with new_api_client(request, session) as api:
        # gate pages on the server's view of the user, not the cookie copy
        profile = await api.get_current_user()
        if profile != session.user:
            session.establish(session.token, profile)
        yield Page(request=request, session=session, storage=storage, api=api)


async def form_values(request: Request) -> dict[str, str]:
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}
