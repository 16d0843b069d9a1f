import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from sweetswirls.client.errors import ApiError
from sweetswirls.client.forms import validate_login
from sweetswirls.client.session import AuthSession
from sweetswirls.web.common import (
    CookieStorage,
    Page,
    form_values,
    get_page,
    new_api_client,
    templates,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])


def _login_page(request: Request, errors: dict | None = None, error: str | None = None, values: dict | None = None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "login.html",
        {"errors": errors or {}, "error": error, "values": values or {}, "session": None, "user": None},
        status_code=status_code,
    )


@router.get("/login")
def login_page(request: Request):
    session = AuthSession(CookieStorage(request.cookies)).hydrate()
    if session.is_authenticated:
        return RedirectResponse("/dashboard", status_code=302)
    return _login_page(request)


@router.post("/login")
async def login(request: Request):
    values = await form_values(request)
    credentials, errors = validate_login(values)
    if errors:
        return _login_page(request, errors=errors, values=values, status_code=400)

    storage = CookieStorage(request.cookies)
    session = AuthSession(storage)
    try:
        async with new_api_client(request, session) as api:
            await api.login(credentials)
    except ApiError as e:
        logger.info("Sign-in failed for %s: %s", credentials.email, e)
        message = "Invalid email or password" if e.status == 401 else "Unable to sign in right now"
        return _login_page(request, error=message, values={"email": values.get("email", "")}, status_code=400)

    response = RedirectResponse("/dashboard", status_code=303)
    storage.apply(response)
    return response


@router.get("/logout")
async def logout(page: Page = Depends(get_page)):
    await page.api.logout()
    return page.redirect("/login")


@router.get("/")
def root(request: Request):
    session = AuthSession(CookieStorage(request.cookies)).hydrate()
    return RedirectResponse("/dashboard" if session.is_authenticated else "/login", status_code=302)
