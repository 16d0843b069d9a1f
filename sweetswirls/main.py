import logging
import pathlib
import traceback
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from sweetswirls.api import auth, inventory, locations, production, sessions
from sweetswirls.client.errors import UnauthorizedError
from sweetswirls.client.storage import TOKEN_KEY
from sweetswirls.config import settings
from sweetswirls.database import SessionLocal, init_db
from sweetswirls.services.auth_service import decode_token, ensure_default_users
from sweetswirls.services.inventory_service import ensure_sample_items
from sweetswirls.services.location_service import ensure_default_locations
from sweetswirls.web import auth as auth_pages
from sweetswirls.web import dashboard as dashboard_pages
from sweetswirls.web import inventory as inventory_pages
from sweetswirls.web import production as production_pages
from sweetswirls.web import users as user_pages
from sweetswirls.web.common import clear_auth_cookies, templates

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = pathlib.Path(__file__).parent / "static"

# Pages that don't require auth
PUBLIC_PATHS = {"/login", "/health"}


def seed_demo_data() -> None:
    db = SessionLocal()
    try:
        ensure_default_locations(db)
        ensure_default_users(db)
        ensure_sample_items(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if settings.SEED_DEMO_DATA:
        seed_demo_data()
    yield


app = FastAPI(
    title="Sweet Swirls Operations API",
    description="Inventory counts, production requests, batches and waste tracking for the shop",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return JSON for unhandled exceptions so the client can parse the error."""
    logger.error("Unhandled error: %s\n%s", exc, traceback.format_exc())
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    """Any page whose API call came back 401 sends the browser to the login page."""
    response = RedirectResponse("/login", status_code=303)
    clear_auth_cookies(response)
    return response


@app.exception_handler(StarletteHTTPException)
async def page_http_exception_handler(request: Request, exc: StarletteHTTPException):
    if request.url.path.startswith("/api/"):
        return await http_exception_handler(request, exc)
    return templates.TemplateResponse(
        request,
        "error.html",
        {"error": exc.detail, "status_code": exc.status_code, "session": None, "user": None},
        status_code=exc.status_code,
    )


@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    """Redirect to /login for page requests if not authenticated."""
    path = request.url.path

    if path in PUBLIC_PATHS or path.startswith("/static/"):
        return await call_next(request)

    # For API requests, let the dependency handle auth (returns 401)
    if path.startswith("/api/"):
        return await call_next(request)

    token = request.cookies.get(TOKEN_KEY)
    if not token or not decode_token(token):
        response = RedirectResponse("/login", status_code=302)
        if token:
            clear_auth_cookies(response)
        return response

    return await call_next(request)


app.include_router(auth.router, prefix="/api")
app.include_router(locations.router, prefix="/api")
app.include_router(inventory.router, prefix="/api")
app.include_router(sessions.router, prefix="/api")
app.include_router(production.router, prefix="/api")

app.include_router(auth_pages.router)
app.include_router(dashboard_pages.router)
app.include_router(inventory_pages.router)
app.include_router(production_pages.router)
app.include_router(user_pages.router)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Pages reach the API in-process unless pointed at a separate deployment
app.state.api_transport = httpx.ASGITransport(app=app) if settings.USE_LOCAL_API else None


@app.get("/health")
def health():
    return {"status": "ok"}
