from fastapi import APIRouter, Depends, HTTPException, Request

from sweetswirls.client.forms import validate_batch, validate_production_request, validate_waste
from sweetswirls.models.location import LocationType
from sweetswirls.models.production import ProductionPriority, ProductionRequestStatus, WasteReason
from sweetswirls.permissions import Capability
from sweetswirls.web.common import Page, form_values, get_page

router = APIRouter(prefix="/production", tags=["Pages"])

REQUEST_ACTIONS = {
    "start": ("start_production_request", "Production started"),
    "complete": ("complete_production_request", "Production request completed"),
    "archive": ("archive_production_request", "Production request archived"),
}
BATCH_ACTIONS = {
    "complete": ("complete_batch", "Batch marked as completed"),
    "runout": ("run_out_batch", "Batch marked as run out"),
}


async def _choices(page: Page) -> dict:
    items, _ = await page.attempt(page.api.get_inventory_items())
    locations, _ = await page.attempt(page.api.get_locations())
    locations = locations or []
    return {
        "items": items or [],
        "locations": locations,
        "storage_locations": [loc for loc in locations if loc.type in (LocationType.FREEZER, LocationType.STORAGE)],
    }


@router.get("")
async def production(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.VIEW_PRODUCTION)
    raw_status = request.query_params.get("status") or None
    try:
        status = ProductionRequestStatus(raw_status) if raw_status else None
    except ValueError:
        status = None
    requests, req_err = await page.attempt(page.api.get_production_requests(status))
    batches, batch_err = await page.attempt(page.api.get_production_batches())
    return page.render(
        "production.html",
        requests=requests or [],
        batches=batches or [],
        status_filter=status,
        statuses=list(ProductionRequestStatus),
        error="Failed to load production data" if (req_err or batch_err) else None,
    )


# Requests

async def _request_form(page: Page, values: dict, errors: dict | None = None, error: str | None = None, status_code: int = 200):
    return page.render(
        "request_form.html",
        status_code=status_code,
        values=values,
        errors=errors or {},
        error=error,
        priorities=list(ProductionPriority),
        **(await _choices(page)),
    )


@router.get("/requests/new")
async def new_request(page: Page = Depends(get_page)):
    page.require(Capability.CREATE_PRODUCTION_REQUESTS)
    return await _request_form(page, values={"priority": ProductionPriority.NORMAL.value})


@router.post("/requests")
async def create_request(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.CREATE_PRODUCTION_REQUESTS)
    values = await form_values(request)
    data, errors = validate_production_request(values)
    if errors:
        return await _request_form(page, values, errors=errors, status_code=400)
    _, err = await page.attempt(page.api.create_production_request(data))
    if err:
        return await _request_form(
            page, values, errors=getattr(err, "field_errors", {}),
            error=f"Failed to create production request: {err.message}", status_code=400,
        )
    return page.redirect("/production", toast="Production request created successfully")


@router.post("/requests/{request_id}/{action}")
async def request_action(request_id: str, action: str, page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_PRODUCTION)
    if action not in REQUEST_ACTIONS:
        raise HTTPException(404, "Unknown action")
    method, message = REQUEST_ACTIONS[action]
    _, err = await page.attempt(getattr(page.api, method)(request_id))
    if err:
        return page.redirect("/production", toast=f"Failed to update request: {err.message}")
    return page.redirect("/production", toast=message)


# Batches

async def _batch_form(page: Page, values: dict, errors: dict | None = None, error: str | None = None, status_code: int = 200):
    return page.render(
        "batch_form.html",
        status_code=status_code,
        values=values,
        errors=errors or {},
        error=error,
        **(await _choices(page)),
    )


@router.get("/batches/new")
async def new_batch(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.RECORD_BATCHES)
    values = {key: request.query_params[key] for key in ("productItemId", "unit") if key in request.query_params}
    return await _batch_form(page, values=values)


@router.post("/batches")
async def create_batch(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.RECORD_BATCHES)
    values = await form_values(request)
    data, errors = validate_batch(values)
    if errors:
        return await _batch_form(page, values, errors=errors, status_code=400)
    batch, err = await page.attempt(page.api.create_production_batch(data))
    if err:
        return await _batch_form(
            page, values, errors=getattr(err, "field_errors", {}),
            error=f"Failed to record batch: {err.message}", status_code=400,
        )
    return page.redirect("/production", toast=f"Batch {batch.lot_code} recorded successfully")


@router.post("/batches/{batch_id}/{action}")
async def batch_action(batch_id: str, action: str, page: Page = Depends(get_page)):
    page.require(Capability.RECORD_BATCHES)
    if action not in BATCH_ACTIONS:
        raise HTTPException(404, "Unknown action")
    method, message = BATCH_ACTIONS[action]
    _, err = await page.attempt(getattr(page.api, method)(batch_id))
    if err:
        return page.redirect("/production", toast=f"Failed to update batch: {err.message}")
    return page.redirect("/production", toast=message)


# Waste

async def _waste_page(page: Page, values: dict | None = None, errors: dict | None = None, form_error: str | None = None, status_code: int = 200):
    events, err = await page.attempt(page.api.get_waste_events())
    batches, _ = await page.attempt(page.api.get_production_batches())
    return page.render(
        "waste.html",
        status_code=status_code,
        events=events or [],
        batches=batches or [],
        reasons=list(WasteReason),
        values=values or {"source": "item"},
        errors=errors or {},
        form_error=form_error,
        error="Failed to load waste events" if err else None,
        **(await _choices(page)),
    )


@router.get("/waste")
async def waste(page: Page = Depends(get_page)):
    page.require(Capability.VIEW_PRODUCTION)
    return await _waste_page(page)


@router.post("/waste")
async def record_waste(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.RECORD_WASTE)
    values = await form_values(request)
    data, errors = validate_waste(values)
    if errors:
        return await _waste_page(page, values, errors=errors, status_code=400)
    _, err = await page.attempt(page.api.record_waste(data))
    if err:
        return await _waste_page(
            page, values, errors=getattr(err, "field_errors", {}),
            form_error=f"Failed to record waste: {err.message}", status_code=400,
        )
    return page.redirect("/production/waste", toast="Waste recorded successfully")
