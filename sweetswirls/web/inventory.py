from fastapi import APIRouter, Depends, Request

from sweetswirls.client.catalog import search_items
from sweetswirls.client.forms import validate_item, validate_item_update, validate_session_line
from sweetswirls.models.inventory import InventoryCategory
from sweetswirls.permissions import Capability
from sweetswirls.schemas.inventory import (
    CreateSessionRequest,
    UpdateSessionLineRequest,
)
from sweetswirls.web.common import Page, form_values, get_page

router = APIRouter(prefix="/inventory", tags=["Pages"])


def _item_values(item) -> dict:
    return {
        "name": item.name,
        "category": item.category.value,
        "unit": item.unit,
        "parStockLevel": f"{item.par_stock_level:g}",
        "defaultLocationId": item.default_location_id or "",
        "sku": item.sku or "",
        "notes": item.notes or "",
    }


async def _item_form(page: Page, values: dict, errors: dict | None = None, error: str | None = None, item=None, status_code: int = 200):
    locations, _ = await page.attempt(page.api.get_locations())
    return page.render(
        "item_form.html",
        status_code=status_code,
        item=item,
        values=values,
        errors=errors or {},
        error=error,
        categories=list(InventoryCategory),
        locations=locations or [],
    )


# Items

@router.get("")
async def inventory(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.VIEW_INVENTORY)
    term = request.query_params.get("q", "")
    items, err = await page.attempt(page.api.get_inventory_items())
    if err:
        return page.render("inventory.html", items=[], search=term, error="Failed to load inventory items")
    return page.render("inventory.html", items=search_items(items, term), total=len(items), search=term, error=None)


@router.get("/items/new")
async def new_item(page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_INVENTORY)
    return await _item_form(page, values={"category": InventoryCategory.BASE.value})


@router.post("/items")
async def create_item(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_INVENTORY)
    values = await form_values(request)
    data, errors = validate_item(values)
    if errors:
        return await _item_form(page, values, errors=errors, status_code=400)
    _, err = await page.attempt(page.api.create_inventory_item(data))
    if err:
        return await _item_form(
            page, values, errors=getattr(err, "field_errors", {}), error=f"Failed to create item: {err.message}", status_code=400
        )
    return page.redirect("/inventory", toast="Item created successfully")


@router.get("/items/{item_id}/edit")
async def edit_item(item_id: str, page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_INVENTORY)
    item, err = await page.attempt(page.api.get_inventory_item(item_id))
    if err:
        return page.render("error.html", status_code=err.status or 502, error="Failed to load item")
    return await _item_form(page, _item_values(item), item=item)


@router.post("/items/{item_id}")
async def update_item(item_id: str, request: Request, page: Page = Depends(get_page)):
    page.require(Capability.MANAGE_INVENTORY)
    values = await form_values(request)
    data, errors = validate_item_update(values)
    item = {"id": item_id}
    if errors:
        return await _item_form(page, values, errors=errors, item=item, status_code=400)
    _, err = await page.attempt(page.api.update_inventory_item(item_id, data))
    if err:
        return await _item_form(
            page, values, errors=getattr(err, "field_errors", {}), error=f"Failed to update item: {err.message}",
            item=item, status_code=400,
        )
    return page.redirect("/inventory", toast="Item updated successfully")


@router.post("/items/{item_id}/delete")
async def delete_item(item_id: str, page: Page = Depends(get_page)):
    page.require(Capability.DELETE_INVENTORY)
    _, err = await page.attempt(page.api.delete_inventory_item(item_id))
    if err:
        return page.redirect("/inventory", toast=f"Failed to delete item: {err.message}")
    return page.redirect("/inventory", toast="Item deleted successfully")


# Counting sessions

@router.get("/sessions")
async def sessions(page: Page = Depends(get_page)):
    page.require(Capability.VIEW_INVENTORY)
    sessions, err = await page.attempt(page.api.get_inventory_sessions())
    locations, _ = await page.attempt(page.api.get_locations())
    location_names = {loc.id: loc.name for loc in locations or []}
    return page.render(
        "sessions.html",
        sessions=sessions or [],
        locations=locations or [],
        location_names=location_names,
        error="Failed to load inventory sessions" if err else None,
    )


@router.post("/sessions")
async def start_session(request: Request, page: Page = Depends(get_page)):
    page.require(Capability.TAKE_INVENTORY)
    values = await form_values(request)
    location_id = (values.get("locationId") or "").strip()
    if not location_id:
        return page.redirect("/inventory/sessions", toast="Location is required")
    session, err = await page.attempt(page.api.create_inventory_session(CreateSessionRequest(location_id=location_id)))
    if err:
        return page.redirect("/inventory/sessions", toast=f"Failed to start session: {err.message}")
    return page.redirect(f"/inventory/sessions/{session.id}", toast="Inventory session started")


async def _session_page(
    page: Page,
    session_id: str,
    *,
    mode: str | None = None,
    line_id: str | None = None,
    values: dict | None = None,
    errors: dict | None = None,
    error: str | None = None,
    status_code: int = 200,
):
    session, err = await page.attempt(page.api.get_inventory_session(session_id))
    if err:
        return page.render("error.html", status_code=err.status or 502, error="Failed to load inventory session")
    items, _ = await page.attempt(page.api.get_inventory_items())
    locations, _ = await page.attempt(page.api.get_locations())
    location_names = {loc.id: loc.name for loc in locations or []}
    editable = not session.is_closed and page.session.can(Capability.TAKE_INVENTORY)
    editing = None
    if editable and mode == "edit":
        editing = next((line for line in session.lines if line.id == line_id), None)
        if editing and values is None:
            values = {"itemId": editing.item_id, "count": f"{editing.count:g}", "unit": editing.unit, "note": editing.note or ""}
    return page.render(
        "session_detail.html",
        status_code=status_code,
        inv_session=session,
        items=items or [],
        location_name=location_names.get(session.location_id, ""),
        editable=editable,
        mode=mode if editable else None,
        editing=editing,
        values=values or {},
        errors=errors or {},
        error=error,
    )


@router.get("/sessions/{session_id}")
async def session_detail(session_id: str, request: Request, page: Page = Depends(get_page)):
    page.require(Capability.VIEW_INVENTORY)
    params = request.query_params
    mode = None
    if params.get("add"):
        mode = "add"
    elif params.get("edit_line"):
        mode = "edit"
    elif params.get("confirm"):
        mode = "confirm"
    return await _session_page(page, session_id, mode=mode, line_id=params.get("edit_line"))


@router.post("/sessions/{session_id}/lines")
async def add_line(session_id: str, request: Request, page: Page = Depends(get_page)):
    page.require(Capability.TAKE_INVENTORY)
    values = await form_values(request)
    data, errors = validate_session_line(values)
    if errors:
        return await _session_page(page, session_id, mode="add", values=values, errors=errors, status_code=400)
    _, err = await page.attempt(page.api.add_session_line(session_id, data))
    if err:
        return await _session_page(
            page, session_id, mode="add", values=values, errors=getattr(err, "field_errors", {}),
            error=f"Failed to add line: {err.message}", status_code=400,
        )
    return page.redirect(f"/inventory/sessions/{session_id}", toast="Line added")


@router.post("/sessions/{session_id}/lines/{line_id}")
async def update_line(session_id: str, line_id: str, request: Request, page: Page = Depends(get_page)):
    page.require(Capability.TAKE_INVENTORY)
    values = await form_values(request)
    data, errors = validate_session_line(values)
    if errors:
        return await _session_page(
            page, session_id, mode="edit", line_id=line_id, values=values, errors=errors, status_code=400
        )
    update = UpdateSessionLineRequest(count=data.count, unit=data.unit, note=data.note)
    _, err = await page.attempt(page.api.update_session_line(session_id, line_id, update))
    if err:
        return await _session_page(
            page, session_id, mode="edit", line_id=line_id, values=values,
            errors=getattr(err, "field_errors", {}), error=f"Failed to update line: {err.message}", status_code=400,
        )
    return page.redirect(f"/inventory/sessions/{session_id}", toast="Line updated")


@router.post("/sessions/{session_id}/close")
async def close_session(session_id: str, page: Page = Depends(get_page)):
    page.require(Capability.TAKE_INVENTORY)
    _, err = await page.attempt(page.api.close_inventory_session(session_id))
    if err:
        return await _session_page(page, session_id, error=f"Failed to submit session: {err.message}", status_code=400)
    return page.redirect(f"/inventory/sessions/{session_id}", toast="Session submitted successfully")
