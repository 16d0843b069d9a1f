"""Form validation run before any API call.

Each ``validate_*`` function takes the raw submitted values (strings, as they
arrive from an HTML form) and returns ``(request, errors)``. When ``errors`` is
non-empty the request is ``None`` and nothing should be sent. Error keys are the
camelCase wire names so server-side field errors can be shown in the same slots.
"""

from collections.abc import Mapping
from datetime import datetime

from pydantic import ValidationError

from sweetswirls.models.inventory import InventoryCategory
from sweetswirls.models.production import ProductionPriority, WasteReason
from sweetswirls.schemas.auth import LoginRequest
from sweetswirls.schemas.inventory import AddSessionLineRequest, InventoryItemRequest, InventoryItemUpdate
from sweetswirls.schemas.production import (
    CreateBatchRequest,
    CreateProductionRequestRequest,
    RecordWasteRequest,
)

FormErrors = dict[str, str]


def _text(form: Mapping[str, str], key: str) -> str:
    return (form.get(key) or "").strip()


def _optional(form: Mapping[str, str], key: str) -> str | None:
    return _text(form, key) or None


def _number(form: Mapping[str, str], key: str) -> float | None:
    raw = _text(form, key)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _enum(enum_cls, raw: str):
    try:
        return enum_cls(raw)
    except ValueError:
        return None


def _build(model_cls, errors: FormErrors, **values):
    if errors:
        return None, errors
    try:
        return model_cls(**values), errors
    except ValidationError as e:
        for err in e.errors():
            field = str(err["loc"][-1]) if err["loc"] else "form"
            errors.setdefault(field, err["msg"])
        return None, errors


def validate_login(form: Mapping[str, str]) -> tuple[LoginRequest | None, FormErrors]:
    errors: FormErrors = {}
    email = _text(form, "email")
    password = form.get("password") or ""
    if not email:
        errors["email"] = "Email is required"
    if not password:
        errors["password"] = "Password is required"
    return _build(LoginRequest, errors, email=email, password=password)


def validate_item(form: Mapping[str, str]) -> tuple[InventoryItemRequest | None, FormErrors]:
    errors: FormErrors = {}
    name = _text(form, "name")
    unit = _text(form, "unit")
    par = _number(form, "parStockLevel")
    category = _enum(InventoryCategory, _text(form, "category"))
    if not name:
        errors["name"] = "Name is required"
    if category is None:
        errors["category"] = "Category is required"
    if not unit:
        errors["unit"] = "Unit is required"
    if par is None or par <= 0:
        errors["parStockLevel"] = "Par level must be greater than 0"
    return _build(
        InventoryItemRequest,
        errors,
        name=name,
        category=category,
        unit=unit,
        par_stock_level=par,
        default_location_id=_optional(form, "defaultLocationId"),
        sku=_optional(form, "sku"),
        notes=_optional(form, "notes"),
    )


def validate_item_update(form: Mapping[str, str]) -> tuple[InventoryItemUpdate | None, FormErrors]:
    request, errors = validate_item(form)
    if errors:
        return None, errors
    return InventoryItemUpdate(**request.model_dump()), errors


def validate_session_line(form: Mapping[str, str]) -> tuple[AddSessionLineRequest | None, FormErrors]:
    errors: FormErrors = {}
    item_id = _text(form, "itemId")
    unit = _text(form, "unit")
    count = _number(form, "count")
    if not item_id:
        errors["itemId"] = "Item is required"
    if count is None:
        errors["count"] = "Count is required"
    elif count < 0:
        errors["count"] = "Count cannot be negative"
    if not unit:
        errors["unit"] = "Unit is required"
    return _build(
        AddSessionLineRequest,
        errors,
        item_id=item_id,
        count=count,
        unit=unit,
        note=_optional(form, "note"),
        photo_url=_optional(form, "photoUrl"),
    )


def _parse_datetime(raw: str) -> datetime | None:
    try:
        value = datetime.fromisoformat(raw)
    except ValueError:
        return None
    # datetime-local inputs carry no offset; they are in the shop's local time
    return value if value.tzinfo else value.astimezone()


def validate_production_request(
    form: Mapping[str, str], now: datetime | None = None
) -> tuple[CreateProductionRequestRequest | None, FormErrors]:
    now = now or datetime.now().astimezone()
    errors: FormErrors = {}
    product_item_id = _text(form, "productItemId")
    location_id = _text(form, "locationId")
    reason = _text(form, "reason")
    raw_needed_by = _text(form, "neededBy")
    needed_by = _parse_datetime(raw_needed_by) if raw_needed_by else None
    target_quantity = _number(form, "targetQuantity")
    priority = _enum(ProductionPriority, _text(form, "priority") or ProductionPriority.NORMAL.value)

    if not product_item_id:
        errors["productItemId"] = "Product item is required"
    if not location_id:
        errors["locationId"] = "Location is required"
    if not raw_needed_by or needed_by is None:
        errors["neededBy"] = "Needed by date is required"
    elif needed_by <= now:
        errors["neededBy"] = "Needed by date must be in the future"
    if target_quantity is not None and target_quantity < 0:
        errors["targetQuantity"] = "Target quantity cannot be negative"
    if priority is None:
        errors["priority"] = "Priority is invalid"
    if not reason:
        errors["reason"] = "Reason is required"
    return _build(
        CreateProductionRequestRequest,
        errors,
        product_item_id=product_item_id,
        location_id=location_id,
        needed_by=needed_by,
        target_quantity=target_quantity,
        unit=_optional(form, "unit"),
        priority=priority,
        reason=reason,
    )


def validate_batch(form: Mapping[str, str]) -> tuple[CreateBatchRequest | None, FormErrors]:
    errors: FormErrors = {}
    product_item_id = _text(form, "productItemId")
    storage_location_id = _text(form, "storageLocationId")
    unit = _text(form, "unit")
    quantity = _number(form, "quantityMade")
    if not product_item_id:
        errors["productItemId"] = "Product item is required"
    if not storage_location_id:
        errors["storageLocationId"] = "Storage location is required"
    if quantity is None or quantity <= 0:
        errors["quantityMade"] = "Quantity must be greater than 0"
    if not unit:
        errors["unit"] = "Unit is required"
    return _build(
        CreateBatchRequest,
        errors,
        product_item_id=product_item_id,
        quantity_made=quantity,
        unit=unit,
        storage_location_id=storage_location_id,
        lot_code=_optional(form, "lotCode"),
        notes=_optional(form, "notes"),
    )


def validate_waste(form: Mapping[str, str]) -> tuple[RecordWasteRequest | None, FormErrors]:
    errors: FormErrors = {}
    source = _text(form, "source") or "item"
    item_id = _optional(form, "itemId")
    batch_id = _optional(form, "batchId")
    unit = _text(form, "unit")
    quantity = _number(form, "quantity")
    reason = _enum(WasteReason, _text(form, "reason"))
    if source == "batch" and not batch_id:
        errors["batchId"] = "Batch is required"
    elif source != "batch" and not item_id:
        errors["itemId"] = "Item is required"
    if quantity is None or quantity <= 0:
        errors["quantity"] = "Quantity must be greater than 0"
    if not unit:
        errors["unit"] = "Unit is required"
    if reason is None:
        errors["reason"] = "Reason is required"
    return _build(
        RecordWasteRequest,
        errors,
        item_id=item_id if source != "batch" else None,
        batch_id=batch_id if source == "batch" else None,
        quantity=quantity,
        unit=unit,
        reason=reason,
        notes=_optional(form, "notes"),
    )
