from datetime import datetime, timedelta, timezone

from sweetswirls.client.catalog import search_items
from sweetswirls.client.forms import (
    validate_batch,
    validate_item,
    validate_login,
    validate_production_request,
    validate_session_line,
    validate_waste,
)
from sweetswirls.models.inventory import InventoryCategory
from sweetswirls.models.production import WasteReason
from sweetswirls.schemas.inventory import InventoryItemOut

NOW = datetime(2024, 6, 14, 12, 0, tzinfo=timezone.utc)


def _item_form(**overrides):
    form = {"name": "Strawberry Base", "category": "BASE", "unit": "gallons", "parStockLevel": "8", "sku": "STRAWB-001"}
    form.update(overrides)
    return form


class TestLogin:
    def test_both_required(self):
        request, errors = validate_login({"email": " ", "password": ""})
        assert request is None
        assert errors == {"email": "Email is required", "password": "Password is required"}

    def test_valid(self):
        request, errors = validate_login({"email": " admin@sweetswirls.com ", "password": "admin123"})
        assert errors == {}
        assert request.email == "admin@sweetswirls.com"


class TestItem:
    def test_valid(self):
        request, errors = validate_item(_item_form())
        assert errors == {}
        assert request.par_stock_level == 8
        assert request.category == InventoryCategory.BASE
        assert request.default_location_id is None

    def test_required_fields(self):
        _, errors = validate_item(_item_form(name="", unit=" "))
        assert errors["name"] == "Name is required"
        assert errors["unit"] == "Unit is required"

    def test_par_level_must_be_positive(self):
        for raw in ("0", "-2", "", "lots"):
            request, errors = validate_item(_item_form(parStockLevel=raw))
            assert request is None
            assert errors["parStockLevel"] == "Par level must be greater than 0"


class TestSessionLine:
    def test_zero_is_a_valid_count(self):
        request, errors = validate_session_line({"itemId": "i1", "count": "0", "unit": "gallons"})
        assert errors == {}
        assert request.count == 0

    def test_negative_count(self):
        _, errors = validate_session_line({"itemId": "i1", "count": "-1", "unit": "gallons"})
        assert errors["count"] == "Count cannot be negative"

    def test_item_required(self):
        _, errors = validate_session_line({"itemId": "", "count": "1", "unit": "gallons"})
        assert errors["itemId"] == "Item is required"


class TestProductionRequest:
    def _form(self, **overrides):
        form = {
            "productItemId": "i1",
            "locationId": "l1",
            "neededBy": (NOW + timedelta(days=1)).isoformat(),
            "priority": "HIGH",
            "reason": "Weekend rush",
        }
        form.update(overrides)
        return form

    def test_valid_without_quantity(self):
        request, errors = validate_production_request(self._form(), now=NOW)
        assert errors == {}
        assert request.target_quantity is None

    def test_needed_by_must_be_future(self):
        _, errors = validate_production_request(self._form(neededBy=(NOW - timedelta(minutes=1)).isoformat()), now=NOW)
        assert errors["neededBy"] == "Needed by date must be in the future"

    def test_required_fields(self):
        _, errors = validate_production_request(
            {"productItemId": "", "locationId": "", "neededBy": "", "reason": ""}, now=NOW
        )
        assert errors == {
            "productItemId": "Product item is required",
            "locationId": "Location is required",
            "neededBy": "Needed by date is required",
            "reason": "Reason is required",
        }

    def test_unparseable_date(self):
        _, errors = validate_production_request(self._form(neededBy="next tuesday"), now=NOW)
        assert errors["neededBy"] == "Needed by date is required"


class TestBatch:
    def test_storage_location_required(self):
        _, errors = validate_batch({"productItemId": "i1", "quantityMade": "3", "unit": "gallons", "storageLocationId": ""})
        assert errors == {"storageLocationId": "Storage location is required"}

    def test_quantity_positive(self):
        _, errors = validate_batch({"productItemId": "i1", "quantityMade": "0", "unit": "gallons", "storageLocationId": "f"})
        assert errors["quantityMade"] == "Quantity must be greater than 0"


class TestWaste:
    def test_batch_source_requires_batch(self):
        _, errors = validate_waste({"source": "batch", "itemId": "i1", "quantity": "1", "unit": "gal", "reason": "SPOILAGE"})
        assert errors == {"batchId": "Batch is required"}

    def test_item_source_drops_batch(self):
        request, errors = validate_waste(
            {"source": "item", "itemId": "i1", "batchId": "b1", "quantity": "1", "unit": "gal", "reason": "QA_FAILURE"}
        )
        assert errors == {}
        assert request.batch_id is None
        assert request.reason == WasteReason.QA_FAILURE

    def test_reason_required(self):
        _, errors = validate_waste({"itemId": "i1", "quantity": "1", "unit": "gal", "reason": ""})
        assert errors == {"reason": "Reason is required"}


def test_search_items():
    items = [
        InventoryItemOut(id="1", name="Vanilla Base", category=InventoryCategory.BASE, unit="gal", par_stock_level=1, sku="VAN-BASE-001"),
        InventoryItemOut(id="2", name="Pint Containers", category=InventoryCategory.PACKAGING, unit="pc", par_stock_level=1),
    ]
    assert [i.id for i in search_items(items, "vanilla")] == ["1"]
    assert [i.id for i in search_items(items, "van-base")] == ["1"]
    assert [i.id for i in search_items(items, "packaging")] == ["2"]
    assert len(search_items(items, "  ")) == 2
