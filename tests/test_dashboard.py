from datetime import datetime, timedelta, timezone

from sweetswirls.dashboard import RECENT_WASTE_LIMIT, build_dashboard, greeting
from sweetswirls.models.inventory import InventoryCategory
from sweetswirls.models.production import (
    ProductionBatchStatus,
    ProductionPriority,
    ProductionRequestStatus,
    WasteReason,
)
from sweetswirls.schemas.inventory import CurrentStockOut, InventoryItemOut
from sweetswirls.schemas.production import ProductionBatchOut, ProductionRequestOut, WasteEventOut

NOW = datetime(2024, 6, 14, 15, 30, tzinfo=timezone.utc)


def _item(par=10.0):
    return InventoryItemOut(id="item-1", name="Vanilla Base", category=InventoryCategory.BASE, unit="gallons", par_stock_level=par)


def _stock(quantity, par=10.0):
    return CurrentStockOut(id=f"s-{quantity}", item_id="item-1", location_id="loc-1", quantity=quantity, item=_item(par))


def _batch(bid, created_at):
    return ProductionBatchOut(
        id=bid,
        product_item_id="item-1",
        quantity_made=2,
        unit="gallons",
        storage_location_id="loc-2",
        made_by="u1",
        lot_code=f"LOT-{bid}",
        status=ProductionBatchStatus.COMPLETED,
        created_at=created_at,
    )


def _waste(wid, recorded_at):
    return WasteEventOut(
        id=wid,
        item_id="item-1",
        quantity=1,
        unit="gallons",
        reason=WasteReason.SPOILAGE,
        recorded_by="u1",
        recorded_at=recorded_at,
    )


def _request():
    return ProductionRequestOut(
        id="r1",
        product_item_id="item-1",
        location_id="loc-1",
        requested_by="u1",
        needed_by=NOW + timedelta(days=1),
        priority=ProductionPriority.NORMAL,
        reason="Restock",
        status=ProductionRequestStatus.OPEN,
    )


def test_low_stock_is_strictly_below_par():
    data = build_dashboard([_stock(4), _stock(10), _stock(12)], [], [], [], NOW)
    assert [s.quantity for s in data.low_stock_items] == [4]


def test_stock_without_item_is_ignored():
    entry = CurrentStockOut(id="s", item_id="item-1", location_id="loc-1", quantity=0)
    assert build_dashboard([entry], [], [], [], NOW).low_stock_items == []


def test_open_requests_pass_through():
    data = build_dashboard([], [_request()], [], [], NOW)
    assert [r.id for r in data.open_requests] == ["r1"]


def test_todays_batches_use_calendar_day():
    batches = [
        _batch("today", datetime(2024, 6, 14, 9, 0)),
        _batch("yesterday", datetime(2024, 6, 13, 23, 59)),
        _batch("undated", None),
    ]
    data = build_dashboard([], [], batches, [], NOW)
    assert [b.id for b in data.todays_batches] == ["today"]


def test_today_follows_the_callers_timezone():
    # 02:00 UTC on the 15th is still the 14th in New York (UTC-4)
    eastern = timezone(timedelta(hours=-4))
    now = datetime(2024, 6, 14, 22, 0, tzinfo=eastern)
    data = build_dashboard([], [], [_batch("late", datetime(2024, 6, 15, 2, 0))], [], now)
    assert [b.id for b in data.todays_batches] == ["late"]


def test_recent_waste_newest_first_and_capped():
    events = [_waste(f"w{i}", NOW - timedelta(hours=i)) for i in range(RECENT_WASTE_LIMIT + 3)]
    events.reverse()
    data = build_dashboard([], [], [], events, NOW)
    assert len(data.recent_waste) == RECENT_WASTE_LIMIT
    assert data.recent_waste[0].id == "w0"


def test_same_inputs_same_result():
    args = ([_stock(1)], [_request()], [_batch("b", datetime(2024, 6, 14, 8))], [_waste("w", NOW)], NOW)
    assert build_dashboard(*args) == build_dashboard(*args)


def test_greeting():
    assert greeting(NOW.replace(hour=8)) == "Good morning"
    assert greeting(NOW.replace(hour=12)) == "Good afternoon"
    assert greeting(NOW.replace(hour=16, minute=59)) == "Good afternoon"
    assert greeting(NOW.replace(hour=17)) == "Good evening"


def test_low_stock_counts_every_entry_below_par():
    # retired items are filtered out of /inventory/current before they get here
    entry = _stock(1, par=8)
    entry.item.is_active = False
    assert len(build_dashboard([entry], [], [], [], NOW).low_stock_items) == 1
