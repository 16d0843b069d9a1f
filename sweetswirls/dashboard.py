from datetime import datetime, timezone

from sweetswirls.schemas.dashboard import DashboardData
from sweetswirls.schemas.inventory import CurrentStockOut
from sweetswirls.schemas.production import ProductionBatchOut, ProductionRequestOut, WasteEventOut

RECENT_WASTE_LIMIT = 10


def _local_date(value: datetime, now: datetime):
    # Stored timestamps are naive UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        return value.astimezone(timezone.utc).replace(tzinfo=None).date()
    return value.astimezone(now.tzinfo).date()


def _sort_key(value: datetime | None) -> datetime:
    if value is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def build_dashboard(
    stock: list[CurrentStockOut],
    open_requests: list[ProductionRequestOut],
    batches: list[ProductionBatchOut],
    waste: list[WasteEventOut],
    now: datetime,
) -> DashboardData:
    """Combine the four raw lists into the dashboard summary.

    Pure over its inputs: the same lists and ``now`` always give the same result.
    ``now`` decides which calendar day counts as today; a naive ``now`` is read
    as UTC.
    """
    low_stock = [entry for entry in stock if entry.is_below_par]
    today = now.date()
    todays = [b for b in batches if b.created_at is not None and _local_date(b.created_at, now) == today]
    recent = sorted(waste, key=lambda w: _sort_key(w.recorded_at), reverse=True)[:RECENT_WASTE_LIMIT]
    return DashboardData(
        low_stock_items=low_stock,
        open_requests=list(open_requests),
        todays_batches=todays,
        recent_waste=recent,
    )


def greeting(now: datetime) -> str:
    if now.hour < 12:
        return "Good morning"
    if now.hour < 17:
        return "Good afternoon"
    return "Good evening"
