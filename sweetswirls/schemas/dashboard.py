from sweetswirls.schemas.common import CamelModel
from sweetswirls.schemas.inventory import CurrentStockOut
from sweetswirls.schemas.production import ProductionBatchOut, ProductionRequestOut, WasteEventOut


class DashboardData(CamelModel):
    low_stock_items: list[CurrentStockOut] = []
    open_requests: list[ProductionRequestOut] = []
    todays_batches: list[ProductionBatchOut] = []
    recent_waste: list[WasteEventOut] = []
