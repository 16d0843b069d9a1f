"""Typed async client for the Sweet Swirls REST API.

Every method maps to one backend endpoint, attaches the bearer token held by
the :class:`~sweetswirls.client.session.AuthSession`, and parses the JSON reply
into the shared schema models. Any 401 clears the session before
:class:`UnauthorizedError` is raised.
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum

import httpx

from sweetswirls.client.errors import ApiError, UnauthorizedError, ValidationFailed
from sweetswirls.client.session import AuthSession
from sweetswirls.config import settings
from sweetswirls.dashboard import build_dashboard
from sweetswirls.models.location import LocationType
from sweetswirls.models.production import ProductionBatchStatus, ProductionRequestStatus
from sweetswirls.models.user import UserRole
from sweetswirls.schemas.auth import CreateUserRequest, LoginRequest, LoginResponse, UserOut
from sweetswirls.schemas.dashboard import DashboardData
from sweetswirls.schemas.inventory import (
    AddSessionLineRequest,
    CloseSessionRequest,
    CreateSessionRequest,
    CurrentStockOut,
    InventoryItemOut,
    InventoryItemRequest,
    InventoryItemUpdate,
    InventorySessionLineOut,
    InventorySessionOut,
    UpdateSessionLineRequest,
)
from sweetswirls.schemas.location import LocationOut
from sweetswirls.schemas.production import (
    CreateBatchRequest,
    CreateProductionRequestRequest,
    ProductionBatchOut,
    ProductionRequestOut,
    RecordWasteRequest,
    UpdateRequestStatusRequest,
    WasteEventOut,
)

logger = logging.getLogger(__name__)


def _params(**kwargs) -> dict:
    params = {}
    for key, value in kwargs.items():
        if value is None:
            continue
        params[key] = value.value if isinstance(value, Enum) else value
    return params


def _error_message(resp: httpx.Response) -> tuple[str, dict[str, str]]:
    """Pull the server message and any per-field errors out of an error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase, {}
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail, {}
    if isinstance(detail, list):
        field_errors = {}
        for entry in detail:
            loc = entry.get("loc") or []
            field = str(loc[-1]) if loc else "form"
            field_errors.setdefault(field, entry.get("msg", "Invalid value"))
        return "Please correct the highlighted fields", field_errors
    return resp.reason_phrase or "Request failed", {}


class ApiClient:
    def __init__(
        self,
        session: AuthSession,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self.session = session
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.API_URL,
            transport=transport,
            timeout=timeout or settings.API_TIMEOUT,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, *, json=None, params: dict | None = None):
        headers = {}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        try:
            resp = await self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error("API %s %s failed: %s", method, path, e)
            raise ApiError(0, "Unable to reach the server") from e

        if resp.status_code == 401:
            message, _ = _error_message(resp)
            logger.info("API %s %s returned 401, clearing session", method, path)
            self.session.clear()
            raise UnauthorizedError(message)
        if resp.status_code >= 400:
            message, field_errors = _error_message(resp)
            logger.warning("API %s %s returned %d: %s", method, path, resp.status_code, message)
            if resp.status_code == 422 or field_errors:
                raise ValidationFailed(resp.status_code, message, field_errors)
            raise ApiError(resp.status_code, message)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # Auth

    async def login(self, credentials: LoginRequest) -> UserOut:
        try:
            data = await self._request("POST", "/auth/login", json=credentials.to_json())
        except UnauthorizedError as e:
            raise ApiError(401, "Invalid email or password") from e
        result = LoginResponse.model_validate(data)
        user = UserOut(id=result.user_id, name=result.name, email=result.email, role=result.role, is_active=True)
        self.session.establish(result.token, user)
        return user

    async def logout(self) -> None:
        self.session.clear()

    async def get_current_user(self) -> UserOut:
        return UserOut.model_validate(await self._request("GET", "/auth/me"))

    async def create_user(self, data: CreateUserRequest) -> UserOut:
        return UserOut.model_validate(await self._request("POST", "/auth/users", json=data.to_json()))

    async def get_users(self, role: UserRole | None = None) -> list[UserOut]:
        data = await self._request("GET", "/auth/users", params=_params(role=role))
        return [UserOut.model_validate(u) for u in data]

    async def update_user_role(self, user_id: str, role: UserRole) -> UserOut:
        data = await self._request("PATCH", f"/auth/users/{user_id}/role", json={"role": UserRole(role).value})
        return UserOut.model_validate(data)

    async def deactivate_user(self, user_id: str) -> UserOut:
        return UserOut.model_validate(await self._request("PATCH", f"/auth/users/{user_id}/deactivate"))

    async def activate_user(self, user_id: str) -> UserOut:
        return UserOut.model_validate(await self._request("PATCH", f"/auth/users/{user_id}/activate"))

    # Locations

    async def get_locations(self, type: LocationType | None = None) -> list[LocationOut]:
        data = await self._request("GET", "/locations", params=_params(type=type))
        return [LocationOut.model_validate(loc) for loc in data]

    # Inventory items

    async def get_inventory_items(self, active: bool | None = True, location_id: str | None = None) -> list[InventoryItemOut]:
        data = await self._request("GET", "/inventory/items", params=_params(active=active, location_id=location_id))
        return [InventoryItemOut.model_validate(i) for i in data]

    async def get_inventory_item(self, item_id: str) -> InventoryItemOut:
        return InventoryItemOut.model_validate(await self._request("GET", f"/inventory/items/{item_id}"))

    async def create_inventory_item(self, item: InventoryItemRequest) -> InventoryItemOut:
        return InventoryItemOut.model_validate(await self._request("POST", "/inventory/items", json=item.to_json()))

    async def update_inventory_item(self, item_id: str, item: InventoryItemUpdate) -> InventoryItemOut:
        payload = item.model_dump(mode="json", by_alias=True, exclude_unset=True)
        return InventoryItemOut.model_validate(await self._request("PUT", f"/inventory/items/{item_id}", json=payload))

    async def delete_inventory_item(self, item_id: str) -> None:
        await self._request("DELETE", f"/inventory/items/{item_id}")

    # Counting sessions

    async def get_inventory_sessions(self, location_id: str | None = None) -> list[InventorySessionOut]:
        data = await self._request("GET", "/inventory/sessions", params=_params(location_id=location_id))
        return [InventorySessionOut.model_validate(s) for s in data]

    async def get_inventory_session(self, session_id: str) -> InventorySessionOut:
        return InventorySessionOut.model_validate(await self._request("GET", f"/inventory/sessions/{session_id}"))

    async def create_inventory_session(self, request: CreateSessionRequest) -> InventorySessionOut:
        data = await self._request("POST", "/inventory/sessions", json=request.to_json())
        return InventorySessionOut.model_validate(data)

    async def add_session_line(self, session_id: str, line: AddSessionLineRequest) -> InventorySessionLineOut:
        data = await self._request("POST", f"/inventory/sessions/{session_id}/lines", json=line.to_json())
        return InventorySessionLineOut.model_validate(data)

    async def add_session_lines(self, session_id: str, lines: list[AddSessionLineRequest]) -> InventorySessionOut:
        payload = [line.to_json() for line in lines]
        data = await self._request("POST", f"/inventory/sessions/{session_id}/lines/batch", json=payload)
        return InventorySessionOut.model_validate(data)

    async def update_session_line(
        self, session_id: str, line_id: str, line: UpdateSessionLineRequest
    ) -> InventorySessionLineOut:
        payload = line.model_dump(mode="json", by_alias=True, exclude_unset=True)
        data = await self._request("PUT", f"/inventory/sessions/{session_id}/lines/{line_id}", json=payload)
        return InventorySessionLineOut.model_validate(data)

    async def close_inventory_session(
        self, session_id: str, request: CloseSessionRequest | None = None
    ) -> InventorySessionOut:
        payload = (request or CloseSessionRequest()).to_json()
        data = await self._request("POST", f"/inventory/sessions/{session_id}/close", json=payload)
        return InventorySessionOut.model_validate(data)

    # Current stock

    async def get_current_stock(self, location_id: str | None = None) -> list[CurrentStockOut]:
        data = await self._request("GET", "/inventory/current", params=_params(location_id=location_id))
        return [CurrentStockOut.model_validate(s) for s in data]

    async def get_item_stock(self, item_id: str, location_id: str | None = None) -> list[CurrentStockOut]:
        data = await self._request(
            "GET", f"/inventory/items/{item_id}/stock", params=_params(location_id=location_id)
        )
        return [CurrentStockOut.model_validate(s) for s in data]

    # Production requests

    async def get_production_requests(self, status: ProductionRequestStatus | None = None) -> list[ProductionRequestOut]:
        data = await self._request("GET", "/production/requests", params=_params(status=status))
        return [ProductionRequestOut.model_validate(r) for r in data]

    async def get_production_request(self, request_id: str) -> ProductionRequestOut:
        return ProductionRequestOut.model_validate(await self._request("GET", f"/production/requests/{request_id}"))

    async def create_production_request(self, request: CreateProductionRequestRequest) -> ProductionRequestOut:
        data = await self._request("POST", "/production/requests", json=request.to_json())
        return ProductionRequestOut.model_validate(data)

    async def update_production_request_status(
        self, request_id: str, request: UpdateRequestStatusRequest
    ) -> ProductionRequestOut:
        data = await self._request("PATCH", f"/production/requests/{request_id}", json=request.to_json())
        return ProductionRequestOut.model_validate(data)

    async def start_production_request(self, request_id: str) -> ProductionRequestOut:
        data = await self._request("POST", f"/production/requests/{request_id}/start")
        return ProductionRequestOut.model_validate(data)

    async def complete_production_request(self, request_id: str) -> ProductionRequestOut:
        data = await self._request("POST", f"/production/requests/{request_id}/complete")
        return ProductionRequestOut.model_validate(data)

    async def archive_production_request(self, request_id: str) -> ProductionRequestOut:
        data = await self._request("POST", f"/production/requests/{request_id}/archive")
        return ProductionRequestOut.model_validate(data)

    # Batches

    async def get_production_batches(self, status: ProductionBatchStatus | None = None) -> list[ProductionBatchOut]:
        data = await self._request("GET", "/production/batches", params=_params(status=status))
        return [ProductionBatchOut.model_validate(b) for b in data]

    async def get_production_batch(self, batch_id: str) -> ProductionBatchOut:
        return ProductionBatchOut.model_validate(await self._request("GET", f"/production/batches/{batch_id}"))

    async def create_production_batch(self, request: CreateBatchRequest) -> ProductionBatchOut:
        data = await self._request("POST", "/production/batches", json=request.to_json())
        return ProductionBatchOut.model_validate(data)

    async def complete_batch(self, batch_id: str) -> ProductionBatchOut:
        return ProductionBatchOut.model_validate(await self._request("POST", f"/production/batches/{batch_id}/complete"))

    async def run_out_batch(self, batch_id: str) -> ProductionBatchOut:
        return ProductionBatchOut.model_validate(await self._request("POST", f"/production/batches/{batch_id}/runout"))

    # Waste

    async def record_waste(self, request: RecordWasteRequest) -> WasteEventOut:
        return WasteEventOut.model_validate(await self._request("POST", "/production/waste", json=request.to_json()))

    async def get_waste_events(self, batch_id: str | None = None, item_id: str | None = None) -> list[WasteEventOut]:
        data = await self._request("GET", "/production/waste", params=_params(batch_id=batch_id, item_id=item_id))
        return [WasteEventOut.model_validate(w) for w in data]

    # Dashboard

    async def get_dashboard_data(self, now: datetime | None = None) -> DashboardData:
        """Fetch the four dashboard sources concurrently; any failure fails the whole call."""
        stock, open_requests, batches, waste = await asyncio.gather(
            self.get_current_stock(),
            self.get_production_requests(status=ProductionRequestStatus.OPEN),
            self.get_production_batches(),
            self.get_waste_events(),
        )
        return build_dashboard(stock, open_requests, batches, waste, now or datetime.now().astimezone())
