"""Inventory, stock-ledger and alert endpoints.

Stock figures (quantity, allocated, available) are computed by the backend;
this module only moves them between the API and the admin pages.
"""

from __future__ import annotations

from typing import Optional

from ..models import Inventory, InventoryAlert, InventoryTransaction, Pagination
from .client import ApiClient

# Filters accepted by ``InventoryService.list(status=...)``
STOCK_FILTERS = {"low_stock": "Low stock", "out_of_stock": "Out of stock"}


class InventoryService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def list(
        self,
        status: Optional[str] = None,
        sku_code: Optional[str] = None,
        per_page: Optional[int] = None,
        page: Optional[int] = None,
    ) -> tuple[list[Inventory], Pagination]:
        data = await self.client.get(
            "/api/inventories",
            params={
                "status": status or None,
                "sku_code": sku_code or None,
                "per_page": per_page,
                "page": page,
            },
        )
        inventories = [Inventory.model_validate(i) for i in data.get("inventories", [])]
        return inventories, Pagination.model_validate(data.get("pagination") or {})

    async def create(
        self,
        product_sku_id: int,
        initial_quantity: Optional[int] = None,
        safety_stock: Optional[int] = None,
    ) -> Inventory:
        """Create a stock record for a SKU that has none yet."""
        payload = {"product_sku_id": product_sku_id}
        if initial_quantity is not None:
            payload["initial_quantity"] = initial_quantity
        if safety_stock is not None:
            payload["safety_stock"] = safety_stock
        data = await self.client.post("/api/inventories", json=payload)
        return Inventory.model_validate(data["inventory"])

    async def get(self, inventory_id: int) -> Inventory:
        data = await self.client.get(f"/api/inventories/{inventory_id}")
        return Inventory.model_validate(data["inventory"])

    async def get_by_sku(self, sku_id: int) -> Inventory:
        data = await self.client.get(f"/api/inventories/sku/{sku_id}")
        return Inventory.model_validate(data["inventory"])

    async def adjust(
        self, product_sku_id: int, quantity_change: int, note: Optional[str] = None
    ) -> Inventory:
        """Apply a signed correction to on-hand stock."""
        payload = {"product_sku_id": product_sku_id, "quantity_change": quantity_change}
        if note:
            payload["note"] = note
        data = await self.client.post("/api/inventories/adjust", json=payload)
        return Inventory.model_validate(data["inventory"])

    async def receive(
        self, product_sku_id: int, quantity: int, note: Optional[str] = None
    ) -> Inventory:
        """Book incoming stock."""
        payload = {"product_sku_id": product_sku_id, "quantity": quantity}
        if note:
            payload["note"] = note
        data = await self.client.post("/api/inventories/receive", json=payload)
        return Inventory.model_validate(data["inventory"])

    async def update_safety_stock(self, inventory_id: int, safety_stock: int) -> Inventory:
        data = await self.client.put(
            f"/api/inventories/{inventory_id}/safety-stock",
            json={"safety_stock": safety_stock},
        )
        return Inventory.model_validate(data["inventory"])

    async def transactions(
        self,
        inventory_id: int,
        event_type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[InventoryTransaction], Pagination]:
        """Ledger entries for one stock record, newest first."""
        data = await self.client.get(
            f"/api/inventories/{inventory_id}/transactions",
            params={
                "event_type": event_type or None,
                "start_date": start_date or None,
                "end_date": end_date or None,
                "per_page": per_page,
            },
        )
        transactions = [InventoryTransaction.model_validate(t) for t in data.get("transactions", [])]
        return transactions, Pagination.model_validate(data.get("pagination") or {})

    async def alerts(
        self,
        unresolved: Optional[bool] = None,
        alert_type: Optional[str] = None,
        per_page: Optional[int] = None,
    ) -> tuple[list[InventoryAlert], Pagination]:
        data = await self.client.get(
            "/api/inventory-alerts",
            params={
                "unresolved": unresolved,
                "alert_type": alert_type or None,
                "per_page": per_page,
            },
        )
        alerts = [InventoryAlert.model_validate(a) for a in data.get("alerts", [])]
        return alerts, Pagination.model_validate(data.get("pagination") or {})

    async def resolve_alert(self, alert_id: int) -> None:
        await self.client.post(f"/api/inventory-alerts/{alert_id}/resolve")
