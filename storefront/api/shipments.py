"""Shipment fulfilment endpoints (admin).

Each call asks the backend to move a shipment along
preparing -> packed -> shipped -> delivered; the backend decides whether
the move is allowed.
"""

from __future__ import annotations

from typing import Optional

from ..models import Choice, CreateShipmentData, Pagination, ShipData, Shipment, ShipmentItem
from .client import ApiClient


class ShipmentService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def statuses(self) -> list[Choice]:
        data = await self.client.get("/api/shipments/statuses")
        return [Choice.model_validate(s) for s in data.get("statuses", [])]

    async def list(
        self,
        status: Optional[str] = None,
        order_id: Optional[int] = None,
        shipment_number: Optional[str] = None,
        tracking_number: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        per_page: Optional[int] = None,
        page: Optional[int] = None,
    ) -> tuple[list[Shipment], Pagination]:
        data = await self.client.get(
            "/api/admin/shipments",
            params={
                "status": status or None,
                "order_id": order_id,
                "shipment_number": shipment_number or None,
                "tracking_number": tracking_number or None,
                "start_date": start_date or None,
                "end_date": end_date or None,
                "sort_by": sort_by,
                "sort_order": sort_order,
                "per_page": per_page,
                "page": page,
            },
        )
        shipments = [Shipment.model_validate(s) for s in data.get("shipments", [])]
        return shipments, Pagination.model_validate(data.get("pagination") or {})

    async def get(self, shipment_id: int) -> Shipment:
        data = await self.client.get(f"/api/admin/shipments/{shipment_id}")
        return Shipment.model_validate(data["shipment"])

    async def create(self, shipment: CreateShipmentData) -> Shipment:
        """Create an additional shipment for part of an order."""
        data = await self.client.post("/api/admin/shipments", json=shipment.model_dump())
        return Shipment.model_validate(data["shipment"])

    async def pick_item(self, item_id: int) -> ShipmentItem:
        data = await self.client.post(f"/api/admin/shipments/items/{item_id}/pick")
        return ShipmentItem.model_validate(data["shipment_item"])

    async def pick_all(self, shipment_id: int) -> Shipment:
        data = await self.client.post(f"/api/admin/shipments/{shipment_id}/pick-all")
        return Shipment.model_validate(data["shipment"])

    async def pack(self, shipment_id: int) -> Shipment:
        data = await self.client.post(f"/api/admin/shipments/{shipment_id}/pack")
        return Shipment.model_validate(data["shipment"])

    async def ship(self, shipment_id: int, details: Optional[ShipData] = None) -> Shipment:
        payload = details.model_dump(exclude_none=True) if details else {}
        data = await self.client.post(f"/api/admin/shipments/{shipment_id}/ship", json=payload)
        return Shipment.model_validate(data["shipment"])

    async def deliver(self, shipment_id: int) -> Shipment:
        data = await self.client.post(f"/api/admin/shipments/{shipment_id}/deliver")
        return Shipment.model_validate(data["shipment"])

    async def update_tracking(self, shipment_id: int, details: ShipData) -> Shipment:
        data = await self.client.patch(
            f"/api/admin/shipments/{shipment_id}/tracking",
            json=details.model_dump(exclude_none=True),
        )
        return Shipment.model_validate(data["shipment"])

    async def update_note(self, shipment_id: int, note: str) -> Shipment:
        data = await self.client.patch(
            f"/api/admin/shipments/{shipment_id}/note", json={"note": note}
        )
        return Shipment.model_validate(data["shipment"])
