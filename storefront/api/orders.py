"""Order endpoints for customers and admins."""

from __future__ import annotations

from typing import Optional

from ..models import Choice, CreateOrderData, Order, Pagination
from .client import ApiClient


class OrderService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def statuses(self) -> list[Choice]:
        data = await self.client.get("/api/orders/statuses")
        return [Choice.model_validate(s) for s in data.get("statuses", [])]

    async def payment_methods(self) -> list[Choice]:
        data = await self.client.get("/api/orders/payment-methods")
        return [Choice.model_validate(m) for m in data.get("payment_methods", [])]

    async def list(
        self,
        status: Optional[str] = None,
        user_id: Optional[int] = None,
        order_number: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        per_page: Optional[int] = None,
        page: Optional[int] = None,
    ) -> tuple[list[Order], Pagination]:
        """All orders (admin)."""
        data = await self.client.get(
            "/api/admin/orders",
            params={
                "status": status or None,
                "user_id": user_id,
                "order_number": order_number or None,
                "start_date": start_date or None,
                "end_date": end_date or None,
                "sort_by": sort_by,
                "sort_order": sort_order,
                "per_page": per_page,
                "page": page,
            },
        )
        return _order_page(data)

    async def list_mine(
        self,
        status: Optional[str] = None,
        per_page: Optional[int] = None,
        page: Optional[int] = None,
    ) -> tuple[list[Order], Pagination]:
        """The logged-in customer's orders."""
        data = await self.client.get(
            "/api/orders/my",
            params={"status": status or None, "per_page": per_page, "page": page},
        )
        return _order_page(data)

    async def get(self, order_id: int) -> Order:
        data = await self.client.get(f"/api/orders/{order_id}")
        return Order.model_validate(data["order"])

    async def create(self, order: CreateOrderData) -> Order:
        data = await self.client.post("/api/orders", json=order.model_dump(exclude_none=True))
        return Order.model_validate(data["order"])

    async def cancel(self, order_id: int) -> Order:
        data = await self.client.post(f"/api/orders/{order_id}/cancel")
        return Order.model_validate(data["order"])

    async def update_status(self, order_id: int, status: str) -> Order:
        data = await self.client.patch(
            f"/api/admin/orders/{order_id}/status", json={"status": status}
        )
        return Order.model_validate(data["order"])

    async def complete(self, order_id: int) -> Order:
        data = await self.client.post(f"/api/admin/orders/{order_id}/complete")
        return Order.model_validate(data["order"])


def _order_page(data: dict) -> tuple[list[Order], Pagination]:
    orders = [Order.model_validate(o) for o in data.get("orders", [])]
    return orders, Pagination.model_validate(data.get("pagination") or {})
