"""Cart endpoints. Every mutation returns the whole cart with fresh totals."""

from typing import Any, Optional

from ..models import Cart
from .client import ApiClient


class CartService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get(self) -> Cart:
        return Cart.model_validate(await self.client.get("/api/cart"))

    async def count(self) -> int:
        """Number of items only, for the navigation badge."""
        data = await self.client.get("/api/cart/count")
        return int(data.get("count", 0))

    async def add(self, product_sku_id: int, quantity: int = 1) -> Cart:
        data = await self.client.post(
            "/api/cart/add", json={"product_sku_id": product_sku_id, "quantity": quantity}
        )
        return Cart.model_validate(data)

    async def update(self, product_sku_id: int, quantity: int) -> Cart:
        data = await self.client.put(
            "/api/cart/update", json={"product_sku_id": product_sku_id, "quantity": quantity}
        )
        return Cart.model_validate(data)

    async def remove(self, product_sku_id: int) -> Cart:
        data = await self.client.delete(
            "/api/cart/remove", json={"product_sku_id": product_sku_id}
        )
        return Cart.model_validate(data)

    async def clear(self) -> Cart:
        return Cart.model_validate(await self.client.delete("/api/cart/clear"))

    async def checkout(
        self, address_id: int, payment_method: str, note: Optional[str] = None
    ) -> dict[str, Any]:
        """Turn the cart into an order. The response carries the new ``order``."""
        payload = {"address_id": address_id, "payment_method": payment_method}
        if note:
            payload["note"] = note
        return await self.client.post("/api/cart/checkout", json=payload)
