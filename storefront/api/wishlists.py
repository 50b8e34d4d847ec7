"""Wishlist endpoints."""

from __future__ import annotations

from typing import Optional

from ..models import Wishlist
from .client import ApiClient


class WishlistService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def list(self) -> list[Wishlist]:
        data = await self.client.get("/api/wishlists")
        return [Wishlist.model_validate(w) for w in data.get("wishlists", [])]

    async def add(self, product_id: int, sku_id: Optional[int] = None) -> Wishlist:
        data = await self.client.post(
            "/api/wishlists",
            json={"product_id": product_id, "product_sku_id": sku_id or None},
        )
        return Wishlist.model_validate(data["wishlist"])

    async def remove(self, wishlist_id: int) -> None:
        await self.client.delete(f"/api/wishlists/{wishlist_id}")

    async def check(self, product_id: int, sku_id: Optional[int] = None) -> bool:
        data = await self.client.get(
            "/api/wishlists/check",
            params={"product_id": product_id, "product_sku_id": sku_id or None},
        )
        return bool(data.get("is_favorite"))
