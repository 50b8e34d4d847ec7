"""Category endpoints."""

from __future__ import annotations

from ..models import Category, CategoryForm
from .client import ApiClient


class CategoryService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def list(self) -> list[Category]:
        """Top-level categories with their children nested."""
        data = await self.client.get("/api/categories")
        return [Category.model_validate(c) for c in data.get("categories", [])]

    async def list_all(self) -> list[Category]:
        """Every category as a flat list."""
        data = await self.client.get("/api/categories/all")
        return [Category.model_validate(c) for c in data.get("categories", [])]

    async def list_active(self) -> list[Category]:
        """Active categories for the public storefront."""
        data = await self.client.get("/api/public/categories")
        return [Category.model_validate(c) for c in data.get("categories", [])]

    async def get(self, category_id: int) -> Category:
        data = await self.client.get(f"/api/categories/{category_id}")
        return Category.model_validate(data["category"])

    async def create(self, form: CategoryForm) -> Category:
        data = await self.client.post("/api/categories", json=form.model_dump(exclude_none=True))
        return Category.model_validate(data["category"])

    async def update(self, category_id: int, form: CategoryForm) -> Category:
        data = await self.client.put(
            f"/api/categories/{category_id}", json=form.model_dump(exclude_none=True)
        )
        return Category.model_validate(data["category"])

    async def delete(self, category_id: int) -> None:
        await self.client.delete(f"/api/categories/{category_id}")
