"""Product, SKU and product-image endpoints."""

from __future__ import annotations

from typing import Optional

from ..models import ImageForm, Pagination, Product, ProductForm, ProductImage, ProductSku, SkuForm
from .client import ApiClient

# Accepted values for the ``sort_by`` search parameter
SORT_OPTIONS = {
    "created_at": "Newest",
    "price_asc": "Price: low to high",
    "price_desc": "Price: high to low",
    "name": "Name",
}


class ProductService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def list(
        self,
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        per_page: Optional[int] = None,
        page: Optional[int] = None,
    ) -> tuple[list[Product], Pagination]:
        """Search the catalog."""
        data = await self.client.get(
            "/api/products",
            params={
                "search": search or None,
                "category_id": category_id,
                "min_price": min_price,
                "max_price": max_price,
                "sort_by": sort_by,
                "sort_order": sort_order,
                "per_page": per_page,
                "page": page,
            },
        )
        return _product_page(data)

    async def list_trashed(
        self, per_page: Optional[int] = None, page: Optional[int] = None
    ) -> tuple[list[Product], Pagination]:
        """Soft-deleted products (admin)."""
        data = await self.client.get(
            "/api/admin/products/trashed",
            params={"per_page": per_page, "page": page},
        )
        return _product_page(data)

    async def get(self, product_id: int) -> Product:
        data = await self.client.get(f"/api/products/{product_id}")
        return Product.model_validate(data["product"])

    async def create(self, form: ProductForm) -> Product:
        data = await self.client.post(
            "/api/products", json=form.model_dump(mode="json", exclude_none=True)
        )
        return Product.model_validate(data["product"])

    async def update(self, product_id: int, form: ProductForm) -> Product:
        payload = form.model_dump(mode="json", exclude_none=True)
        # SKUs and images have their own endpoints once the product exists
        payload.pop("skus", None)
        payload.pop("images", None)
        data = await self.client.put(f"/api/products/{product_id}", json=payload)
        return Product.model_validate(data["product"])

    async def delete(self, product_id: int) -> None:
        await self.client.delete(f"/api/products/{product_id}")

    async def restore(self, product_id: int) -> Product:
        data = await self.client.post(f"/api/products/{product_id}/restore", json={})
        return Product.model_validate(data["product"])

    # ==================== SKUs ====================

    async def get_sku(self, product_id: int, sku_id: int) -> ProductSku:
        data = await self.client.get(f"/api/products/{product_id}/skus/{sku_id}")
        return ProductSku.model_validate(data["sku"])

    async def add_skus(self, product_id: int, skus: list[SkuForm]) -> list[ProductSku]:
        data = await self.client.post(
            f"/api/products/{product_id}/skus",
            json={"skus": [s.model_dump(mode="json", exclude_none=True) for s in skus]},
        )
        return [ProductSku.model_validate(s) for s in data.get("skus", [])]

    async def update_sku(self, product_id: int, sku_id: int, form: SkuForm) -> ProductSku:
        data = await self.client.put(
            f"/api/products/{product_id}/skus/{sku_id}",
            json=form.model_dump(mode="json", exclude_none=True),
        )
        return ProductSku.model_validate(data["sku"])

    async def delete_sku(self, product_id: int, sku_id: int) -> None:
        await self.client.delete(f"/api/products/{product_id}/skus/{sku_id}")

    # ==================== Images ====================

    async def add_images(self, product_id: int, images: list[ImageForm]) -> list[ProductImage]:
        data = await self.client.post(
            f"/api/products/{product_id}/images",
            json={"images": [i.model_dump(mode="json", exclude_none=True) for i in images]},
        )
        return [ProductImage.model_validate(i) for i in data.get("images", [])]

    async def update_image(self, product_id: int, image_id: int, form: ImageForm) -> ProductImage:
        data = await self.client.put(
            f"/api/products/{product_id}/images/{image_id}",
            json=form.model_dump(mode="json", exclude_none=True),
        )
        return ProductImage.model_validate(data["image"])

    async def delete_image(self, product_id: int, image_id: int) -> None:
        await self.client.delete(f"/api/products/{product_id}/images/{image_id}")


def _product_page(data: dict) -> tuple[list[Product], Pagination]:
    products = [Product.model_validate(p) for p in data.get("products", [])]
    return products, Pagination.model_validate(data.get("pagination") or {})
