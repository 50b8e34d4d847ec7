"""Tests for the resource services against a fake backend."""

import pytest

from storefront.api import (
    AddressService,
    AuthService,
    CartService,
    CategoryService,
    ImageService,
    InventoryService,
    OrderService,
    ProductService,
    ShipmentService,
    WishlistService,
)
from storefront.api.client import ApiError
from storefront.models import (
    AddressForm,
    CreateShipmentData,
    LoginCredentials,
    ProductForm,
    ShipData,
    ShipmentLine,
    SkuForm,
)

from conftest import cart_item, cart_payload

PRODUCT = {
    "id": 3,
    "product_code": "P-3",
    "name": "Tuna",
    "is_published": True,
    "skus": [
        {"id": 10, "sku_code": "SKU-10", "price": 1200, "size": "L"},
        {"id": 11, "sku_code": "SKU-11", "price": 800, "size": "S", "is_active": False},
    ],
    "images": [
        {"id": 1, "image_path": "/a.png"},
        {"id": 2, "image_path": "/b.png", "is_primary": True},
    ],
}

SHIPMENT = {"id": 7, "shipment_number": "SH-7", "order_id": 4, "status": "packed", "items": []}


class TestAuthService:
    @pytest.mark.asyncio
    async def test_login_fetches_csrf_cookie_first(self, api, backend):
        backend.on("GET", "/sanctum/csrf-cookie", None, 204)
        backend.on("POST", "/api/login", {"user": {"id": 2, "name": "Hanako", "email": "h@example.com"}})

        user = await AuthService(api).login(LoginCredentials(email="h@example.com", password="secret"))

        assert [r.url.path for r in backend.requests] == ["/sanctum/csrf-cookie", "/api/login"]
        assert backend.sent_json("POST", "/api/login") == {"email": "h@example.com", "password": "secret"}
        assert user.name == "Hanako"
        assert not user.is_admin

    @pytest.mark.asyncio
    async def test_get_user_none_when_anonymous(self, api):
        assert await AuthService(api).get_user() is None


class TestProductService:
    @pytest.mark.asyncio
    async def test_list_sends_filters_and_parses_pagination(self, api, backend):
        backend.on("GET", "/api/products", {
            "products": [PRODUCT],
            "pagination": {"current_page": 2, "last_page": 3, "per_page": 12, "total": 30},
        })

        products, pagination = await ProductService(api).list(search="tuna", category_id=5, page=2)

        assert dict(backend.requests[-1].url.params) == {"search": "tuna", "category_id": "5", "page": "2"}
        assert pagination.total == 30
        assert products[0].primary_image.image_path == "/b.png"
        assert products[0].min_price == 1200

    @pytest.mark.asyncio
    async def test_update_leaves_out_skus_and_images(self, api, backend):
        backend.on("PUT", "/api/products/3", {"product": PRODUCT})
        form = ProductForm(product_code="P-3", name="Tuna",
                           skus=[SkuForm(sku_code="S", price=1)])

        await ProductService(api).update(3, form)

        assert backend.sent_json("PUT", "/api/products/3") == {"product_code": "P-3", "name": "Tuna"}

    @pytest.mark.asyncio
    async def test_add_skus_wraps_list(self, api, backend):
        backend.on("POST", "/api/products/3/skus", {"skus": [PRODUCT["skus"][0]]})

        skus = await ProductService(api).add_skus(3, [SkuForm(sku_code="SKU-10", price=1200)])

        assert backend.sent_json("POST", "/api/products/3/skus") == {
            "skus": [{"sku_code": "SKU-10", "price": 1200.0}]
        }
        assert skus[0].variant_label == "L"


    @pytest.mark.asyncio
    async def test_get_sku(self, api, backend):
        backend.on("GET", "/api/products/3/skus/10", {"sku": PRODUCT["skus"][0]})

        sku = await ProductService(api).get_sku(3, 10)

        assert sku.sku_code == "SKU-10"
        assert sku.variant_label == "L"


class TestCategoryService:
    @pytest.mark.asyncio
    async def test_tree_keeps_children(self, api, backend):
        backend.on("GET", "/api/categories", {"categories": [
            {"id": 1, "name": "Fish", "slug": "fish", "children": [
                {"id": 2, "name": "Tuna", "slug": "tuna", "parent_id": 1},
            ]},
        ]})

        tree = await CategoryService(api).list()

        assert [c.name for c in tree] == ["Fish"]
        assert tree[0].children[0].parent_id == 1


class TestCartService:
    @pytest.mark.asyncio
    async def test_remove_sends_sku_in_body(self, api, backend):
        backend.on("DELETE", "/api/cart/remove", cart_payload())
        cart = await CartService(api).remove(10)

        assert backend.sent_json("DELETE", "/api/cart/remove") == {"product_sku_id": 10}
        assert cart.items == []

    @pytest.mark.asyncio
    async def test_checkout_omits_empty_note(self, api, backend):
        backend.on("POST", "/api/cart/checkout", {"order": {"id": 4, "order_number": "ORD-4"}})

        result = await CartService(api).checkout(1, "credit_card", "")

        assert backend.sent_json("POST", "/api/cart/checkout") == {
            "address_id": 1, "payment_method": "credit_card",
        }
        assert result["order"]["order_number"] == "ORD-4"

    @pytest.mark.asyncio
    async def test_update_returns_server_totals(self, api, backend):
        backend.on("PUT", "/api/cart/update", cart_payload([cart_item(quantity=3)], subtotal=3600, shipping_fee=500))

        cart = await CartService(api).update(10, 3)

        assert cart.totals.total_price == 4100
        assert cart.totals.item_count == 3


class TestInventoryService:
    @pytest.mark.asyncio
    async def test_adjust_payload(self, api, backend):
        backend.on("POST", "/api/inventories/adjust", {"inventory": {"id": 1, "product_sku_id": 10, "quantity": 8}})

        inventory = await InventoryService(api).adjust(10, -2, "Damaged")

        assert backend.sent_json("POST", "/api/inventories/adjust") == {
            "product_sku_id": 10, "quantity_change": -2, "note": "Damaged",
        }
        assert inventory.quantity == 8

    @pytest.mark.asyncio
    async def test_receive_without_note(self, api, backend):
        backend.on("POST", "/api/inventories/receive", {"inventory": {"id": 1, "product_sku_id": 10}})
        await InventoryService(api).receive(10, 5)

        assert backend.sent_json("POST", "/api/inventories/receive") == {"product_sku_id": 10, "quantity": 5}

    @pytest.mark.asyncio
    async def test_get_by_sku(self, api, backend):
        backend.on("GET", "/api/inventories/sku/10", {"inventory": {"id": 1, "product_sku_id": 10, "quantity": 4}})

        inventory = await InventoryService(api).get_by_sku(10)

        assert inventory.id == 1
        assert inventory.quantity == 4

    @pytest.mark.asyncio
    async def test_low_stock_flag(self, api, backend):
        backend.on("GET", "/api/inventories/1", {"inventory": {
            "id": 1, "product_sku_id": 10, "quantity": 5, "available_quantity": 3, "safety_stock": 3,
        }})
        assert (await InventoryService(api).get(1)).is_low_stock


class TestOrderService:
    @pytest.mark.asyncio
    async def test_status_update_uses_patch(self, api, backend):
        backend.on("PATCH", "/api/admin/orders/4/status", {"order": {"id": 4, "order_number": "ORD-4", "status": "shipped"}})

        order = await OrderService(api).update_status(4, "shipped")

        assert backend.sent_json("PATCH", "/api/admin/orders/4/status") == {"status": "shipped"}
        assert order.status == "shipped"
        assert not order.is_cancellable

    @pytest.mark.asyncio
    async def test_cancel_error_propagates(self, api, backend):
        backend.on("POST", "/api/orders/4/cancel", {"message": "Cannot cancel a shipped order"}, 422)

        with pytest.raises(ApiError, match="Cannot cancel"):
            await OrderService(api).cancel(4)


class TestShipmentService:
    @pytest.mark.asyncio
    async def test_ship_sends_only_given_details(self, api, backend):
        backend.on("POST", "/api/admin/shipments/7/ship", {"shipment": {**SHIPMENT, "status": "shipped"}})

        shipment = await ShipmentService(api).ship(7, ShipData(tracking_number="TN-1"))

        assert backend.sent_json("POST", "/api/admin/shipments/7/ship") == {"tracking_number": "TN-1"}
        assert shipment.status == "shipped"

    @pytest.mark.asyncio
    async def test_create_partial_shipment(self, api, backend):
        backend.on("POST", "/api/admin/shipments", {"shipment": {**SHIPMENT, "status": "preparing"}})

        await ShipmentService(api).create(
            CreateShipmentData(order_id=4, items=[ShipmentLine(order_item_id=9, quantity=1)])
        )

        assert backend.sent_json("POST", "/api/admin/shipments") == {
            "order_id": 4, "items": [{"order_item_id": 9, "quantity": 1}],
        }

    @pytest.mark.asyncio
    async def test_pick_item(self, api, backend):
        backend.on("POST", "/api/admin/shipments/items/5/pick", {
            "shipment_item": {"id": 5, "quantity": 1, "picked_at": "2024-05-01T10:00:00Z"},
        })
        item = await ShipmentService(api).pick_item(5)
        assert item.picked_at


class TestAddressAndWishlist:
    @pytest.mark.asyncio
    async def test_create_address_payload(self, api, backend):
        backend.on("POST", "/api/addresses", {"address": {
            "id": 1, "recipient_name": "Hanako", "postal_code": "100-0001", "prefecture": "Tokyo",
            "city": "Chiyoda", "address_line1": "1-1", "phone": "0312345678", "is_default": True,
        }})
        form = AddressForm(recipient_name="Hanako", postal_code="100-0001", prefecture="Tokyo",
                           city="Chiyoda", address_line1="1-1", phone="0312345678",
                           address_type="office", is_default=True)

        address = await AddressService(api).create(form)

        sent = backend.sent_json("POST", "/api/addresses")
        assert sent["address_type"] == "office"
        assert sent["is_default"] is True
        assert "address_line2" not in sent
        assert address.one_line == "〒100-0001 Tokyo Chiyoda 1-1"

    @pytest.mark.asyncio
    async def test_default_address_none_on_404(self, api):
        assert await AddressService(api).default() is None

    @pytest.mark.asyncio
    async def test_wishlist_check(self, api, backend):
        backend.on("GET", "/api/wishlists/check", {"is_favorite": True})
        assert await WishlistService(api).check(3) is True
        assert dict(backend.requests[-1].url.params) == {"product_id": "3"}


class TestImageService:
    @pytest.mark.asyncio
    async def test_upload_returns_url(self, api, backend):
        backend.on("POST", "/api/upload-image", {"image_url": "/storage/products/a.png"})
        url = await ImageService(api).upload("a.png", b"data", "image/png")
        assert url == "/storage/products/a.png"

    @pytest.mark.asyncio
    async def test_delete_sends_path(self, api, backend):
        backend.on("DELETE", "/api/delete-image", {"message": "deleted"})
        await ImageService(api).delete("/storage/products/a.png")
        assert backend.sent_json("DELETE", "/api/delete-image") == {"image_path": "/storage/products/a.png"}
