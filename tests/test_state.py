"""Tests for the per-visitor auth and cart caches."""

import pytest

from storefront.api import AuthService, CartService
from storefront.api.client import ApiError
from storefront.state import AuthState, CartState

from conftest import CUSTOMER, cart_item, cart_payload


@pytest.fixture
def auth(api):
    return AuthState(AuthService(api))


@pytest.fixture
def cart(api, auth):
    return CartState(CartService(api), auth)


class TestAuthState:
    @pytest.mark.asyncio
    async def test_load_is_cached(self, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        await auth.load()

        assert auth.is_authenticated
        assert len(backend.calls("GET", "/api/user")) == 1

    @pytest.mark.asyncio
    async def test_force_reload(self, auth, backend):
        await auth.load()
        backend.user = CUSTOMER
        await auth.load(force=True)
        assert auth.user.id == CUSTOMER["id"]

    @pytest.mark.asyncio
    async def test_logout_clears_user_even_on_failure(self, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        backend.on("POST", "/api/logout", {"message": "Server error"}, 500)

        with pytest.raises(ApiError):
            await auth.logout()

        assert auth.user is None
        assert not auth.is_authenticated


class TestCartState:
    """Cart mirror: server responses replace local state, failures leave it alone."""

    @pytest.mark.asyncio
    async def test_fetch_anonymous_resets_without_calling(self, cart, backend):
        cart.item_count = 4
        await cart.fetch_cart()

        assert cart.items == []
        assert cart.item_count == 0
        assert backend.calls("GET", "/api/cart") == []

    @pytest.mark.asyncio
    async def test_add_item_adopts_server_cart(self, cart, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        backend.on("POST", "/api/cart/add", cart_payload([cart_item(quantity=2)], subtotal=2400, shipping_fee=500))

        assert await cart.add_item(10, 2) is True

        assert cart.item_count == 2
        assert cart.totals.total_price == 2900
        assert cart.items[0].sku.sku_code == "SKU-10"
        assert cart.error is None

    @pytest.mark.asyncio
    async def test_failed_update_keeps_previous_state(self, cart, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        backend.on("GET", "/api/cart", cart_payload([cart_item(quantity=1)], subtotal=1200))
        await cart.fetch_cart()
        backend.on("PUT", "/api/cart/update", {"message": "Only 5 left in stock"}, 422)

        assert await cart.update_quantity(10, 9) is False

        assert cart.error == "Only 5 left in stock"
        assert cart.items[0].quantity == 1
        assert cart.totals.subtotal == 1200

    @pytest.mark.asyncio
    async def test_mutation_prefers_error_field(self, cart, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        backend.on("POST", "/api/cart/add", {"error": "SKU is not for sale", "message": "Unprocessable"}, 422)

        assert await cart.add_item(10, 1) is False
        assert cart.error == "SKU is not for sale"

    @pytest.mark.asyncio
    async def test_fetch_prefers_message_field(self, cart, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        backend.on("GET", "/api/cart", {"error": "E_CART", "message": "Cart is unavailable"}, 503)

        await cart.fetch_cart()
        assert cart.error == "Cart is unavailable"

    @pytest.mark.asyncio
    async def test_failure_without_message_uses_fallback(self, cart, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        backend.on("DELETE", "/api/cart/remove", None, 500)

        assert await cart.remove_item(10) is False
        assert cart.error == "Failed to remove the item from the cart"

    @pytest.mark.asyncio
    async def test_checkout_resets_cart(self, cart, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        backend.on("GET", "/api/cart", cart_payload([cart_item()], subtotal=1200))
        await cart.fetch_cart()
        backend.on("POST", "/api/cart/checkout", {"order": {"id": 4, "order_number": "ORD-4"}})

        result = await cart.checkout(1, "credit_card")

        assert result["order"]["id"] == 4
        assert cart.items == []
        assert cart.item_count == 0

    @pytest.mark.asyncio
    async def test_checkout_failure_reraises_and_keeps_cart(self, cart, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        backend.on("GET", "/api/cart", cart_payload([cart_item()], subtotal=1200))
        await cart.fetch_cart()
        backend.on("POST", "/api/cart/checkout", {"error": "Stock changed"}, 409)

        with pytest.raises(ApiError):
            await cart.checkout(1, "credit_card")

        assert cart.error == "Stock changed"
        assert len(cart.items) == 1

    @pytest.mark.asyncio
    async def test_fetch_count_error_is_logged_not_raised(self, cart, auth, backend):
        backend.user = CUSTOMER
        await auth.load()
        cart.item_count = 3
        backend.on("GET", "/api/cart/count", None, 500)

        await cart.fetch_count()
        assert cart.item_count == 3
