"""Per-visitor caches of server state.

AuthState remembers who is logged in; CartState mirrors the server's cart
and totals. Both are refreshed from backend responses and never compute
anything themselves.
"""

import logging
from typing import Any, Optional

from .api import AuthService, CartService
from .api.client import ERROR_FIRST, ApiError, describe_error
from .models import CartItem, CartTotals, LoginCredentials, RegisterData, User

logger = logging.getLogger(__name__)


class AuthState:
    """Cached login session for one visitor."""

    def __init__(self, service: AuthService):
        self.service = service
        self.user: Optional[User] = None
        self.loaded = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    async def load(self, force: bool = False) -> Optional[User]:
        """Look the user up once per session (or again when ``force`` is set)."""
        if self.loaded and not force:
            return self.user
        self.user = await self.service.get_user()
        self.loaded = True
        return self.user

    async def login(self, credentials: LoginCredentials) -> User:
        self.user = await self.service.login(credentials)
        self.loaded = True
        logger.info(f"User {self.user.id} logged in")
        return self.user

    async def register(self, data: RegisterData) -> User:
        self.user = await self.service.register(data)
        self.loaded = True
        logger.info(f"User {self.user.id} registered")
        return self.user

    async def logout(self) -> None:
        """End the session. The local cache is cleared even if the call fails."""
        try:
            await self.service.logout()
        finally:
            self.user = None
            self.loaded = True


class CartState:
    """Mirror of the server cart for one visitor.

    Every operation passes straight through to the cart endpoints and
    replaces the local copy with whatever the server answered. A failed call
    leaves the previous copy untouched and records an error message.
    """

    def __init__(self, service: CartService, auth: AuthState):
        self.service = service
        self.auth = auth
        self.items: list[CartItem] = []
        self.totals = CartTotals()
        self.item_count = 0
        self.loading = False
        self.error: Optional[str] = None

    def _reset(self) -> None:
        self.items = []
        self.totals = CartTotals()
        self.item_count = 0

    def _apply(self, cart) -> None:
        self.items = cart.items
        self.totals = cart.totals
        self.item_count = cart.totals.item_count

    async def fetch_cart(self) -> None:
        if not self.auth.is_authenticated:
            self._reset()
            return

        self.loading = True
        self.error = None
        try:
            self._apply(await self.service.get())
        except ApiError as e:
            self.error = describe_error(e, "Failed to load cart")
        finally:
            self.loading = False

    async def fetch_count(self) -> None:
        """Refresh only the item count used by the navigation bar."""
        if not self.auth.is_authenticated:
            self.item_count = 0
            return

        try:
            self.item_count = await self.service.count()
        except ApiError as e:
            logger.error(f"Failed to fetch cart count: {e}")

    async def add_item(self, product_sku_id: int, quantity: int = 1) -> bool:
        self.error = None
        try:
            self._apply(await self.service.add(product_sku_id, quantity))
        except ApiError as e:
            self.error = describe_error(e, "Failed to add the item to the cart", ERROR_FIRST)
            return False
        return True

    async def update_quantity(self, product_sku_id: int, quantity: int) -> bool:
        self.error = None
        try:
            self._apply(await self.service.update(product_sku_id, quantity))
        except ApiError as e:
            self.error = describe_error(e, "Failed to update the quantity", ERROR_FIRST)
            return False
        return True

    async def remove_item(self, product_sku_id: int) -> bool:
        self.error = None
        try:
            self._apply(await self.service.remove(product_sku_id))
        except ApiError as e:
            self.error = describe_error(e, "Failed to remove the item from the cart", ERROR_FIRST)
            return False
        return True

    async def clear_cart(self) -> bool:
        self.error = None
        try:
            self._apply(await self.service.clear())
        except ApiError as e:
            self.error = describe_error(e, "Failed to clear the cart", ERROR_FIRST)
            return False
        return True

    async def checkout(
        self, address_id: int, payment_method: str, note: Optional[str] = None
    ) -> dict[str, Any]:
        """Place the order. On failure the error is recorded and re-raised."""
        self.error = None
        try:
            result = await self.service.checkout(address_id, payment_method, note)
        except ApiError as e:
            self.error = describe_error(e, "Failed to place the order", ERROR_FIRST)
            raise
        self._reset()
        return result
