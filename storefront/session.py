"""Visitor sessions: one backend cookie jar and state cache per browser."""

import logging
import time
import uuid
from typing import Optional

import httpx

from .api import (
    AddressService,
    ApiClient,
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
from .settings import Settings
from .state import AuthState, CartState

logger = logging.getLogger(__name__)


class UserSession:
    """Everything the web layer needs to act on behalf of one visitor."""

    def __init__(self, session_id: str, client: ApiClient):
        self.id = session_id
        self.client = client

        self.auth_api = AuthService(client)
        self.products = ProductService(client)
        self.categories = CategoryService(client)
        self.inventory = InventoryService(client)
        self.orders = OrderService(client)
        self.shipments = ShipmentService(client)
        self.cart_api = CartService(client)
        self.addresses = AddressService(client)
        self.wishlists = WishlistService(client)
        self.images = ImageService(client)

        self.auth = AuthState(self.auth_api)
        self.cart = CartState(self.cart_api, self.auth)
        self._flash: list[tuple[str, str]] = []
        self.last_seen = time.monotonic()

    @property
    def user(self):
        return self.auth.user

    def flash(self, message: str, kind: str = "success") -> None:
        """Queue a message for the next rendered page."""
        self._flash.append((kind, message))

    def pop_flash(self) -> list[tuple[str, str]]:
        messages, self._flash = self._flash, []
        return messages


class SessionStore:
    """In-memory session registry keyed by the session cookie.

    Only ids issued here are honoured; an unknown cookie value gets a fresh
    session. Sessions idle for longer than ``session_max_age`` are dropped.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport
        self.sessions: dict[str, UserSession] = {}

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def get(self, session_id: Optional[str], now: Optional[float] = None) -> UserSession:
        """Get the session for ``session_id``, or start a new one."""
        now = time.monotonic() if now is None else now
        self.expire(now)

        session = self.sessions.get(session_id) if session_id else None
        if session is None:
            session_id = self.new_id()
            client = ApiClient(
                base_url=self.settings.api_url,
                timeout=self.settings.api_timeout,
                transport=self.transport,
            )
            session = self.sessions[session_id] = UserSession(session_id, client)
            logger.debug(f"Created session {session_id[:8]}...")
        session.last_seen = now
        return session

    def expire(self, now: Optional[float] = None) -> None:
        """Drop sessions that have been idle past the cookie lifetime."""
        now = time.monotonic() if now is None else now
        stale = [
            sid for sid, s in self.sessions.items()
            if now - s.last_seen > self.settings.session_max_age
        ]
        for sid in stale:
            self.drop(sid)
        if stale:
            logger.info(f"Expired {len(stale)} idle sessions")

    def drop(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)
