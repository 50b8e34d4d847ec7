"""Shared fixtures: an in-process fake backend behind httpx.MockTransport."""

import json

import httpx
import pytest
from starlette.testclient import TestClient

from storefront.api.client import ApiClient
from storefront.settings import Settings

API_URL = "http://api.test"

ADMIN = {"id": 1, "name": "Admin", "email": "admin@example.com", "role": "admin"}
CUSTOMER = {"id": 2, "name": "Hanako", "email": "hanako@example.com", "role": "customer"}


def cart_payload(items=(), subtotal=0, shipping_fee=0):
    """A cart response in the backend's shape."""
    items = list(items)
    return {
        "items": items,
        "totals": {
            "subtotal": subtotal,
            "shipping_fee": shipping_fee,
            "total_price": subtotal + shipping_fee,
            "item_count": sum(i["quantity"] for i in items),
        },
    }


def cart_item(sku_id=10, quantity=1, price=1200):
    return {
        "product_sku_id": sku_id,
        "quantity": quantity,
        "product": {"id": 3, "name": "Tuna", "product_code": "P-3"},
        "sku": {"id": sku_id, "sku_code": f"SKU-{sku_id}", "price": price, "size": "L"},
        "available_quantity": 5,
        "is_available": True,
    }


class FakeBackend:
    """Routes requests by (method, path) to canned JSON and records them."""

    def __init__(self):
        self.user = None
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, json=None, status: int = 200, headers=None):
        self.routes[(method, path)] = (status, json, headers or {})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.routes:
            status, body, headers = self.routes[key]
            return httpx.Response(status, json=body, headers=headers)
        if key == ("GET", "/api/user"):
            if self.user is None:
                return httpx.Response(401, json={"message": "Unauthenticated."})
            return httpx.Response(200, json={"user": self.user})
        return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def sent_json(self, method: str, path: str):
        """Body of the last matching request, decoded."""
        return json.loads(self.calls(method, path)[-1].content)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api(backend):
    return ApiClient(base_url=API_URL, transport=httpx.MockTransport(backend))


@pytest.fixture
def web(backend):
    """Test client for the web app wired to the fake backend."""
    from storefront.web import app, configure

    configure(Settings(api_url=API_URL), transport=httpx.MockTransport(backend))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def as_customer(backend):
    backend.user = CUSTOMER
    return backend


@pytest.fixture
def as_admin(backend):
    backend.user = ADMIN
    return backend
