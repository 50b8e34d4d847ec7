"""Tests for the backend HTTP client."""

import httpx
import pytest

from storefront.api.client import ERROR_FIRST, ApiClient, ApiError, describe_error, extract_message

from conftest import API_URL


class TestExtractMessage:
    """Test error message extraction."""

    def test_message_wins(self):
        assert extract_message({"message": "Out of stock", "error": "x"}) == "Out of stock"

    def test_error_used_when_no_message(self):
        assert extract_message({"error": "Bad SKU"}) == "Bad SKU"

    def test_validation_errors_flattened(self):
        payload = {"errors": {"email": ["Email is taken."], "phone": ["Phone is invalid."]}}
        assert extract_message(payload) == "Email is taken. Phone is invalid."

    def test_error_first_order(self):
        assert extract_message({"message": "M", "error": "E"}, ERROR_FIRST) == "E"
        assert extract_message({"message": "M"}, ERROR_FIRST) == "M"

    def test_nothing_usable(self):
        assert extract_message({}) is None
        assert extract_message(None) is None
        assert extract_message(["message"]) is None


class TestDescribeError:
    def test_uses_backend_message(self):
        assert describe_error(ApiError("Stock is short", 422), "fallback") == "Stock is short"

    def test_rereads_body_with_given_order(self):
        exc = ApiError("Unprocessable", 422, {"message": "Unprocessable", "error": "SKU is inactive"})

        assert describe_error(exc, "fallback") == "Unprocessable"
        assert describe_error(exc, "fallback", ERROR_FIRST) == "SKU is inactive"

    def test_transport_failure_keeps_its_message(self):
        assert describe_error(ApiError("Connection refused"), "fallback", ERROR_FIRST) == "Connection refused"

    def test_falls_back(self):
        assert describe_error(ApiError(None, 500), "Failed to load") == "Failed to load"
        assert describe_error(ValueError("boom"), "Failed to load") == "Failed to load"


class TestApiClient:
    """Test requests made through the client."""

    @pytest.mark.asyncio
    async def test_default_headers(self, api, backend):
        backend.on("GET", "/api/products", {"products": []})
        await api.get("/api/products")

        request = backend.requests[-1]
        assert request.headers["Accept"] == "application/json"
        assert request.headers["X-Requested-With"] == "XMLHttpRequest"
        assert "X-XSRF-TOKEN" not in request.headers

    @pytest.mark.asyncio
    async def test_csrf_cookie_echoed_decoded(self, api, backend):
        backend.on("GET", "/sanctum/csrf-cookie", None, 204,
                   headers={"Set-Cookie": "XSRF-TOKEN=abc%3D%3D; Path=/"})
        backend.on("POST", "/api/logout", {"message": "ok"})

        await api.get("/sanctum/csrf-cookie")
        assert api.csrf_token() == "abc=="

        await api.post("/api/logout")
        assert backend.requests[-1].headers["X-XSRF-TOKEN"] == "abc=="

    @pytest.mark.asyncio
    async def test_cookies_carried_between_requests(self, api, backend):
        backend.on("POST", "/api/login", {"user": {"id": 1}},
                   headers={"Set-Cookie": "laravel_session=s1; Path=/"})
        backend.on("GET", "/api/cart", {"items": []})

        await api.post("/api/login", json={"email": "a@b.c", "password": "x"})
        await api.get("/api/cart")

        assert "laravel_session=s1" in backend.requests[-1].headers["Cookie"]

    @pytest.mark.asyncio
    async def test_none_params_dropped(self, api, backend):
        backend.on("GET", "/api/products", {"products": []})
        await api.get("/api/products", params={"search": "tuna", "category_id": None})

        assert dict(backend.requests[-1].url.params) == {"search": "tuna"}

    @pytest.mark.asyncio
    async def test_error_status_raises_with_message(self, api, backend):
        backend.on("POST", "/api/cart/add", {"message": "Not enough stock"}, 422)

        with pytest.raises(ApiError) as exc_info:
            await api.post("/api/cart/add", json={"product_sku_id": 1, "quantity": 9})

        assert exc_info.value.status_code == 422
        assert exc_info.value.message == "Not enough stock"
        assert exc_info.value.payload == {"message": "Not enough stock"}

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(self, api, backend):
        backend.on("DELETE", "/api/addresses/3", None, 204)
        assert await api.delete("/api/addresses/3") == {}

    @pytest.mark.asyncio
    async def test_transport_failure_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = ApiClient(base_url=API_URL, transport=httpx.MockTransport(handler))
        with pytest.raises(ApiError) as exc_info:
            await client.get("/api/user")

        assert exc_info.value.status_code is None
        assert describe_error(exc_info.value, "Backend unreachable") == "Backend unreachable"

    @pytest.mark.asyncio
    async def test_upload_sends_multipart(self, api, backend):
        backend.on("POST", "/api/upload-image", {"image_url": "/storage/a.png"})
        await api.post("/api/upload-image", files={"image": ("a.png", b"png", "image/png")})

        request = backend.requests[-1]
        assert request.headers["Content-Type"].startswith("multipart/form-data")
