"""Tests for the customer-facing pages."""

from storefront.web import get_store

from conftest import ADMIN, cart_item, cart_payload

PRODUCT = {
    "id": 3,
    "product_code": "P-3",
    "name": "Bluefin Tuna",
    "skus": [{"id": 10, "sku_code": "SKU-10", "price": 1200, "size": "L", "available_quantity": 5}],
}

ENABLED_CART_BUTTON = '<button type="submit" class="btn btn-primary btn-sm">Add to cart</button>'

ADDRESS_FORM = {
    "recipient_name": "Hanako",
    "postal_code": "100-0001",
    "prefecture": "Tokyo",
    "city": "Chiyoda",
    "address_line1": "1-1",
    "phone": "0312345678",
    "address_type": "office",
}


class TestGuards:
    def test_anonymous_cart_redirects_to_login(self, web):
        response = web.get("/cart", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    def test_session_cookie_set(self, web):
        response = web.get("/login")
        assert response.status_code == 200
        assert "session_id" in response.cookies

    def test_customer_cannot_open_admin(self, web, as_customer):
        response = web.get("/admin", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/"

        page = web.get("/")
        assert "Administrator access is required." in page.text


class TestCatalog:
    def test_product_list(self, web, backend):
        backend.on("GET", "/api/products", {"products": [PRODUCT], "pagination": {"total": 1}})
        backend.on("GET", "/api/public/categories", {"categories": []})

        response = web.get("/products?search=tuna")

        assert response.status_code == 200
        assert "Bluefin Tuna" in response.text
        assert backend.calls("GET", "/api/products")[-1].url.params["search"] == "tuna"

    def test_product_detail(self, web, backend, as_customer):
        backend.on("GET", "/api/products/3", {"product": PRODUCT})

        response = web.get("/products/3")

        assert response.status_code == 200
        assert "¥1,200" in response.text
        assert "Add to cart" in response.text

    def test_stock_hidden_when_backend_omits_it(self, web, backend, as_customer):
        sku = {k: v for k, v in PRODUCT["skus"][0].items() if k != "available_quantity"}
        backend.on("GET", "/api/products/3", {"product": {**PRODUCT, "skus": [sku]}})

        response = web.get("/products/3")

        assert "Out of stock" not in response.text
        assert "in stock" not in response.text
        assert ENABLED_CART_BUTTON in response.text

    def test_sold_out_sku_can_still_be_tried(self, web, backend, as_customer):
        sku = {**PRODUCT["skus"][0], "available_quantity": 0}
        backend.on("GET", "/api/products/3", {"product": {**PRODUCT, "skus": [sku]}})

        response = web.get("/products/3")

        assert "Out of stock" in response.text
        assert ENABLED_CART_BUTTON in response.text

    def test_wishlist_button_carries_sku(self, web, backend, as_customer):
        backend.on("GET", "/api/products/3", {"product": PRODUCT})
        backend.on("GET", "/api/wishlists/check", {"is_favorite": False})

        response = web.get("/products/3")

        assert 'action="/wishlists/add"' in response.text
        assert response.text.count('name="product_sku_id" value="10"') == 2

    def test_add_to_wishlist_sends_sku(self, web, backend, as_customer):
        backend.on("POST", "/api/wishlists", {"wishlist": {"id": 1, "product_id": 3, "product_sku_id": 10}})

        response = web.post("/wishlists/add", data={"product_id": "3", "product_sku_id": "10"},
                            follow_redirects=False)

        assert response.headers["location"] == "/products/3"
        assert backend.sent_json("POST", "/api/wishlists") == {"product_id": 3, "product_sku_id": 10}


class TestCart:
    def test_add_to_cart_redirects_back(self, web, backend, as_customer):
        backend.on("POST", "/api/cart/add", cart_payload([cart_item()], subtotal=1200))

        response = web.post("/cart/add", data={"product_id": "3", "product_sku_id": "10", "quantity": "1"},
                            follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/products/3"
        assert backend.sent_json("POST", "/api/cart/add") == {"product_sku_id": 10, "quantity": 1}

    def test_failed_add_shows_backend_message(self, web, backend, as_customer):
        backend.on("GET", "/api/products/3", {"product": PRODUCT})
        backend.on("POST", "/api/cart/add", {"message": "Only 5 left in stock"}, 422)

        response = web.post("/cart/add", data={"product_id": "3", "product_sku_id": "10", "quantity": "9"})

        assert response.status_code == 400
        assert "Only 5 left in stock" in response.text

    def test_cart_page_shows_server_totals(self, web, backend, as_customer):
        backend.on("GET", "/api/cart", cart_payload([cart_item(quantity=2)], subtotal=2400, shipping_fee=500))

        response = web.get("/cart")

        assert response.status_code == 200
        assert "¥2,900" in response.text


class TestCheckout:
    def test_requires_address(self, web, backend, as_customer):
        backend.on("GET", "/api/cart", cart_payload([cart_item()], subtotal=1200))

        response = web.post("/checkout", data={"payment_method": "credit_card"})

        assert response.status_code == 400
        assert "Please choose a delivery address." in response.text
        assert backend.calls("POST", "/api/cart/checkout") == []

    def test_empty_cart_rejected(self, web, backend, as_customer):
        backend.on("GET", "/api/cart", cart_payload())

        response = web.post("/checkout", data={"address_id": "1", "payment_method": "credit_card"})

        assert response.status_code == 400
        assert backend.calls("POST", "/api/cart/checkout") == []

    def test_places_order(self, web, backend, as_customer):
        backend.on("GET", "/api/cart", cart_payload([cart_item()], subtotal=1200))
        backend.on("POST", "/api/cart/checkout", {"order": {"id": 4, "order_number": "ORD-4"}})

        response = web.post("/checkout", data={"address_id": "1", "payment_method": "bank_transfer", "note": ""},
                            follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/orders/4"
        assert backend.sent_json("POST", "/api/cart/checkout") == {
            "address_id": 1, "payment_method": "bank_transfer",
        }


    def test_backend_default_address_preselected(self, web, backend, as_customer):
        home = {"id": 1, **ADDRESS_FORM}
        office = {"id": 2, **ADDRESS_FORM, "city": "Minato"}
        backend.on("GET", "/api/cart", cart_payload([cart_item()], subtotal=1200))
        backend.on("GET", "/api/addresses", {"addresses": [home, office]})
        backend.on("GET", "/api/addresses/default", {"address": office})

        response = web.get("/checkout")

        assert response.status_code == 200
        assert 'name="address_id" value="2" checked' in response.text
        assert 'name="address_id" value="1" checked' not in response.text


class TestAddresses:
    def test_create_address(self, web, backend, as_customer):
        backend.on("POST", "/api/addresses", {"address": {"id": 1, **ADDRESS_FORM}})

        response = web.post("/addresses/new", data={**ADDRESS_FORM, "is_default": "on"}, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/addresses"
        sent = backend.sent_json("POST", "/api/addresses")
        assert sent["address_type"] == "office"
        assert sent["is_default"] is True

    def test_validation_errors_shown(self, web, backend, as_customer):
        backend.on("POST", "/api/addresses", {"errors": {"postal_code": ["Postal code is invalid."]}}, 422)

        response = web.post("/addresses/new", data={**ADDRESS_FORM, "postal_code": "x"})

        assert response.status_code == 400
        assert "Postal code is invalid." in response.text
        assert 'value="Chiyoda"' in response.text


class TestAuth:
    def test_admin_login_goes_to_dashboard(self, web, backend):
        backend.on("GET", "/sanctum/csrf-cookie", None, 204)
        backend.on("POST", "/api/login", {"user": ADMIN})

        response = web.post("/login", data={"email": ADMIN["email"], "password": "secret"}, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/admin"

    def test_bad_credentials(self, web, backend):
        backend.on("GET", "/sanctum/csrf-cookie", None, 204)
        backend.on("POST", "/api/login", {"message": "These credentials do not match our records."}, 422)

        response = web.post("/login", data={"email": "x@example.com", "password": "nope"})

        assert response.status_code == 401
        assert "These credentials do not match our records." in response.text

    def test_logout(self, web, backend, as_customer):
        backend.on("POST", "/api/logout", {"message": "Logged out"})

        response = web.post("/logout", follow_redirects=False)

        assert response.status_code == 303
        assert len(backend.calls("POST", "/api/logout")) == 1

    def test_logout_starts_a_new_session(self, web, backend, as_customer):
        web.get("/")
        old_id = web.cookies.get("session_id")
        backend.on("POST", "/api/logout", {"message": "Logged out"})

        response = web.post("/logout", follow_redirects=False)

        new_id = response.cookies.get("session_id")
        assert new_id and new_id != old_id
        assert old_id not in get_store().sessions
