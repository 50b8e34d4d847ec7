"""Customer-facing pages: catalog, cart, checkout, orders, addresses, wishlist, auth."""

import logging

from fasthtml.common import *
from pydantic import ValidationError

from .. import settings
from ..api.client import ApiError, describe_error
from ..api.products import SORT_OPTIONS
from ..models import AddressForm, AddressType, LoginCredentials, RegisterData
from .components import (
    address_summary,
    cart_item_row,
    choice_pairs,
    confirm_button,
    error_box,
    field,
    format_date,
    format_price,
    order_row,
    pagination_links,
    post_button,
    product_card,
    select_input,
    status_badge,
    text_input,
)
from .core import (
    blank_to_none,
    get_store,
    open_session,
    redirect,
    render,
    require_user,
    rt,
    to_float,
    to_int,
)

logger = logging.getLogger(__name__)

GENDERS = [("male", "Male"), ("female", "Female"), ("other", "Other")]
ADDRESS_TYPES = [(AddressType.HOME.value, "Home"), (AddressType.OFFICE.value, "Office"),
                 (AddressType.OTHER.value, "Other")]


# ==================== Catalog ====================


@rt("/")
async def home(request):
    """Shop front with active categories and the newest products."""
    session = await open_session(request)
    categories, products, error = [], [], None
    try:
        categories = await session.categories.list_active()
        products, _ = await session.products.list(sort_by="created_at", per_page=8)
    except ApiError as e:
        error = describe_error(e, "Failed to load the catalog")

    return render(
        session,
        "SAKANA.EC",
        P("An ocean of possibilities for your shopping."),
        A("Browse products", href="/products", cls="btn btn-primary"),
        error_box(error),
        Div(
            H2("Categories"),
            *[A(c.name, href=f"/products?category_id={c.id}", cls="btn btn-sm") for c in categories],
            cls="card",
        ) if categories else None,
        H2("New arrivals"),
        Div(*[product_card(p) for p in products], cls="grid"),
    )


@rt("/products")
async def product_list(request):
    session = await open_session(request)
    q = request.query_params
    filters = {
        "search": q.get("search", ""),
        "category_id": q.get("category_id", ""),
        "min_price": q.get("min_price", ""),
        "max_price": q.get("max_price", ""),
        "sort_by": q.get("sort_by", "created_at"),
    }

    products, pagination, categories, error = [], None, [], None
    try:
        categories = await session.categories.list_active()
        products, pagination = await session.products.list(
            search=filters["search"],
            category_id=to_int(filters["category_id"]),
            min_price=to_float(filters["min_price"]),
            max_price=to_float(filters["max_price"]),
            sort_by=filters["sort_by"] or None,
            per_page=settings.PRODUCTS_PER_PAGE,
            page=to_int(q.get("page"), 1),
        )
    except ApiError as e:
        error = describe_error(e, "Failed to load products")

    search_form = Form(
        field("Keyword", text_input("search", filters["search"])),
        field("Category", select_input(
            "category_id", [(c.id, c.name) for c in categories], filters["category_id"], blank="All",
        )),
        field("Min price", text_input("min_price", filters["min_price"], type="number", min="0")),
        field("Max price", text_input("max_price", filters["max_price"], type="number", min="0")),
        field("Sort", select_input("sort_by", SORT_OPTIONS.items(), filters["sort_by"])),
        Button("Search", type="submit", cls="btn btn-primary"),
        method="get", action="/products", cls="card filters",
    )

    return render(
        session,
        "Products",
        search_form,
        error_box(error),
        Div(*[product_card(p) for p in products], cls="grid")
        if products else P("No products matched your search."),
        pagination_links("/products", pagination, filters) if pagination else None,
    )


async def _product_page(session, product_id: int, error: str = None, status_code: int = 200):
    try:
        product = await session.products.get(product_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the product"), "error")
        return redirect(session, "/products")

    favourite = False
    if session.user:
        try:
            favourite = await session.wishlists.check(product.id)
        except ApiError as e:
            logger.error(f"Wishlist check failed for product {product.id}: {e}")

    def stock_text(sku):
        if sku.available_quantity is None:
            return ""
        if sku.available_quantity > 0:
            return f"{sku.available_quantity} in stock"
        return Span("Out of stock", cls="stock-out")

    def buy_controls(sku):
        if not session.user:
            return A("Log in to buy", href="/login")
        return Div(
            Form(
                Input(type="hidden", name="product_id", value=str(product.id)),
                Input(type="hidden", name="product_sku_id", value=str(sku.id)),
                Input(type="number", name="quantity", value="1", min="1", cls="quantity-input"),
                Button("Add to cart", type="submit", cls="btn btn-primary btn-sm"),
                method="post", action="/cart/add", cls="inline",
            ),
            " ",
            None if favourite else post_button("Add to wishlist", "/wishlists/add",
                                               product_id=product.id, product_sku_id=sku.id),
        )

    skus = [sku for sku in product.skus if sku.is_active]
    sku_rows = [
        Tr(
            Td(sku.variant_label),
            Td(format_price(sku.price)),
            Td(stock_text(sku)),
            Td(buy_controls(sku)),
        )
        for sku in skus
    ]

    return render(
        session,
        product.name,
        error_box(error),
        Div(
            *[Img(src=img.image_path, alt=img.alt_text or product.name, width="240")
              for img in product.images],
            P(product.category.name, cls="product-category") if product.category else None,
            P(product.description or ""),
            Small(f"Product code {product.product_code}"),
            cls="card",
        ),
        Div(
            Table(Thead(Tr(Th("Variant"), Th("Price"), Th("Stock"), Th(""))), Tbody(*sku_rows)),
            cls="card",
        ) if skus else P("This product has no purchasable variants."),
        Span("In your wishlist", cls="status-badge status-delivered") if favourite else None,
        status_code=status_code,
    )


@rt("/products/{product_id}")
async def product_detail(request, product_id: int):
    session = await open_session(request)
    return await _product_page(session, product_id)


# ==================== Cart ====================


@rt("/cart/add", methods=["POST"])
async def cart_add(request, product_id: str = "", product_sku_id: str = "", quantity: str = "1"):
    session = await open_session(request)
    if denied := require_user(session):
        return denied

    sku_id = to_int(product_sku_id)
    if sku_id is None:
        return await _product_page(session, to_int(product_id, 0), "Please choose a variant.", 400)

    if await session.cart.add_item(sku_id, to_int(quantity, 1)):
        session.flash("Added to your cart.")
        return redirect(session, f"/products/{product_id}" if product_id else "/cart")
    return await _product_page(session, to_int(product_id, 0), session.cart.error, 400)


def _cart_page(session, status_code: int = 200):
    cart = session.cart
    if not cart.items:
        return render(
            session, "Cart",
            error_box(cart.error),
            Div(P("Your cart is empty."), A("Find products", href="/products", cls="btn btn-primary"),
                cls="card"),
            status_code=status_code,
        )

    return render(
        session,
        "Cart",
        error_box(cart.error),
        Table(
            Thead(Tr(Th("Item"), Th("Unit price"), Th("Quantity"), Th("Subtotal"), Th(""))),
            Tbody(*[cart_item_row(item) for item in cart.items]),
            id="cart-table",
        ),
        Div(
            P(f"Subtotal: {format_price(cart.totals.subtotal)}"),
            P(f"Shipping: {format_price(cart.totals.shipping_fee)}"),
            H3(f"Total: {format_price(cart.totals.total_price)}"),
            A("Proceed to checkout", href="/checkout", cls="btn btn-primary"),
            " ",
            confirm_button("Empty cart", "/cart/clear", "Remove every item from the cart?",
                           cls="btn btn-danger"),
            cls="card",
        ),
        status_code=status_code,
    )


@rt("/cart")
async def cart_page(request):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    await session.cart.fetch_cart()
    return _cart_page(session)


@rt("/cart/update", methods=["POST"])
async def cart_update(request, product_sku_id: str = "", quantity: str = ""):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    if await session.cart.update_quantity(to_int(product_sku_id, 0), to_int(quantity, 1)):
        return redirect(session, "/cart")
    return _cart_page(session, 400)


@rt("/cart/remove", methods=["POST"])
async def cart_remove(request, product_sku_id: str = ""):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    if await session.cart.remove_item(to_int(product_sku_id, 0)):
        return redirect(session, "/cart")
    return _cart_page(session, 400)


@rt("/cart/clear", methods=["POST"])
async def cart_clear(request):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    if await session.cart.clear_cart():
        return redirect(session, "/cart")
    return _cart_page(session, 400)


# ==================== Checkout ====================


async def _checkout_page(session, selected_address: str = "", payment_method: str = "credit_card",
                         note: str = "", error: str = None, status_code: int = 200):
    addresses, methods = [], []
    try:
        addresses = await session.addresses.list()
    except ApiError as e:
        logger.error(f"Failed to load addresses: {e}")
    try:
        methods = await session.orders.payment_methods()
    except ApiError as e:
        logger.error(f"Failed to load payment methods: {e}")

    if not selected_address and addresses:
        default = await session.addresses.default()
        if default is None:
            default = next((a for a in addresses if a.is_default), addresses[0])
        selected_address = str(default.id)

    cart = session.cart
    if not cart.items:
        return render(
            session, "Checkout",
            error_box(error or cart.error),
            Div(P("There is nothing in your cart."),
                A("Find products", href="/products", cls="btn btn-primary"), cls="card"),
            status_code=status_code,
        )

    address_options = [
        Div(
            Label(
                Input(type="radio", name="address_id", value=str(a.id), checked=str(a.id) == selected_address),
                address_summary(a),
            ),
            cls="card",
        )
        for a in addresses
    ]

    return render(
        session,
        "Checkout",
        error_box(error),
        Div(
            H3("Order summary"),
            Ul(*[Li(f"{i.product.name} × {i.quantity} = {format_price(i.sku.price * i.quantity)}")
                 for i in cart.items]),
            P(f"Shipping: {format_price(cart.totals.shipping_fee)}"),
            H3(f"Total: {format_price(cart.totals.total_price)}"),
            cls="card",
        ),
        Form(
            H3("Ship to"),
            *(address_options or [P("No saved addresses. ", A("Add one", href="/addresses/new"))]),
            field("Payment method", select_input(
                "payment_method", choice_pairs(methods) or [("credit_card", "Credit card")], payment_method,
            )),
            field("Note", Textarea(note, name="note", rows="3")),
            Button("Place order", type="submit", cls="btn btn-primary"),
            method="post", action="/checkout", cls="card",
        ),
        status_code=status_code,
    )


@rt("/checkout", methods=["GET"])
async def checkout_page(request):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    await session.cart.fetch_cart()
    return await _checkout_page(session)


@rt("/checkout", methods=["POST"])
async def checkout_submit(request, address_id: str = "", payment_method: str = "credit_card", note: str = ""):
    session = await open_session(request)
    if denied := require_user(session):
        return denied

    if not session.cart.items:
        await session.cart.fetch_cart()

    def again(error):
        return _checkout_page(session, address_id, payment_method, note, error, 400)

    if not address_id:
        return await again("Please choose a delivery address.")
    if not session.cart.items:
        return await again("Your cart is empty.")

    try:
        result = await session.cart.checkout(to_int(address_id), payment_method, blank_to_none(note))
    except ApiError:
        return await again(session.cart.error)

    order = result.get("order") or {}
    logger.info(f"Order {order.get('order_number')} placed")
    session.flash(f"Thank you! Your order number is {order.get('order_number')}.")
    return redirect(session, f"/orders/{order['id']}" if order.get("id") else "/orders")


# ==================== Orders ====================


@rt("/orders")
async def my_orders(request, status: str = "", page: str = ""):
    session = await open_session(request)
    if denied := require_user(session):
        return denied

    orders, pagination, statuses, error = [], None, [], None
    try:
        statuses = await session.orders.statuses()
        orders, pagination = await session.orders.list_mine(
            status=status, per_page=settings.ADMIN_PER_PAGE, page=to_int(page, 1)
        )
    except ApiError as e:
        error = describe_error(e, "Failed to load your orders")

    return render(
        session,
        "Order history",
        Form(
            field("Status", select_input("status", choice_pairs(statuses), status, blank="All")),
            Button("Filter", type="submit", cls="btn"),
            method="get", action="/orders", cls="card filters",
        ),
        error_box(error),
        Table(
            Thead(Tr(Th("Order"), Th("Date"), Th("Status"), Th("Total"))),
            Tbody(*[order_row(o, f"/orders/{o.id}", statuses) for o in orders]),
        ) if orders else P("You have not placed any orders yet."),
        pagination_links("/orders", pagination, {"status": status}) if pagination else None,
    )


@rt("/orders/{order_id}")
async def my_order_detail(request, order_id: int):
    session = await open_session(request)
    if denied := require_user(session):
        return denied

    try:
        order = await session.orders.get(order_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the order"), "error")
        return redirect(session, "/orders")
    try:
        statuses = await session.orders.statuses()
    except ApiError as e:
        logger.error(f"Failed to load order statuses: {e}")
        statuses = []

    return render(
        session,
        f"Order {order.order_number}",
        Div(
            P("Status: ", status_badge(order.status, statuses)),
            P(f"Ordered on {format_date(order.order_date or order.created_at)}"),
            P(f"Payment: {order.payment_method}"),
            confirm_button("Cancel order", f"/orders/{order.id}/cancel",
                           "Cancel this order?", cls="btn btn-danger")
            if order.is_cancellable else None,
            cls="card",
        ),
        Div(
            H3("Items"),
            Table(
                Thead(Tr(Th("Product"), Th("Variant"), Th("Unit price"), Th("Qty"), Th("Subtotal"))),
                Tbody(*[
                    Tr(
                        Td(item.product_name),
                        Td(" / ".join(v for v in (item.size, item.color, item.other_attribute) if v) or "-"),
                        Td(format_price(item.purchase_unit_price)),
                        Td(str(item.quantity)),
                        Td(format_price(item.purchase_subtotal)),
                    )
                    for item in order.items
                ]),
            ),
            P(f"Subtotal: {format_price(order.subtotal)}"),
            P(f"Shipping: {format_price(order.shipping_fee)}"),
            H3(f"Total: {format_price(order.total_price)}"),
            cls="card",
        ),
        Div(
            H3("Delivery"),
            P(order.shipping_name),
            P(f"〒{order.shipping_postal_code} {order.shipping_prefecture} {order.shipping_city} "
              f"{order.shipping_address_line1} {order.shipping_address_line2 or ''}"),
            P(f"TEL {order.shipping_phone}"),
            *[P(f"Shipment {s.shipment_number}: ", status_badge(s.status),
                f" {s.shipping_carrier or ''} {s.tracking_number or ''}") for s in order.shipments],
            cls="card",
        ),
        A("← Back to orders", href="/orders"),
    )


@rt("/orders/{order_id}/cancel", methods=["POST"])
async def my_order_cancel(request, order_id: int):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    try:
        await session.orders.cancel(order_id)
        session.flash("Your order has been cancelled.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to cancel the order"), "error")
    return redirect(session, f"/orders/{order_id}")


# ==================== Addresses ====================


@rt("/addresses")
async def address_list(request):
    session = await open_session(request)
    if denied := require_user(session):
        return denied

    addresses, error = [], None
    try:
        addresses = await session.addresses.list()
    except ApiError as e:
        error = describe_error(e, "Failed to load your addresses")

    return render(
        session,
        "Addresses",
        error_box(error),
        A("Add address", href="/addresses/new", cls="btn btn-primary"),
        *[
            Div(
                address_summary(a),
                A("Edit", href=f"/addresses/{a.id}/edit", cls="btn btn-sm"),
                " ",
                post_button("Make default", f"/addresses/{a.id}/default") if not a.is_default else None,
                " ",
                confirm_button("Delete", f"/addresses/{a.id}/delete", "Delete this address?",
                               cls="btn btn-danger btn-sm"),
                cls="card",
            )
            for a in addresses
        ],
    )


def address_form_fields(values: dict):
    return [
        field("Recipient name", text_input("recipient_name", values.get("recipient_name"), required=True)),
        field("Recipient name (kana)", text_input("recipient_name_kana", values.get("recipient_name_kana"))),
        field("Postal code", text_input("postal_code", values.get("postal_code"), required=True)),
        field("Prefecture", text_input("prefecture", values.get("prefecture"), required=True)),
        field("City", text_input("city", values.get("city"), required=True)),
        field("Address line 1", text_input("address_line1", values.get("address_line1"), required=True)),
        field("Address line 2", text_input("address_line2", values.get("address_line2"))),
        field("Phone", text_input("phone", values.get("phone"), type="tel", required=True)),
        field("Type", select_input("address_type", ADDRESS_TYPES, values.get("address_type") or "home")),
        Label(Input(type="checkbox", name="is_default", checked=bool(values.get("is_default"))),
              " Use as default address"),
    ]


def parse_address_form(form) -> AddressForm:
    return AddressForm(
        recipient_name=form.get("recipient_name", "").strip(),
        recipient_name_kana=blank_to_none(form.get("recipient_name_kana")),
        postal_code=form.get("postal_code", "").strip(),
        prefecture=form.get("prefecture", "").strip(),
        city=form.get("city", "").strip(),
        address_line1=form.get("address_line1", "").strip(),
        address_line2=blank_to_none(form.get("address_line2")),
        phone=form.get("phone", "").strip(),
        address_type=form.get("address_type") or "home",
        is_default=form.get("is_default") is not None,
    )


def _address_page(session, title: str, action: str, values: dict, error: str = None, status_code: int = 200):
    return render(
        session,
        title,
        error_box(error),
        Form(
            *address_form_fields(values),
            Div(Button("Save", type="submit", cls="btn btn-primary"), " ",
                A("Cancel", href="/addresses", cls="btn")),
            method="post", action=action, cls="card",
        ),
        status_code=status_code,
    )


@rt("/addresses/new", methods=["GET"])
async def address_new(request):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    return _address_page(session, "New address", "/addresses/new", {})


@rt("/addresses/new", methods=["POST"])
async def address_create(request):
    session = await open_session(request)
    if denied := require_user(session):
        return denied

    form = await request.form()
    try:
        await session.addresses.create(parse_address_form(form))
    except (ApiError, ValidationError) as e:
        return _address_page(session, "New address", "/addresses/new", dict(form),
                             describe_error(e, "Failed to save the address"), 400)
    session.flash("Address saved.")
    return redirect(session, "/addresses")


@rt("/addresses/{address_id}/edit", methods=["GET"])
async def address_edit(request, address_id: int):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    try:
        address = await session.addresses.get(address_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the address"), "error")
        return redirect(session, "/addresses")
    return _address_page(session, "Edit address", f"/addresses/{address_id}/edit",
                         address.model_dump(mode="json"))


@rt("/addresses/{address_id}/edit", methods=["POST"])
async def address_update(request, address_id: int):
    session = await open_session(request)
    if denied := require_user(session):
        return denied

    form = await request.form()
    try:
        await session.addresses.update(address_id, parse_address_form(form))
    except (ApiError, ValidationError) as e:
        return _address_page(session, "Edit address", f"/addresses/{address_id}/edit", dict(form),
                             describe_error(e, "Failed to update the address"), 400)
    session.flash("Address updated.")
    return redirect(session, "/addresses")


@rt("/addresses/{address_id}/delete", methods=["POST"])
async def address_delete(request, address_id: int):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    try:
        await session.addresses.delete(address_id)
        session.flash("Address deleted.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to delete the address"), "error")
    return redirect(session, "/addresses")


@rt("/addresses/{address_id}/default", methods=["POST"])
async def address_make_default(request, address_id: int):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    try:
        await session.addresses.set_default(address_id)
        session.flash("Default address changed.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to change the default address"), "error")
    return redirect(session, "/addresses")


# ==================== Wishlist ====================


@rt("/wishlists")
async def wishlist_page(request):
    session = await open_session(request)
    if denied := require_user(session):
        return denied

    wishlists, error = [], None
    try:
        wishlists = await session.wishlists.list()
    except ApiError as e:
        error = describe_error(e, "Failed to load your wishlist")

    return render(
        session,
        "Wishlist",
        error_box(error),
        Div(*[
            Div(
                H3(A(w.product.name, href=f"/products/{w.product_id}")) if w.product
                else H3(A(f"Product #{w.product_id}", href=f"/products/{w.product_id}")),
                P(w.product_sku.variant_label) if w.product_sku else None,
                Small(f"Added {format_date(w.created_at)}"),
                Div(post_button("Remove", f"/wishlists/{w.id}/remove", cls="btn btn-danger btn-sm")),
                cls="card",
            )
            for w in wishlists
        ], cls="grid") if wishlists else P("Your wishlist is empty."),
    )


@rt("/wishlists/add", methods=["POST"])
async def wishlist_add(request, product_id: str = "", product_sku_id: str = ""):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    try:
        await session.wishlists.add(to_int(product_id, 0), to_int(product_sku_id))
        session.flash("Added to your wishlist.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to add to the wishlist"), "error")
    return redirect(session, f"/products/{product_id}")


@rt("/wishlists/{wishlist_id}/remove", methods=["POST"])
async def wishlist_remove(request, wishlist_id: int):
    session = await open_session(request)
    if denied := require_user(session):
        return denied
    try:
        await session.wishlists.remove(wishlist_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to remove from the wishlist"), "error")
    return redirect(session, "/wishlists")


# ==================== Auth ====================


def _login_page(session, email: str = "", error: str = None, status_code: int = 200):
    return render(
        session,
        "Log in",
        error_box(error),
        Form(
            field("Email", text_input("email", email, type="email", required=True)),
            field("Password", text_input("password", type="password", required=True)),
            Button("Log in", type="submit", cls="btn btn-primary"),
            P("No account yet? ", A("Register", href="/register")),
            method="post", action="/login", cls="card",
        ),
        status_code=status_code,
    )


@rt("/login", methods=["GET"])
async def login_page(request):
    session = await open_session(request)
    if session.user:
        return redirect(session, "/products")
    return _login_page(session)


@rt("/login", methods=["POST"])
async def login_submit(request, email: str = "", password: str = ""):
    session = await open_session(request)
    try:
        await session.auth.login(LoginCredentials(email=email, password=password))
    except ApiError as e:
        return _login_page(session, email, describe_error(e, "Login failed"), 401)
    await session.cart.fetch_count()
    return redirect(session, "/admin" if session.user.is_admin else "/products")


def _register_page(session, values: dict, error: str = None, status_code: int = 200):
    return render(
        session,
        "Register",
        error_box(error),
        Form(
            field("Name", text_input("name", values.get("name"), required=True)),
            field("Name (kana)", text_input("name_kana", values.get("name_kana"))),
            field("Gender", select_input("gender", GENDERS, values.get("gender"), blank="Select")),
            field("Birthday", text_input("birthday", values.get("birthday"), type="date", required=True)),
            field("Email", text_input("email", values.get("email"), type="email", required=True)),
            field("Phone", text_input("phone", values.get("phone"), type="tel")),
            field("Password", text_input("password", type="password", required=True)),
            field("Confirm password", text_input("password_confirmation", type="password", required=True)),
            Button("Create account", type="submit", cls="btn btn-primary"),
            method="post", action="/register", cls="card",
        ),
        status_code=status_code,
    )


@rt("/register", methods=["GET"])
async def register_page(request):
    session = await open_session(request)
    return _register_page(session, {})


@rt("/register", methods=["POST"])
async def register_submit(request):
    session = await open_session(request)
    form = await request.form()
    values = {k: v for k, v in form.items() if not k.startswith("password")}

    if form.get("password") != form.get("password_confirmation"):
        return _register_page(session, values, "The passwords do not match.", 400)

    try:
        data = RegisterData(
            name=form.get("name", ""),
            name_kana=blank_to_none(form.get("name_kana")),
            gender=form.get("gender", ""),
            birthday=form.get("birthday", ""),
            email=form.get("email", ""),
            phone=blank_to_none(form.get("phone")),
            password=form.get("password", ""),
            password_confirmation=form.get("password_confirmation", ""),
        )
        await session.auth.register(data)
    except ApiError as e:
        return _register_page(session, values, describe_error(e, "Registration failed"), 400)
    return redirect(session, "/")


@rt("/logout", methods=["POST"])
async def logout(request):
    session = await open_session(request)
    try:
        await session.auth.logout()
    except ApiError as e:
        logger.error(f"Logout call failed: {e}")
    store = get_store()
    store.drop(session.id)
    return redirect(store.get(None), "/")
