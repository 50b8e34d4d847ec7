"""Shared UI components for the storefront and admin pages."""

from typing import Optional
from urllib.parse import urlencode

from fasthtml.common import *

from ..models import Address, CartItem, Choice, Order, Pagination, Product, User

STYLES = """
* { box-sizing: border-box; }
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    margin: 0; background: #f1f5f9; color: #1e293b;
}
a { color: #0369a1; }
.main-header { background: #0c4a6e; color: white; }
.nav-container { max-width: 1200px; margin: 0 auto; padding: 0.75rem 1rem;
    display: flex; align-items: center; justify-content: space-between; }
.nav-container a { color: white; text-decoration: none; margin-left: 1rem; }
.logo { font-weight: 700; font-size: 1.2rem; margin-left: 0 !important; }
.main-content { max-width: 1200px; margin: 1rem auto; padding: 0 1rem; }
.main-footer { text-align: center; color: #64748b; font-size: 0.8rem; padding: 2rem 0; }

.card { background: white; border-radius: 12px; box-shadow: 0 1px 3px rgba(0,0,0,0.1);
    padding: 1rem; margin-bottom: 1rem; }
.grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(240px, 1fr)); gap: 1rem; }
.product-card img { width: 100%; height: 180px; object-fit: cover; border-radius: 8px; }
.product-price { font-weight: 600; }
.product-category { color: #64748b; font-size: 0.8rem; margin-left: 0.5rem; }

table { width: 100%; border-collapse: collapse; background: white; }
th, td { padding: 0.5rem; border-bottom: 1px solid #e2e8f0; text-align: left; font-size: 0.9rem; }

.btn { padding: 0.4rem 0.9rem; border: none; border-radius: 8px; cursor: pointer;
    background: #e2e8f0; font-size: 0.85rem; text-decoration: none; color: #1e293b;
    display: inline-block; }
.btn-primary { background: #0369a1; color: white; }
.btn-danger { background: #dc2626; color: white; }
.btn-sm { padding: 0.2rem 0.5rem; font-size: 0.75rem; }
.btn:disabled { opacity: 0.5; cursor: not-allowed; }
.inline { display: inline; }

.field { margin-bottom: 0.75rem; }
.field label { display: block; font-size: 0.85rem; margin-bottom: 0.25rem; }
.field input, .field select, .field textarea { width: 100%; padding: 0.5rem;
    border: 1px solid #cbd5e1; border-radius: 6px; }
.filters { display: flex; gap: 0.5rem; flex-wrap: wrap; align-items: flex-end; }
.filters .field { margin-bottom: 0; }

.flash { padding: 0.6rem 1rem; border-radius: 8px; margin-bottom: 1rem; }
.flash.success { background: #dcfce7; color: #166534; }
.flash.error { background: #fee2e2; color: #991b1b; }

.status-badge { display: inline-block; padding: 0.15rem 0.5rem; border-radius: 9999px;
    font-size: 0.75rem; font-weight: 500; background: #f1f5f9; }
.status-pending, .status-preparing { background: #fef9c3; color: #854d0e; }
.status-confirmed, .status-packed { background: #dbeafe; color: #1e40af; }
.status-processing { background: #f3e8ff; color: #6b21a8; }
.status-shipped { background: #e0e7ff; color: #3730a3; }
.status-delivered { background: #dcfce7; color: #166534; }
.status-completed { background: #f1f5f9; color: #1e293b; }
.status-cancelled { background: #fee2e2; color: #991b1b; }
.stock-low { color: #b45309; font-weight: 600; }
.stock-out { color: #dc2626; font-weight: 600; }
.pagination { margin-top: 1rem; display: flex; gap: 0.5rem; align-items: center; }
"""

ADMIN_MENU = [
    ("Dashboard", "/admin"),
    ("Orders", "/admin/orders"),
    ("Shipments", "/admin/shipments"),
    ("Inventory", "/admin/inventories"),
    ("Products", "/admin/products"),
    ("Categories", "/admin/categories"),
]


def format_price(value: Optional[float]) -> str:
    """Format a yen amount, e.g. 1200 -> '¥1,200'."""
    if value is None:
        return "-"
    return f"¥{value:,.0f}"


def format_date(value: Optional[str]) -> str:
    return value[:10] if value else "-"


def page_layout(
    title: str,
    *content,
    user: Optional[User] = None,
    cart_count: int = 0,
    flashes: list = None,
):
    """Create a page with common layout."""
    flashes = flashes or []

    nav_items = [A("Products", href="/products")]
    if user:
        nav_items += [
            A(f"Cart ({cart_count})", href="/cart", id="cart-count"),
            A("Orders", href="/orders"),
            A("Wishlist", href="/wishlists"),
            A("Addresses", href="/addresses"),
        ]
        if user.is_admin:
            nav_items.append(A("Admin", href="/admin"))
        nav_items.append(
            Form(
                Button("Log out", type="submit", cls="btn btn-sm"),
                method="post", action="/logout", cls="inline",
            )
        )
    else:
        nav_items += [A("Log in", href="/login"), A("Register", href="/register")]

    return Html(
        Head(
            Title(f"{title} | SAKANA.EC"),
            Meta(charset="utf-8"),
            Meta(name="viewport", content="width=device-width, initial-scale=1"),
            Script(src="https://unpkg.com/htmx.org@1.9.10"),
            Style(STYLES),
        ),
        Body(
            Header(
                Nav(
                    A("SAKANA.EC", href="/", cls="logo"),
                    Div(*nav_items, cls="nav-links"),
                    cls="nav-container",
                ),
                cls="main-header",
            ),
            Main(
                *[Div(message, cls=f"flash {kind}") for kind, message in flashes],
                H1(title),
                *content,
                cls="main-content",
            ),
            Footer(P("SAKANA.EC storefront"), cls="main-footer"),
        ),
    )


def admin_nav():
    return Div(*[A(label, href=href, cls="btn btn-sm") for label, href in ADMIN_MENU], cls="card")


def error_box(message: Optional[str]):
    """Inline error message, or nothing."""
    return Div(message, cls="flash error") if message else None


def field(label: str, control):
    return Div(Label(label), control, cls="field")


def text_input(name: str, value=None, type: str = "text", required: bool = False, **kwargs):
    return Input(
        type=type,
        name=name,
        value="" if value is None else str(value),
        required=required,
        **kwargs,
    )


def select_input(name: str, choices: list, selected=None, blank: Optional[str] = None):
    """A select box from (value, label) pairs."""
    selected = "" if selected is None else str(selected)
    options = [Option(blank, value="")] if blank is not None else []
    options += [
        Option(label, value=str(value), selected=str(value) == selected)
        for value, label in choices
    ]
    return Select(*options, name=name)


def choice_pairs(choices: list[Choice]) -> list[tuple[str, str]]:
    return [(c.value, c.label) for c in choices]


def status_badge(status: str, choices: list[Choice] = None):
    """Colour-coded status label, using the backend's label when known."""
    label = next((c.label for c in choices or [] if c.value == status), status)
    return Span(label, cls=f"status-badge status-{status}")


def confirm_button(label: str, action: str, question: str, cls: str = "btn btn-sm", **hidden):
    """A single-button POST form that asks for confirmation first."""
    return Form(
        *[Input(type="hidden", name=k, value=str(v)) for k, v in hidden.items()],
        Button(label, type="submit", cls=cls),
        method="post",
        action=action,
        onsubmit=f"return confirm('{question}')",
        cls="inline",
    )


def post_button(label: str, action: str, cls: str = "btn btn-sm", **hidden):
    return Form(
        *[Input(type="hidden", name=k, value=str(v)) for k, v in hidden.items()],
        Button(label, type="submit", cls=cls),
        method="post",
        action=action,
        cls="inline",
    )


def pagination_links(base_url: str, pagination: Pagination, params: dict = None):
    """Previous/next links that keep the current filters."""
    if pagination.last_page <= 1:
        return None
    params = {k: v for k, v in (params or {}).items() if v not in (None, "")}

    def link(label: str, page: int):
        return A(label, href=f"{base_url}?{urlencode({**params, 'page': page})}", cls="btn btn-sm")

    return Div(
        link("« Prev", pagination.current_page - 1) if pagination.current_page > 1 else None,
        Span(f"Page {pagination.current_page} of {pagination.last_page} ({pagination.total} items)"),
        link("Next »", pagination.current_page + 1)
        if pagination.current_page < pagination.last_page else None,
        cls="pagination",
    )


def product_card(product: Product):
    """Render a product card."""
    image = product.primary_image
    return Div(
        Img(src=image.image_path, alt=image.alt_text or product.name) if image else None,
        H3(A(product.name, href=f"/products/{product.id}"), cls="product-name"),
        P(
            Span(f"from {format_price(product.min_price)}" if product.min_price is not None else "",
                 cls="product-price"),
            Span(product.category.name if product.category else "", cls="product-category"),
        ),
        cls="card product-card",
        id=f"product-{product.id}",
    )


def cart_item_row(item: CartItem):
    """Render a cart item row."""
    variant = " / ".join(v for v in (item.sku.size, item.sku.color, item.sku.other_attribute) if v)
    return Tr(
        Td(A(item.product.name, href=f"/products/{item.product.id}"), Br(), Small(variant or item.sku.sku_code)),
        Td(format_price(item.sku.price)),
        Td(
            Form(
                Input(type="hidden", name="product_sku_id", value=str(item.product_sku_id)),
                Input(type="number", name="quantity", value=str(item.quantity), min="1",
                      max=str(max(item.available_quantity, item.quantity)), cls="quantity-input"),
                Button("Update", type="submit", cls="btn btn-sm"),
                method="post", action="/cart/update", cls="inline",
            ),
            Small(" Not enough stock", cls="stock-out") if not item.is_available else None,
        ),
        Td(format_price(item.sku.price * item.quantity)),
        Td(post_button("Remove", "/cart/remove", cls="btn btn-danger btn-sm",
                       product_sku_id=item.product_sku_id)),
        id=f"cart-item-{item.product_sku_id}",
    )


def order_row(order: Order, href: str, statuses: list[Choice] = None, show_customer: bool = False):
    """Render an order table row."""
    return Tr(
        Td(A(order.order_number, href=href)),
        Td(format_date(order.order_date or order.created_at)),
        Td(order.user.name if order.user else "-") if show_customer else None,
        Td(status_badge(order.status, statuses)),
        Td(format_price(order.total_price)),
    )


def address_summary(address: Address):
    return Div(
        Strong(address.recipient_name),
        Span(" (default)", cls="status-badge status-delivered") if address.is_default else None,
        P(address.one_line),
        P(f"TEL {address.phone}"),
    )


def stat_card(title: str, value: str, subtitle: str = None):
    """Render a statistics card."""
    return Div(
        H4(title, cls="stat-title"),
        P(value, cls="stat-value"),
        P(subtitle, cls="stat-subtitle") if subtitle else None,
        cls="card stat-card",
    )
