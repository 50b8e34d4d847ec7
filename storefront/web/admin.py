"""Admin console pages.

Every action here is a single backend call; the backend decides whether a
stock movement or status transition is allowed and the page just reports
the outcome.
"""

import logging

from fasthtml.common import *
from pydantic import ValidationError

from .. import settings
from ..api.client import ApiError, describe_error
from ..api.inventory import STOCK_FILTERS
from ..models import (
    CategoryForm,
    CreateOrderData,
    CreateShipmentData,
    ImageForm,
    OrderLine,
    ProductForm,
    ShipData,
    ShipmentLine,
    ShipmentStatus,
    SkuForm,
)
from .components import (
    admin_nav,
    choice_pairs,
    confirm_button,
    error_box,
    field,
    format_date,
    format_price,
    order_row,
    pagination_links,
    post_button,
    select_input,
    stat_card,
    status_badge,
    text_input,
)
from .core import (
    blank_to_none,
    open_session,
    redirect,
    render,
    require_admin,
    rt,
    to_float,
    to_int,
)

logger = logging.getLogger(__name__)

# Blank rows offered on the create forms
NEW_SKU_ROWS = 3
NEW_ORDER_LINES = 5


def admin_page(session, title: str, *content, status_code: int = 200):
    return render(session, title, admin_nav(), *content, status_code=status_code)


def checkbox(name: str, label: str, checked: bool):
    return Label(Input(type="checkbox", name=name, checked=checked), f" {label}")


# ==================== Dashboard ====================


@rt("/admin")
async def dashboard(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    async def total(fetch) -> str:
        try:
            _, pagination = await fetch
        except ApiError as e:
            logger.error(f"Dashboard figure failed: {e}")
            return "-"
        return str(pagination.total)

    pending = await total(session.orders.list(status="pending", per_page=1))
    alerts = await total(session.inventory.alerts(unresolved=True, per_page=1))
    low_stock = await total(session.inventory.list(status="low_stock", per_page=1))

    sections = [
        ("Orders", "/admin/orders", "Review orders, move them through their statuses, split shipments."),
        ("Shipments", "/admin/shipments", "Pick, pack, ship and confirm delivery."),
        ("Inventory", "/admin/inventories", "Stock levels, adjustments, receiving and alerts."),
        ("Products", "/admin/products", "Products, their SKUs and images."),
        ("Categories", "/admin/categories", "Organise the catalog into a category tree."),
    ]
    return admin_page(
        session,
        "Admin",
        Div(
            stat_card("Pending orders", pending),
            stat_card("Open stock alerts", alerts),
            stat_card("Low-stock SKUs", low_stock),
            cls="grid",
        ),
        Div(*[Div(H3(A(name, href=href)), P(text), cls="card") for name, href, text in sections], cls="grid"),
    )


# ==================== Products ====================


@rt("/admin/products")
async def admin_products(request, trashed: str = "", search: str = "", page: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    show_trashed = trashed == "1"
    products, pagination, error = [], None, None
    try:
        if show_trashed:
            products, pagination = await session.products.list_trashed(
                per_page=settings.ADMIN_PER_PAGE, page=to_int(page, 1)
            )
        else:
            products, pagination = await session.products.list(
                search=search, per_page=settings.ADMIN_PER_PAGE, page=to_int(page, 1)
            )
    except ApiError as e:
        error = describe_error(e, "Failed to load products")

    def actions(product):
        if show_trashed:
            return post_button("Restore", f"/admin/products/{product.id}/restore")
        return Div(
            A("Edit", href=f"/admin/products/{product.id}/edit", cls="btn btn-sm"), " ",
            A("SKUs", href=f"/admin/products/{product.id}/skus", cls="btn btn-sm"), " ",
            A("Images", href=f"/admin/products/{product.id}/images", cls="btn btn-sm"), " ",
            confirm_button("Delete", f"/admin/products/{product.id}/delete",
                           "Delete this product?", cls="btn btn-danger btn-sm"),
        )

    return admin_page(
        session,
        "Deleted products" if show_trashed else "Products",
        Div(
            A("New product", href="/admin/products/new", cls="btn btn-primary"), " ",
            A("Show active", href="/admin/products", cls="btn") if show_trashed
            else A("Show deleted", href="/admin/products?trashed=1", cls="btn"),
            Form(
                text_input("search", search, placeholder="Name or code"),
                Button("Search", type="submit", cls="btn"),
                method="get", action="/admin/products", cls="inline",
            ) if not show_trashed else None,
            cls="card",
        ),
        error_box(error),
        Table(
            Thead(Tr(Th("Code"), Th("Name"), Th("Category"), Th("Published"), Th("SKUs"), Th(""))),
            Tbody(*[
                Tr(
                    Td(p.product_code),
                    Td(p.name),
                    Td(p.category.name if p.category else "-"),
                    Td("Yes" if p.is_published else "No"),
                    Td(str(len(p.skus))),
                    Td(actions(p)),
                )
                for p in products
            ]),
        ),
        pagination_links("/admin/products", pagination, {"trashed": trashed, "search": search})
        if pagination else None,
    )


@rt("/admin/products/{product_id}/delete", methods=["POST"])
async def admin_product_delete(request, product_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.products.delete(product_id)
        session.flash("Product deleted.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to delete the product"), "error")
    return redirect(session, "/admin/products")


@rt("/admin/products/{product_id}/restore", methods=["POST"])
async def admin_product_restore(request, product_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.products.restore(product_id)
        session.flash("Product restored.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to restore the product"), "error")
    return redirect(session, "/admin/products?trashed=1")


def product_fields(values: dict, categories: list):
    return [
        field("Category", select_input(
            "category_id", [(c.id, c.name) for c in categories], values.get("category_id"), blank="None",
        )),
        field("Product code", text_input("product_code", values.get("product_code"), required=True)),
        field("Name", text_input("name", values.get("name"), required=True)),
        field("Description", Textarea(values.get("description") or "", name="description", rows="4")),
        field("Tax rate (%)", text_input("tax_rate", values.get("tax_rate", 10), type="number", step="0.01")),
        field("Publish at", text_input("published_at", values.get("published_at"), type="datetime-local")),
        field("Sort order", text_input("sort_order", values.get("sort_order", 0), type="number")),
        checkbox("is_published", "Published", bool(values.get("is_published"))),
    ]


def sku_fields(prefix: str = "", values: dict = None):
    values = values or {}
    return Div(
        field("SKU code", text_input(f"{prefix}sku_code", values.get("sku_code"))),
        field("JAN code", text_input(f"{prefix}jan_code", values.get("jan_code"))),
        field("Size", text_input(f"{prefix}size", values.get("size"))),
        field("Color", text_input(f"{prefix}color", values.get("color"))),
        field("Other", text_input(f"{prefix}other_attribute", values.get("other_attribute"))),
        field("Price", text_input(f"{prefix}price", values.get("price"), type="number", min="0")),
        field("Cost price", text_input(f"{prefix}cost_price", values.get("cost_price"), type="number", min="0")),
        checkbox(f"{prefix}is_active", "Active", values.get("is_active", True) not in (False, None)),
        cls="filters",
    )


def parse_sku(form, prefix: str = "") -> SkuForm:
    return SkuForm(
        sku_code=form.get(f"{prefix}sku_code", "").strip(),
        jan_code=blank_to_none(form.get(f"{prefix}jan_code")),
        size=blank_to_none(form.get(f"{prefix}size")),
        color=blank_to_none(form.get(f"{prefix}color")),
        other_attribute=blank_to_none(form.get(f"{prefix}other_attribute")),
        price=to_float(form.get(f"{prefix}price"), 0.0),
        cost_price=to_float(form.get(f"{prefix}cost_price")),
        is_active=form.get(f"{prefix}is_active") is not None,
    )


def parse_product(form) -> ProductForm:
    return ProductForm(
        category_id=to_int(form.get("category_id")),
        product_code=form.get("product_code", "").strip(),
        name=form.get("name", "").strip(),
        description=blank_to_none(form.get("description")),
        tax_rate=to_float(form.get("tax_rate")),
        is_published=form.get("is_published") is not None,
        published_at=blank_to_none(form.get("published_at")),
        sort_order=to_int(form.get("sort_order")),
    )


async def _product_form_page(session, title: str, action: str, values: dict, with_skus: bool,
                             error: str = None, status_code: int = 200):
    try:
        categories = await session.categories.list_all()
    except ApiError as e:
        logger.error(f"Failed to load categories: {e}")
        categories = []

    extra = []
    if with_skus:
        extra = [
            H3("SKUs"),
            *[sku_fields(f"skus-{i}-", {"is_active": True}) for i in range(NEW_SKU_ROWS)],
            H3("Main image"),
            field("Image file", Input(type="file", name="image", accept="image/*")),
            field("Alt text", text_input("alt_text", values.get("alt_text"))),
        ]

    return admin_page(
        session,
        title,
        error_box(error),
        Form(
            *product_fields(values, categories),
            *extra,
            Div(Button("Save", type="submit", cls="btn btn-primary"), " ",
                A("Back", href="/admin/products", cls="btn")),
            method="post", action=action, enctype="multipart/form-data", cls="card",
        ),
        status_code=status_code,
    )


@rt("/admin/products/new", methods=["GET"])
async def admin_product_new(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return await _product_form_page(session, "New product", "/admin/products/new", {}, with_skus=True)


@rt("/admin/products/new", methods=["POST"])
async def admin_product_create(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    form = await request.form()
    values = {k: v for k, v in form.items() if isinstance(v, str)}
    image_url = None
    try:
        product = parse_product(form)
        product.skus = [
            parse_sku(form, f"skus-{i}-")
            for i in range(NEW_SKU_ROWS)
            if (form.get(f"skus-{i}-sku_code") or "").strip()
        ]
        if not product.skus:
            return await _product_form_page(session, "New product", "/admin/products/new", values, True,
                                            "Add at least one SKU.", 400)

        upload = form.get("image")
        if upload is not None and getattr(upload, "filename", None):
            image_url = await session.images.upload(
                upload.filename, await upload.read(), upload.content_type or "application/octet-stream"
            )
            product.images = [ImageForm(image_path=image_url, alt_text=blank_to_none(form.get("alt_text")),
                                        sort_order=0, is_primary=True)]

        created = await session.products.create(product)
    except (ApiError, ValidationError) as e:
        if image_url:
            await _discard_upload(session, image_url)
        return await _product_form_page(session, "New product", "/admin/products/new", values, True,
                                        describe_error(e, "Failed to create the product"), 400)

    session.flash(f"Product {created.name} created.")
    return redirect(session, "/admin/products")


async def _discard_upload(session, image_path: str) -> None:
    try:
        await session.images.delete(image_path)
    except ApiError as e:
        logger.error(f"Failed to remove uploaded image {image_path}: {e}")


@rt("/admin/products/{product_id}/edit", methods=["GET"])
async def admin_product_edit(request, product_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        product = await session.products.get(product_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the product"), "error")
        return redirect(session, "/admin/products")
    values = product.model_dump(exclude={"skus", "images", "category"})
    if values.get("published_at"):
        values["published_at"] = values["published_at"][:16]
    return await _product_form_page(session, f"Edit {product.name}", f"/admin/products/{product_id}/edit",
                                    values, with_skus=False)


@rt("/admin/products/{product_id}/edit", methods=["POST"])
async def admin_product_update(request, product_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    form = await request.form()
    try:
        await session.products.update(product_id, parse_product(form))
    except (ApiError, ValidationError) as e:
        return await _product_form_page(session, "Edit product", f"/admin/products/{product_id}/edit",
                                        dict(form), False, describe_error(e, "Failed to update the product"), 400)
    session.flash("Product updated.")
    return redirect(session, "/admin/products")


# ==================== SKUs ====================


@rt("/admin/products/{product_id}/skus", methods=["GET"])
async def admin_skus(request, product_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        product = await session.products.get(product_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the product"), "error")
        return redirect(session, "/admin/products")

    return admin_page(
        session,
        f"SKUs of {product.name}",
        *[
            Div(
                Form(
                    sku_fields("", sku.model_dump()),
                    Button("Update", type="submit", cls="btn btn-primary btn-sm"),
                    method="post", action=f"/admin/products/{product_id}/skus/{sku.id}",
                ),
                Small(f"Available: {sku.available_quantity if sku.available_quantity is not None else '-'}"),
                " ",
                confirm_button("Delete", f"/admin/products/{product_id}/skus/{sku.id}/delete",
                               "Delete this SKU?", cls="btn btn-danger btn-sm"),
                cls="card",
            )
            for sku in product.skus
        ],
        Div(
            H3("Add SKU"),
            Form(
                sku_fields("", {"is_active": True}),
                Button("Add", type="submit", cls="btn btn-primary"),
                method="post", action=f"/admin/products/{product_id}/skus",
            ),
            cls="card",
        ),
        A("← Back to products", href="/admin/products"),
    )


@rt("/admin/products/{product_id}/skus", methods=["POST"])
async def admin_sku_add(request, product_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    form = await request.form()
    try:
        await session.products.add_skus(product_id, [parse_sku(form)])
        session.flash("SKU added.")
    except (ApiError, ValidationError) as e:
        session.flash(describe_error(e, "Failed to add the SKU"), "error")
    return redirect(session, f"/admin/products/{product_id}/skus")


@rt("/admin/products/{product_id}/skus/{sku_id}", methods=["POST"])
async def admin_sku_update(request, product_id: int, sku_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    form = await request.form()
    try:
        await session.products.update_sku(product_id, sku_id, parse_sku(form))
        session.flash("SKU updated.")
    except (ApiError, ValidationError) as e:
        session.flash(describe_error(e, "Failed to update the SKU"), "error")
    return redirect(session, f"/admin/products/{product_id}/skus")


@rt("/admin/products/{product_id}/skus/{sku_id}/delete", methods=["POST"])
async def admin_sku_delete(request, product_id: int, sku_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.products.delete_sku(product_id, sku_id)
        session.flash("SKU deleted.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to delete the SKU"), "error")
    return redirect(session, f"/admin/products/{product_id}/skus")


# ==================== Images ====================


@rt("/admin/products/{product_id}/images", methods=["GET"])
async def admin_images(request, product_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        product = await session.products.get(product_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the product"), "error")
        return redirect(session, "/admin/products")

    base = f"/admin/products/{product_id}/images"
    return admin_page(
        session,
        f"Images of {product.name}",
        Div(*[
            Div(
                Img(src=image.image_path, alt=image.alt_text or "", width="200"),
                Span("Main image", cls="status-badge status-delivered") if image.is_primary
                else post_button("Make main image", f"{base}/{image.id}/primary"),
                Form(
                    text_input("alt_text", image.alt_text, placeholder="Alt text"),
                    Button("Save alt text", type="submit", cls="btn btn-sm"),
                    method="post", action=f"{base}/{image.id}",
                ),
                confirm_button("Delete", f"{base}/{image.id}/delete", "Delete this image?",
                               cls="btn btn-danger btn-sm", image_path=image.image_path),
                cls="card",
            )
            for image in sorted(product.images, key=lambda i: i.sort_order)
        ], cls="grid"),
        Div(
            H3("Upload image"),
            Form(
                Input(type="file", name="image", accept="image/*", required=True),
                text_input("alt_text", placeholder="Alt text"),
                Button("Upload", type="submit", cls="btn btn-primary"),
                method="post", action=base, enctype="multipart/form-data",
            ),
            cls="card",
        ),
        A("← Back to products", href="/admin/products"),
    )


@rt("/admin/products/{product_id}/images", methods=["POST"])
async def admin_image_upload(request, product_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    form = await request.form()
    upload = form.get("image")
    if upload is None or not getattr(upload, "filename", None):
        session.flash("Choose an image file to upload.", "error")
        return redirect(session, f"/admin/products/{product_id}/images")

    image_url = None
    try:
        image_url = await session.images.upload(
            upload.filename, await upload.read(), upload.content_type or "application/octet-stream"
        )
        product = await session.products.get(product_id)
        await session.products.add_images(product_id, [ImageForm(
            image_path=image_url,
            alt_text=blank_to_none(form.get("alt_text")),
            sort_order=len(product.images),
            is_primary=not product.images,
        )])
        session.flash("Image added.")
    except ApiError as e:
        if image_url:
            await _discard_upload(session, image_url)
        session.flash(describe_error(e, "Failed to upload the image"), "error")
    return redirect(session, f"/admin/products/{product_id}/images")


async def _find_image(session, product_id: int, image_id: int):
    product = await session.products.get(product_id)
    for image in product.images:
        if image.id == image_id:
            return image
    raise ApiError("Image not found", 404)


@rt("/admin/products/{product_id}/images/{image_id}", methods=["POST"])
async def admin_image_alt(request, product_id: int, image_id: int, alt_text: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        image = await _find_image(session, product_id, image_id)
        await session.products.update_image(product_id, image_id, ImageForm(
            image_path=image.image_path, alt_text=blank_to_none(alt_text),
            sort_order=image.sort_order, is_primary=image.is_primary,
        ))
        session.flash("Alt text updated.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to update the alt text"), "error")
    return redirect(session, f"/admin/products/{product_id}/images")


@rt("/admin/products/{product_id}/images/{image_id}/primary", methods=["POST"])
async def admin_image_primary(request, product_id: int, image_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        image = await _find_image(session, product_id, image_id)
        await session.products.update_image(product_id, image_id, ImageForm(
            image_path=image.image_path, alt_text=image.alt_text,
            sort_order=image.sort_order, is_primary=True,
        ))
        session.flash("Main image changed.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to change the main image"), "error")
    return redirect(session, f"/admin/products/{product_id}/images")


@rt("/admin/products/{product_id}/images/{image_id}/delete", methods=["POST"])
async def admin_image_delete(request, product_id: int, image_id: int, image_path: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.products.delete_image(product_id, image_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to delete the image"), "error")
        return redirect(session, f"/admin/products/{product_id}/images")
    if image_path:
        await _discard_upload(session, image_path)
    session.flash("Image deleted.")
    return redirect(session, f"/admin/products/{product_id}/images")


# ==================== Categories ====================


@rt("/admin/categories")
async def admin_categories(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    categories, error = [], None
    try:
        categories = await session.categories.list_all()
    except ApiError as e:
        error = describe_error(e, "Failed to load categories")
    names = {c.id: c.name for c in categories}

    return admin_page(
        session,
        "Categories",
        A("New category", href="/admin/categories/new", cls="btn btn-primary"),
        error_box(error),
        Table(
            Thead(Tr(Th("Name"), Th("Slug"), Th("Parent"), Th("Order"), Th("Active"), Th(""))),
            Tbody(*[
                Tr(
                    Td(c.name),
                    Td(c.slug),
                    Td(names.get(c.parent_id, "-") if c.parent_id else "-"),
                    Td(str(c.sort_order)),
                    Td("Yes" if c.is_active else "No"),
                    Td(
                        A("Edit", href=f"/admin/categories/{c.id}/edit", cls="btn btn-sm"), " ",
                        confirm_button("Delete", f"/admin/categories/{c.id}/delete",
                                       "Delete this category?", cls="btn btn-danger btn-sm"),
                    ),
                )
                for c in sorted(categories, key=lambda c: (c.sort_order, c.id))
            ]),
        ),
    )


def parse_category(form) -> CategoryForm:
    return CategoryForm(
        name=form.get("name", "").strip(),
        slug=form.get("slug", "").strip(),
        description=blank_to_none(form.get("description")),
        parent_id=to_int(form.get("parent_id")),
        sort_order=to_int(form.get("sort_order"), 0),
        is_active=form.get("is_active") is not None,
    )


async def _category_form_page(session, title: str, action: str, values: dict, exclude_id: int = None,
                              error: str = None, status_code: int = 200):
    try:
        categories = await session.categories.list_all()
    except ApiError as e:
        logger.error(f"Failed to load categories: {e}")
        categories = []
    parents = [(c.id, c.name) for c in categories if c.parent_id is None and c.id != exclude_id]

    return admin_page(
        session,
        title,
        error_box(error),
        Form(
            field("Name", text_input("name", values.get("name"), required=True)),
            field("Slug", text_input("slug", values.get("slug"), required=True)),
            field("Description", Textarea(values.get("description") or "", name="description", rows="3")),
            field("Parent", select_input("parent_id", parents, values.get("parent_id"), blank="None (top level)")),
            field("Sort order", text_input("sort_order", values.get("sort_order", 0), type="number")),
            checkbox("is_active", "Active", values.get("is_active", True) not in (False, None)),
            Div(Button("Save", type="submit", cls="btn btn-primary"), " ",
                A("Back", href="/admin/categories", cls="btn")),
            method="post", action=action, cls="card",
        ),
        status_code=status_code,
    )


@rt("/admin/categories/new", methods=["GET"])
async def admin_category_new(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return await _category_form_page(session, "New category", "/admin/categories/new", {})


@rt("/admin/categories/new", methods=["POST"])
async def admin_category_create(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    form = await request.form()
    try:
        await session.categories.create(parse_category(form))
    except (ApiError, ValidationError) as e:
        values = dict(form)
        values["is_active"] = "is_active" in form
        return await _category_form_page(session, "New category", "/admin/categories/new", values,
                                         error=describe_error(e, "Failed to create the category"),
                                         status_code=400)
    session.flash("Category created.")
    return redirect(session, "/admin/categories")


@rt("/admin/categories/{category_id}/edit", methods=["GET"])
async def admin_category_edit(request, category_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        category = await session.categories.get(category_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the category"), "error")
        return redirect(session, "/admin/categories")
    return await _category_form_page(session, f"Edit {category.name}", f"/admin/categories/{category_id}/edit",
                                     category.model_dump(exclude={"parent", "children"}), exclude_id=category_id)


@rt("/admin/categories/{category_id}/edit", methods=["POST"])
async def admin_category_update(request, category_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    form = await request.form()
    try:
        await session.categories.update(category_id, parse_category(form))
    except (ApiError, ValidationError) as e:
        values = dict(form)
        values["is_active"] = "is_active" in form
        return await _category_form_page(session, "Edit category", f"/admin/categories/{category_id}/edit",
                                         values, exclude_id=category_id,
                                         error=describe_error(e, "Failed to update the category"),
                                         status_code=400)
    session.flash("Category updated.")
    return redirect(session, "/admin/categories")


@rt("/admin/categories/{category_id}/delete", methods=["POST"])
async def admin_category_delete(request, category_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.categories.delete(category_id)
        session.flash("Category deleted.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to delete the category"), "error")
    return redirect(session, "/admin/categories")


# ==================== Inventory ====================


def stock_cell(inventory):
    if inventory.available_quantity <= 0:
        return Td(str(inventory.available_quantity), cls="stock-out")
    if inventory.is_low_stock:
        return Td(str(inventory.available_quantity), cls="stock-low")
    return Td(str(inventory.available_quantity))


def sku_label(inventory) -> str:
    sku = inventory.product_sku
    if sku is None:
        return f"SKU #{inventory.product_sku_id}"
    name = sku.product.name if sku.product else ""
    variant = " / ".join(v for v in (sku.size, sku.color) if v)
    return " ".join(p for p in (sku.sku_code, name, f"({variant})" if variant else "") if p)


@rt("/admin/inventories")
async def admin_inventories(request, status: str = "", sku_code: str = "", page: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    inventories, pagination, error = [], None, None
    try:
        inventories, pagination = await session.inventory.list(
            status=status, sku_code=sku_code, per_page=settings.ADMIN_PER_PAGE, page=to_int(page, 1)
        )
    except ApiError as e:
        error = describe_error(e, "Failed to load inventory")

    return admin_page(
        session,
        "Inventory",
        Div(
            A("New stock record", href="/admin/inventories/new", cls="btn btn-primary"), " ",
            A("Stock alerts", href="/admin/inventories/alerts", cls="btn"),
            Form(
                field("Status", select_input("status", STOCK_FILTERS.items(), status, blank="All")),
                field("SKU code", text_input("sku_code", sku_code)),
                Button("Filter", type="submit", cls="btn"),
                method="get", action="/admin/inventories", cls="filters",
            ),
            cls="card",
        ),
        error_box(error),
        Table(
            Thead(Tr(Th("SKU"), Th("On hand"), Th("Allocated"), Th("Available"), Th("Safety stock"), Th(""))),
            Tbody(*[
                Tr(
                    Td(A(sku_label(inv), href=f"/admin/inventories/{inv.id}")),
                    Td(str(inv.quantity)),
                    Td(str(inv.allocated_quantity)),
                    stock_cell(inv),
                    Td(str(inv.safety_stock)),
                    Td(
                        A("Adjust", href=f"/admin/inventories/{inv.id}/adjust", cls="btn btn-sm"), " ",
                        A("Safety stock", href=f"/admin/inventories/{inv.id}/safety-stock", cls="btn btn-sm"),
                    ),
                )
                for inv in inventories
            ]),
        ),
        pagination_links("/admin/inventories", pagination, {"status": status, "sku_code": sku_code})
        if pagination else None,
    )


def _inventory_new_page(session, values: dict, error: str = None, status_code: int = 200):
    return admin_page(
        session,
        "New stock record",
        error_box(error),
        Form(
            field("Product SKU ID", text_input("product_sku_id", values.get("product_sku_id"),
                                               type="number", required=True)),
            field("Initial quantity", text_input("initial_quantity", values.get("initial_quantity", 0),
                                                 type="number", min="0")),
            field("Safety stock", text_input("safety_stock", values.get("safety_stock", 0),
                                             type="number", min="0")),
            Button("Create", type="submit", cls="btn btn-primary"),
            method="post", action="/admin/inventories/new", cls="card",
        ),
        status_code=status_code,
    )


@rt("/admin/inventories/new", methods=["GET"])
async def admin_inventory_new(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return _inventory_new_page(session, {})


@rt("/admin/inventories/new", methods=["POST"])
async def admin_inventory_create(request, product_sku_id: str = "", initial_quantity: str = "",
                                 safety_stock: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    values = {"product_sku_id": product_sku_id, "initial_quantity": initial_quantity, "safety_stock": safety_stock}
    sku_id = to_int(product_sku_id)
    if sku_id is None:
        return _inventory_new_page(session, values, "Enter a product SKU ID.", 400)
    try:
        inventory = await session.inventory.create(sku_id, to_int(initial_quantity), to_int(safety_stock))
    except ApiError as e:
        return _inventory_new_page(session, values, describe_error(e, "Failed to create the stock record"), 400)
    session.flash("Stock record created.")
    return redirect(session, f"/admin/inventories/{inventory.id}")


@rt("/admin/inventories/alerts", methods=["GET"])
async def admin_inventory_alerts(request, show: str = "open"):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    alerts, error = [], None
    try:
        alerts, _ = await session.inventory.alerts(
            unresolved=True if show == "open" else None, per_page=settings.ADMIN_PER_PAGE
        )
    except ApiError as e:
        error = describe_error(e, "Failed to load stock alerts")

    return admin_page(
        session,
        "Stock alerts",
        Div(
            A("Open alerts", href="/admin/inventories/alerts?show=open", cls="btn btn-sm"), " ",
            A("All alerts", href="/admin/inventories/alerts?show=all", cls="btn btn-sm"),
            cls="card",
        ),
        error_box(error),
        Table(
            Thead(Tr(Th("Raised"), Th("SKU"), Th("Type"), Th("Threshold"), Th("Current"), Th(""))),
            Tbody(*[
                Tr(
                    Td(format_date(a.created_at)),
                    Td(A(sku_label(a.inventory), href=f"/admin/inventories/{a.inventory_id}")
                       if a.inventory else A(f"#{a.inventory_id}", href=f"/admin/inventories/{a.inventory_id}")),
                    Td(a.alert_type),
                    Td(str(a.threshold_quantity)),
                    Td(str(a.current_quantity)),
                    Td(f"Resolved {format_date(a.resolved_at)}" if a.is_resolved
                       else post_button("Resolve", f"/admin/inventories/alerts/{a.id}/resolve")),
                )
                for a in alerts
            ]),
        ) if alerts else P("No alerts."),
    )


@rt("/admin/inventories/alerts/{alert_id}/resolve", methods=["POST"])
async def admin_alert_resolve(request, alert_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.inventory.resolve_alert(alert_id)
        session.flash("Alert resolved.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to resolve the alert"), "error")
    return redirect(session, "/admin/inventories/alerts")


async def _load_inventory(session, inventory_id: int):
    try:
        return await session.inventory.get(inventory_id), None
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the stock record"), "error")
        return None, redirect(session, "/admin/inventories")


def inventory_summary(inventory):
    return Div(
        H3(sku_label(inventory)),
        Table(
            Tr(Th("On hand"), Td(str(inventory.quantity))),
            Tr(Th("Allocated"), Td(str(inventory.allocated_quantity))),
            Tr(Th("Available"), stock_cell(inventory)),
            Tr(Th("Safety stock"), Td(str(inventory.safety_stock))),
        ),
        cls="card",
    )


@rt("/admin/inventories/{inventory_id}", methods=["GET"])
async def admin_inventory_detail(request, inventory_id: int, event_type: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    inventory, failed = await _load_inventory(session, inventory_id)
    if failed:
        return failed

    transactions, error = [], None
    try:
        transactions, _ = await session.inventory.transactions(
            inventory_id, event_type=event_type, per_page=settings.ADMIN_PER_PAGE
        )
    except ApiError as e:
        error = describe_error(e, "Failed to load the stock history")

    return admin_page(
        session,
        "Stock record",
        inventory_summary(inventory),
        Div(
            A("Adjust / receive", href=f"/admin/inventories/{inventory_id}/adjust", cls="btn btn-primary"), " ",
            A("Safety stock", href=f"/admin/inventories/{inventory_id}/safety-stock", cls="btn"),
            cls="card",
        ),
        H2("History"),
        Form(
            field("Event type", text_input("event_type", event_type)),
            Button("Filter", type="submit", cls="btn"),
            method="get", action=f"/admin/inventories/{inventory_id}", cls="filters",
        ),
        error_box(error),
        Table(
            Thead(Tr(Th("When"), Th("Event"), Th("Change"), Th("Before"), Th("After"), Th("By"), Th("Note"))),
            Tbody(*[
                Tr(
                    Td(t.created_at or "-"),
                    Td(t.event_type),
                    Td(f"{t.quantity_change:+d}"),
                    Td(str(t.quantity_before)),
                    Td(str(t.quantity_after)),
                    Td(t.performer.name if t.performer else "-"),
                    Td(t.note or ""),
                )
                for t in transactions
            ]),
        ) if transactions else P("No stock movements yet."),
        A("← Back to inventory", href="/admin/inventories"),
    )


def _adjust_page(session, inventory, error: str = None, status_code: int = 200):
    base = f"/admin/inventories/{inventory.id}"
    return admin_page(
        session,
        "Adjust stock",
        inventory_summary(inventory),
        error_box(error),
        Div(
            H3("Adjustment"),
            P("Use a negative number to reduce stock."),
            Form(
                field("Quantity change", text_input("quantity_change", type="number", required=True)),
                field("Reason", Textarea("", name="note", rows="2")),
                Button("Apply adjustment", type="submit", cls="btn btn-primary"),
                method="post", action=f"{base}/adjust",
            ),
            cls="card",
        ),
        Div(
            H3("Receive stock"),
            Form(
                field("Quantity received", text_input("quantity", type="number", min="1", required=True)),
                field("Note", Textarea("", name="note", rows="2")),
                Button("Receive", type="submit", cls="btn btn-primary"),
                method="post", action=f"{base}/receive",
            ),
            cls="card",
        ),
        A("← Back", href=base),
        status_code=status_code,
    )


@rt("/admin/inventories/{inventory_id}/adjust", methods=["GET"])
async def admin_inventory_adjust_page(request, inventory_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    inventory, failed = await _load_inventory(session, inventory_id)
    if failed:
        return failed
    return _adjust_page(session, inventory)


@rt("/admin/inventories/{inventory_id}/adjust", methods=["POST"])
async def admin_inventory_adjust(request, inventory_id: int, quantity_change: str = "", note: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    inventory, failed = await _load_inventory(session, inventory_id)
    if failed:
        return failed

    change = to_int(quantity_change)
    if not change:
        return _adjust_page(session, inventory, "Enter a non-zero quantity change.", 400)
    try:
        await session.inventory.adjust(inventory.product_sku_id, change, blank_to_none(note))
    except ApiError as e:
        return _adjust_page(session, inventory, describe_error(e, "Failed to adjust stock"), 400)
    session.flash("Stock adjusted.")
    return redirect(session, f"/admin/inventories/{inventory_id}")


@rt("/admin/inventories/{inventory_id}/receive", methods=["POST"])
async def admin_inventory_receive(request, inventory_id: int, quantity: str = "", note: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    inventory, failed = await _load_inventory(session, inventory_id)
    if failed:
        return failed

    received = to_int(quantity)
    if not received or received < 1:
        return _adjust_page(session, inventory, "Enter the quantity received (1 or more).", 400)
    try:
        await session.inventory.receive(inventory.product_sku_id, received, blank_to_none(note))
    except ApiError as e:
        return _adjust_page(session, inventory, describe_error(e, "Failed to receive stock"), 400)
    session.flash("Stock received.")
    return redirect(session, f"/admin/inventories/{inventory_id}")


def _safety_page(session, inventory, error: str = None, status_code: int = 200):
    return admin_page(
        session,
        "Safety stock",
        inventory_summary(inventory),
        error_box(error),
        Form(
            field("Safety stock", text_input("safety_stock", inventory.safety_stock, type="number", min="0")),
            Button("Save", type="submit", cls="btn btn-primary"),
            method="post", action=f"/admin/inventories/{inventory.id}/safety-stock", cls="card",
        ),
        status_code=status_code,
    )


@rt("/admin/inventories/{inventory_id}/safety-stock", methods=["GET"])
async def admin_safety_stock_page(request, inventory_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    inventory, failed = await _load_inventory(session, inventory_id)
    if failed:
        return failed
    return _safety_page(session, inventory)


@rt("/admin/inventories/{inventory_id}/safety-stock", methods=["POST"])
async def admin_safety_stock_update(request, inventory_id: int, safety_stock: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    inventory, failed = await _load_inventory(session, inventory_id)
    if failed:
        return failed

    value = to_int(safety_stock)
    if value is None or value < 0:
        return _safety_page(session, inventory, "Safety stock must be 0 or more.", 400)
    try:
        await session.inventory.update_safety_stock(inventory_id, value)
    except ApiError as e:
        return _safety_page(session, inventory, describe_error(e, "Failed to update the safety stock"), 400)
    session.flash("Safety stock updated.")
    return redirect(session, f"/admin/inventories/{inventory_id}")


# ==================== Orders ====================


@rt("/admin/orders")
async def admin_orders(request, status: str = "", order_number: str = "", start_date: str = "",
                       end_date: str = "", page: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    orders, pagination, statuses, error = [], None, [], None
    try:
        statuses = await session.orders.statuses()
        orders, pagination = await session.orders.list(
            status=status, order_number=order_number, start_date=start_date, end_date=end_date,
            sort_by="created_at", sort_order="desc", per_page=settings.ADMIN_PER_PAGE, page=to_int(page, 1),
        )
    except ApiError as e:
        error = describe_error(e, "Failed to load orders")

    filters = {"status": status, "order_number": order_number, "start_date": start_date, "end_date": end_date}
    return admin_page(
        session,
        "Orders",
        Div(
            A("Create test order", href="/admin/orders/new", cls="btn"),
            Form(
                field("Status", select_input("status", choice_pairs(statuses), status, blank="All")),
                field("Order number", text_input("order_number", order_number)),
                field("From", text_input("start_date", start_date, type="date")),
                field("To", text_input("end_date", end_date, type="date")),
                Button("Filter", type="submit", cls="btn"),
                method="get", action="/admin/orders", cls="filters",
            ),
            cls="card",
        ),
        error_box(error),
        Table(
            Thead(Tr(Th("Order"), Th("Date"), Th("Customer"), Th("Status"), Th("Total"))),
            Tbody(*[order_row(o, f"/admin/orders/{o.id}", statuses, show_customer=True) for o in orders]),
        ),
        pagination_links("/admin/orders", pagination, filters) if pagination else None,
    )


async def _new_order_page(session, values: dict, error: str = None, status_code: int = 200):
    try:
        methods = await session.orders.payment_methods()
    except ApiError as e:
        logger.error(f"Failed to load payment methods: {e}")
        methods = []

    return admin_page(
        session,
        "Create test order",
        P("Places an order by entering SKU IDs and an address ID directly."),
        error_box(error),
        Form(
            field("Address ID", text_input("address_id", values.get("address_id"), type="number", required=True)),
            field("Payment method", select_input(
                "payment_method", choice_pairs(methods) or [("credit_card", "Credit card")],
                values.get("payment_method", "credit_card"),
            )),
            H3("Items"),
            *[
                Div(
                    field("SKU ID", text_input(f"product_sku_id_{i}", values.get(f"product_sku_id_{i}"), type="number")),
                    field("Quantity", text_input(f"quantity_{i}", values.get(f"quantity_{i}", 1), type="number", min="1")),
                    cls="filters",
                )
                for i in range(NEW_ORDER_LINES)
            ],
            field("Note", Textarea(values.get("note", ""), name="note", rows="2")),
            Button("Create order", type="submit", cls="btn btn-primary"),
            method="post", action="/admin/orders/new", cls="card",
        ),
        A("← Back to orders", href="/admin/orders"),
        status_code=status_code,
    )


@rt("/admin/orders/new", methods=["GET"])
async def admin_order_new(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return await _new_order_page(session, {})


@rt("/admin/orders/new", methods=["POST"])
async def admin_order_create(request):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    form = await request.form()
    values = dict(form)
    address_id = to_int(form.get("address_id"))
    if address_id is None:
        return await _new_order_page(session, values, "Enter the delivery address ID.", 400)

    lines = []
    for i in range(NEW_ORDER_LINES):
        sku_id, quantity = to_int(form.get(f"product_sku_id_{i}")), to_int(form.get(f"quantity_{i}"))
        if sku_id and quantity:
            lines.append(OrderLine(product_sku_id=sku_id, quantity=quantity))
    if not lines:
        return await _new_order_page(session, values, "Enter at least one item.", 400)

    try:
        order = await session.orders.create(CreateOrderData(
            address_id=address_id,
            payment_method=form.get("payment_method") or "credit_card",
            items=lines,
            note=blank_to_none(form.get("note")),
        ))
    except ApiError as e:
        return await _new_order_page(session, values, describe_error(e, "Failed to create the order"), 400)

    session.flash(f"Order {order.order_number} created.")
    return redirect(session, f"/admin/orders/{order.id}")


@rt("/admin/orders/{order_id}", methods=["GET"])
async def admin_order_detail(request, order_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        order = await session.orders.get(order_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the order"), "error")
        return redirect(session, "/admin/orders")
    try:
        statuses = await session.orders.statuses()
    except ApiError as e:
        logger.error(f"Failed to load order statuses: {e}")
        statuses = []

    base = f"/admin/orders/{order_id}"
    unshipped = [item for item in order.items if (item.unshipped_quantity or 0) > 0]
    return admin_page(
        session,
        f"Order {order.order_number}",
        Div(
            P("Status: ", status_badge(order.status, statuses)),
            P(f"Customer: {order.user.name} <{order.user.email}>" if order.user else f"Customer #{order.user_id or '-'}"),
            P(f"Ordered {format_date(order.order_date or order.created_at)} · payment {order.payment_method}"),
            P(f"Note: {order.note}") if order.note else None,
            Form(
                select_input("status", choice_pairs(statuses), order.status),
                Button("Change status", type="submit", cls="btn btn-sm",
                       disabled=order.status == "cancelled"),
                method="post", action=f"{base}/status", cls="inline",
            ) if statuses else None,
            " ",
            confirm_button("Cancel order", f"{base}/cancel", "Cancel this order? Allocated stock is released.",
                           cls="btn btn-danger btn-sm") if order.is_cancellable else None,
            " ",
            confirm_button("Complete order", f"{base}/complete", "Mark this order as completed?",
                           cls="btn btn-primary btn-sm") if order.is_completable else None,
            cls="card",
        ),
        Div(
            H3("Items"),
            Table(
                Thead(Tr(Th("Product"), Th("SKU"), Th("Unit price"), Th("Qty"), Th("Shipped"), Th("Subtotal"))),
                Tbody(*[
                    Tr(
                        Td(item.product_name),
                        Td(item.product_sku.sku_code if item.product_sku else "-"),
                        Td(format_price(item.purchase_unit_price)),
                        Td(str(item.quantity)),
                        Td(str(item.shipped_quantity) if item.shipped_quantity is not None else "-"),
                        Td(format_price(item.purchase_subtotal)),
                    )
                    for item in order.items
                ]),
            ),
            P(f"Subtotal {format_price(order.subtotal)} · shipping {format_price(order.shipping_fee)} · "
              f"total {format_price(order.total_price)}"),
            cls="card",
        ),
        Div(
            H3("Ship to"),
            P(order.shipping_name),
            P(f"〒{order.shipping_postal_code} {order.shipping_prefecture} {order.shipping_city} "
              f"{order.shipping_address_line1} {order.shipping_address_line2 or ''}"),
            P(f"TEL {order.shipping_phone}"),
            cls="card",
        ),
        Div(
            H3("Shipments"),
            Ul(*[
                Li(A(s.shipment_number, href=f"/admin/shipments/{s.id}"), " ", status_badge(s.status))
                for s in order.shipments
            ]) if order.shipments else P("No shipments yet."),
            Form(
                H4("New partial shipment"),
                *[
                    field(f"{item.product_name} (unshipped {item.unshipped_quantity})",
                          text_input(f"quantity_{item.id}", 0, type="number", min="0",
                                     max=str(item.unshipped_quantity)))
                    for item in unshipped
                ],
                Button("Create shipment", type="submit", cls="btn btn-primary"),
                method="post", action=f"{base}/shipments",
            ) if unshipped and order.status != "cancelled" else None,
            cls="card",
        ),
        A("← Back to orders", href="/admin/orders"),
    )


@rt("/admin/orders/{order_id}/status", methods=["POST"])
async def admin_order_status(request, order_id: int, status: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.orders.update_status(order_id, status)
        session.flash("Status updated.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to update the status"), "error")
    return redirect(session, f"/admin/orders/{order_id}")


@rt("/admin/orders/{order_id}/cancel", methods=["POST"])
async def admin_order_cancel(request, order_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.orders.cancel(order_id)
        session.flash("Order cancelled.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to cancel the order"), "error")
    return redirect(session, f"/admin/orders/{order_id}")


@rt("/admin/orders/{order_id}/complete", methods=["POST"])
async def admin_order_complete(request, order_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        await session.orders.complete(order_id)
        session.flash("Order completed.")
    except ApiError as e:
        session.flash(describe_error(e, "Failed to complete the order"), "error")
    return redirect(session, f"/admin/orders/{order_id}")


@rt("/admin/orders/{order_id}/shipments", methods=["POST"])
async def admin_order_ship_part(request, order_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    form = await request.form()
    lines = []
    for key, value in form.items():
        if key.startswith("quantity_"):
            item_id, quantity = to_int(key[len("quantity_"):]), to_int(value)
            if item_id and quantity and quantity > 0:
                lines.append(ShipmentLine(order_item_id=item_id, quantity=quantity))
    if not lines:
        session.flash("Enter a quantity for at least one item.", "error")
        return redirect(session, f"/admin/orders/{order_id}")

    try:
        shipment = await session.shipments.create(CreateShipmentData(order_id=order_id, items=lines))
    except ApiError as e:
        session.flash(describe_error(e, "Failed to create the shipment"), "error")
        return redirect(session, f"/admin/orders/{order_id}")
    session.flash(f"Shipment {shipment.shipment_number} created.")
    return redirect(session, f"/admin/shipments/{shipment.id}")


# ==================== Shipments ====================


@rt("/admin/shipments")
async def admin_shipments(request, status: str = "", shipment_number: str = "", tracking_number: str = "",
                          page: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied

    shipments, pagination, statuses, error = [], None, [], None
    try:
        statuses = await session.shipments.statuses()
        shipments, pagination = await session.shipments.list(
            status=status, shipment_number=shipment_number, tracking_number=tracking_number,
            sort_by="created_at", sort_order="desc", per_page=settings.ADMIN_PER_PAGE, page=to_int(page, 1),
        )
    except ApiError as e:
        error = describe_error(e, "Failed to load shipments")

    filters = {"status": status, "shipment_number": shipment_number, "tracking_number": tracking_number}
    return admin_page(
        session,
        "Shipments",
        Form(
            field("Status", select_input("status", choice_pairs(statuses), status, blank="All")),
            field("Shipment number", text_input("shipment_number", shipment_number)),
            field("Tracking number", text_input("tracking_number", tracking_number)),
            Button("Filter", type="submit", cls="btn"),
            method="get", action="/admin/shipments", cls="card filters",
        ),
        error_box(error),
        Table(
            Thead(Tr(Th("Shipment"), Th("Order"), Th("Status"), Th("Carrier"), Th("Tracking"), Th("Shipped"))),
            Tbody(*[
                Tr(
                    Td(A(s.shipment_number, href=f"/admin/shipments/{s.id}")),
                    Td(A(s.order.order_number if s.order else f"#{s.order_id}", href=f"/admin/orders/{s.order_id}")),
                    Td(status_badge(s.status, statuses)),
                    Td(s.shipping_carrier or "-"),
                    Td(s.tracking_number or "-"),
                    Td(format_date(s.shipping_date)),
                )
                for s in shipments
            ]),
        ),
        pagination_links("/admin/shipments", pagination, filters) if pagination else None,
    )


@rt("/admin/shipments/{shipment_id}", methods=["GET"])
async def admin_shipment_detail(request, shipment_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    try:
        shipment = await session.shipments.get(shipment_id)
    except ApiError as e:
        session.flash(describe_error(e, "Failed to load the shipment"), "error")
        return redirect(session, "/admin/shipments")
    try:
        statuses = await session.shipments.statuses()
    except ApiError as e:
        logger.error(f"Failed to load shipment statuses: {e}")
        statuses = []

    base = f"/admin/shipments/{shipment_id}"
    preparing = shipment.status == ShipmentStatus.PREPARING.value
    packed = shipment.status == ShipmentStatus.PACKED.value
    shipped = shipment.status == ShipmentStatus.SHIPPED.value

    def item_row(item):
        name = item.order_item.product_name if item.order_item else f"Order item #{item.order_item_id}"
        return Tr(
            Td(name),
            Td(item.product_sku.sku_code if item.product_sku else "-"),
            Td(str(item.quantity)),
            Td(item.picked_at or (post_button("Picked", f"{base}/items/{item.id}/pick") if preparing else "-")),
            Td(item.packed_at or "-"),
        )

    return admin_page(
        session,
        f"Shipment {shipment.shipment_number}",
        Div(
            P("Status: ", status_badge(shipment.status, statuses)),
            P("Order: ", A(shipment.order.order_number if shipment.order else f"#{shipment.order_id}",
                           href=f"/admin/orders/{shipment.order_id}")),
            P(f"Shipped on {format_date(shipment.shipping_date)}") if shipment.shipping_date else None,
            P(f"Packed by {shipment.packer.name}") if shipment.packer else None,
            P(f"Shipped by {shipment.shipper.name}") if shipment.shipper else None,
            cls="card",
        ),
        Div(
            H3("Items"),
            Table(
                Thead(Tr(Th("Product"), Th("SKU"), Th("Qty"), Th("Picked"), Th("Packed"))),
                Tbody(*[item_row(item) for item in shipment.items]),
            ),
            post_button("Mark all picked", f"{base}/pick-all", cls="btn btn-primary")
            if preparing and not shipment.all_picked else None,
            " ",
            confirm_button("Packing done", f"{base}/pack", "Mark this shipment as packed?",
                           cls="btn btn-primary") if preparing else None,
            cls="card",
        ),
        Div(
            H3("Shipping"),
            Form(
                field("Carrier", text_input("shipping_carrier", shipment.shipping_carrier)),
                field("Tracking number", text_input("tracking_number", shipment.tracking_number)),
                Button("Ship", type="submit", cls="btn btn-primary", formaction=f"{base}/ship",
                       onclick="return confirm('Ship this shipment? Stock will be issued.')") if packed else None,
                " ",
                Button("Save tracking", type="submit", cls="btn"),
                method="post", action=f"{base}/tracking",
            ),
            confirm_button("Delivered", f"{base}/deliver", "Mark this shipment as delivered?",
                           cls="btn btn-primary") if shipped else None,
            cls="card",
        ),
        Div(
            H3("Note"),
            Form(
                Textarea(shipment.note or "", name="note", rows="3"),
                Button("Save note", type="submit", cls="btn"),
                method="post", action=f"{base}/note",
            ),
            cls="card",
        ),
        A("← Back to shipments", href="/admin/shipments"),
    )


async def _shipment_action(session, shipment_id: int, call, done: str, failed: str):
    try:
        await call
        session.flash(done)
    except ApiError as e:
        session.flash(describe_error(e, failed), "error")
    return redirect(session, f"/admin/shipments/{shipment_id}")


@rt("/admin/shipments/{shipment_id}/items/{item_id}/pick", methods=["POST"])
async def admin_shipment_pick_item(request, shipment_id: int, item_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return await _shipment_action(session, shipment_id, session.shipments.pick_item(item_id),
                                  "Item picked.", "Failed to mark the item as picked")


@rt("/admin/shipments/{shipment_id}/pick-all", methods=["POST"])
async def admin_shipment_pick_all(request, shipment_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return await _shipment_action(session, shipment_id, session.shipments.pick_all(shipment_id),
                                  "All items picked.", "Failed to mark the items as picked")


@rt("/admin/shipments/{shipment_id}/pack", methods=["POST"])
async def admin_shipment_pack(request, shipment_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return await _shipment_action(session, shipment_id, session.shipments.pack(shipment_id),
                                  "Shipment packed.", "Failed to mark the shipment as packed")


@rt("/admin/shipments/{shipment_id}/ship", methods=["POST"])
async def admin_shipment_ship(request, shipment_id: int, shipping_carrier: str = "", tracking_number: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    details = ShipData(shipping_carrier=blank_to_none(shipping_carrier),
                       tracking_number=blank_to_none(tracking_number))
    return await _shipment_action(session, shipment_id, session.shipments.ship(shipment_id, details),
                                  "Shipment sent.", "Failed to ship")


@rt("/admin/shipments/{shipment_id}/deliver", methods=["POST"])
async def admin_shipment_deliver(request, shipment_id: int):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return await _shipment_action(session, shipment_id, session.shipments.deliver(shipment_id),
                                  "Shipment delivered.", "Failed to mark the shipment as delivered")


@rt("/admin/shipments/{shipment_id}/tracking", methods=["POST"])
async def admin_shipment_tracking(request, shipment_id: int, shipping_carrier: str = "",
                                  tracking_number: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    details = ShipData(shipping_carrier=blank_to_none(shipping_carrier),
                       tracking_number=blank_to_none(tracking_number))
    return await _shipment_action(session, shipment_id, session.shipments.update_tracking(shipment_id, details),
                                  "Tracking details saved.", "Failed to update the tracking details")


@rt("/admin/shipments/{shipment_id}/note", methods=["POST"])
async def admin_shipment_note(request, shipment_id: int, note: str = ""):
    session = await open_session(request)
    if denied := require_admin(session):
        return denied
    return await _shipment_action(session, shipment_id, session.shipments.update_note(shipment_id, note),
                                  "Note saved.", "Failed to update the note")
