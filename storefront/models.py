"""Pydantic models for backend records and form payloads.

The backend owns every one of these records. The models only parse what it
returns so pages can render it; nothing here enforces business rules.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ShipmentStatus(str, Enum):
    PREPARING = "preparing"
    PACKED = "packed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


class AddressType(str, Enum):
    HOME = "home"
    OFFICE = "office"
    OTHER = "other"


# Orders the customer (or an admin) may still cancel
CANCELLABLE_ORDER_STATUSES = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value}


class User(BaseModel):
    id: int
    name: str
    email: str
    role: str = "customer"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Choice(BaseModel):
    """A value/label pair from the statuses and payment-method endpoints."""

    value: str
    label: str


class Pagination(BaseModel):
    current_page: int = 1
    last_page: int = 1
    per_page: int = 0
    total: int = 0


# ==================== Catalog ====================


class Category(BaseModel):
    id: int
    name: str
    slug: str = ""
    parent_id: Optional[int] = None
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    parent: Optional["Category"] = None
    children: list["Category"] = Field(default_factory=list)


class ProductImage(BaseModel):
    id: int
    product_id: Optional[int] = None
    image_path: str
    alt_text: Optional[str] = None
    sort_order: int = 0
    is_primary: bool = False


class ProductSku(BaseModel):
    """A purchasable variant of a product."""

    id: int
    product_id: Optional[int] = None
    sku_code: str
    jan_code: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    other_attribute: Optional[str] = None
    price: float
    cost_price: Optional[float] = None
    is_active: bool = True
    available_quantity: Optional[int] = None

    @property
    def variant_label(self) -> str:
        parts = [p for p in (self.size, self.color, self.other_attribute) if p]
        return " / ".join(parts) or self.sku_code


class Product(BaseModel):
    id: int
    category_id: Optional[int] = None
    product_code: str
    name: str
    description: Optional[str] = None
    tax_rate: float = 0
    is_published: bool = False
    published_at: Optional[str] = None
    sort_order: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None
    category: Optional[Category] = None
    images: list[ProductImage] = Field(default_factory=list)
    skus: list[ProductSku] = Field(default_factory=list)

    @property
    def primary_image(self) -> Optional[ProductImage]:
        for image in self.images:
            if image.is_primary:
                return image
        return self.images[0] if self.images else None

    @property
    def min_price(self) -> Optional[float]:
        prices = [sku.price for sku in self.skus if sku.is_active]
        return min(prices) if prices else None


# ==================== Inventory ====================


class InventoryProduct(BaseModel):
    id: int
    name: str
    product_code: str = ""


class InventorySku(BaseModel):
    id: int
    sku_code: str
    size: Optional[str] = None
    color: Optional[str] = None
    price: float = 0
    product: Optional[InventoryProduct] = None


class Inventory(BaseModel):
    """Stock record for one SKU.

    ``available_quantity`` is the backend's figure; it is displayed as-is.
    """

    id: int
    product_sku_id: int
    quantity: int = 0
    allocated_quantity: int = 0
    available_quantity: int = 0
    safety_stock: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    product_sku: Optional[InventorySku] = None

    @property
    def is_low_stock(self) -> bool:
        return self.available_quantity <= self.safety_stock


class Performer(BaseModel):
    id: int
    name: str


class InventoryTransaction(BaseModel):
    id: int
    inventory_id: int
    event_type: str
    quantity_change: int
    quantity_before: int
    quantity_after: int
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    performed_by: Optional[int] = None
    note: Optional[str] = None
    created_at: Optional[str] = None
    performer: Optional[Performer] = None


class InventoryAlert(BaseModel):
    id: int
    inventory_id: int
    alert_type: str
    threshold_quantity: int = 0
    current_quantity: int = 0
    is_resolved: bool = False
    resolved_at: Optional[str] = None
    created_at: Optional[str] = None
    inventory: Optional[Inventory] = None


# ==================== Orders & shipments ====================


class OrderItemSku(BaseModel):
    id: int
    sku_code: str


class OrderItem(BaseModel):
    id: int
    order_id: Optional[int] = None
    product_id: Optional[int] = None
    product_sku_id: Optional[int] = None
    product_name: str
    size: Optional[str] = None
    color: Optional[str] = None
    other_attribute: Optional[str] = None
    quantity: int
    purchase_unit_price: float = 0
    purchase_tax_rate: float = 0
    purchase_subtotal: float = 0
    created_at: Optional[str] = None
    product_sku: Optional[OrderItemSku] = None
    shipped_quantity: Optional[int] = None
    unshipped_quantity: Optional[int] = None


class StaffMember(BaseModel):
    id: int
    name: str


class ShipmentItem(BaseModel):
    id: int
    shipment_id: Optional[int] = None
    order_item_id: Optional[int] = None
    product_sku_id: Optional[int] = None
    quantity: int
    picked_at: Optional[str] = None
    packed_at: Optional[str] = None
    order_item: Optional[OrderItem] = None
    product_sku: Optional[OrderItemSku] = None


class OrderCustomer(BaseModel):
    id: int
    name: str
    email: str = ""


class Shipment(BaseModel):
    id: int
    shipment_number: str
    order_id: int
    shipping_carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    shipping_date: Optional[str] = None
    status: str
    note: Optional[str] = None
    packed_by: Optional[int] = None
    shipped_by: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    items: list[ShipmentItem] = Field(default_factory=list)
    order: Optional["Order"] = None
    packer: Optional[StaffMember] = None
    shipper: Optional[StaffMember] = None

    @property
    def all_picked(self) -> bool:
        return all(item.picked_at for item in self.items)


class Order(BaseModel):
    id: int
    order_number: str
    user_id: Optional[int] = None
    user_address_id: Optional[int] = None
    payment_method: str = ""
    order_date: Optional[str] = None
    status: str
    subtotal: float = 0
    shipping_fee: float = 0
    total_price: float = 0
    shipping_name: str = ""
    shipping_name_kana: Optional[str] = None
    shipping_postal_code: str = ""
    shipping_prefecture: str = ""
    shipping_city: str = ""
    shipping_address_line1: str = ""
    shipping_address_line2: Optional[str] = None
    shipping_phone: str = ""
    note: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    user: Optional[OrderCustomer] = None
    items: list[OrderItem] = Field(default_factory=list)
    shipments: list[Shipment] = Field(default_factory=list)

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_ORDER_STATUSES

    @property
    def is_completable(self) -> bool:
        return self.status == OrderStatus.DELIVERED.value


# ==================== Customer records ====================


class Address(BaseModel):
    id: int
    user_id: Optional[int] = None
    address_type: AddressType = AddressType.HOME
    is_default: bool = False
    recipient_name: str
    recipient_name_kana: Optional[str] = None
    postal_code: str
    prefecture: str
    city: str
    address_line1: str
    address_line2: Optional[str] = None
    phone: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def one_line(self) -> str:
        parts = [f"〒{self.postal_code}", self.prefecture, self.city, self.address_line1]
        if self.address_line2:
            parts.append(self.address_line2)
        return " ".join(parts)


class Wishlist(BaseModel):
    id: int
    user_id: Optional[int] = None
    product_id: int
    product_sku_id: Optional[int] = None
    created_at: Optional[str] = None
    product: Optional[Product] = None
    product_sku: Optional[ProductSku] = Field(default=None, alias="productSku")

    model_config = {"populate_by_name": True}


# ==================== Cart ====================


class CartItemCategory(BaseModel):
    id: int
    name: str


class CartItemImage(BaseModel):
    image_path: str
    alt_text: Optional[str] = None


class CartItemProduct(BaseModel):
    id: int
    name: str
    product_code: str = ""
    tax_rate: float = 0
    category: Optional[CartItemCategory] = None
    main_image: Optional[CartItemImage] = None


class CartItemSku(BaseModel):
    id: int
    sku_code: str
    price: float
    size: Optional[str] = None
    color: Optional[str] = None
    other_attribute: Optional[str] = None


class CartItem(BaseModel):
    product_sku_id: int
    quantity: int
    product: CartItemProduct
    sku: CartItemSku
    available_quantity: int = 0
    is_available: bool = True


class CartTotals(BaseModel):
    subtotal: float = 0
    shipping_fee: float = 0
    total_price: float = 0
    item_count: int = 0


class Cart(BaseModel):
    items: list[CartItem] = Field(default_factory=list)
    totals: CartTotals = Field(default_factory=CartTotals)


# ==================== Form payloads ====================


class LoginCredentials(BaseModel):
    email: str
    password: str


class RegisterData(BaseModel):
    name: str
    name_kana: Optional[str] = None
    gender: str
    birthday: str
    email: str
    phone: Optional[str] = None
    password: str
    password_confirmation: str


class AddressForm(BaseModel):
    recipient_name: str
    recipient_name_kana: Optional[str] = None
    postal_code: str
    prefecture: str
    city: str
    address_line1: str
    address_line2: Optional[str] = None
    phone: str
    address_type: Optional[AddressType] = None
    is_default: Optional[bool] = None


class CategoryForm(BaseModel):
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class SkuForm(BaseModel):
    sku_code: str
    jan_code: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    other_attribute: Optional[str] = None
    price: float
    cost_price: Optional[float] = None
    is_active: Optional[bool] = None


class ImageForm(BaseModel):
    image_path: str
    alt_text: Optional[str] = None
    sort_order: Optional[int] = None
    is_primary: Optional[bool] = None


class ProductForm(BaseModel):
    category_id: Optional[int] = None
    product_code: str
    name: str
    description: Optional[str] = None
    tax_rate: Optional[float] = None
    is_published: Optional[bool] = None
    published_at: Optional[str] = None
    sort_order: Optional[int] = None
    skus: list[SkuForm] = Field(default_factory=list)
    images: list[ImageForm] = Field(default_factory=list)


class OrderLine(BaseModel):
    product_sku_id: int
    quantity: int


class CreateOrderData(BaseModel):
    address_id: int
    payment_method: str
    items: list[OrderLine]
    note: Optional[str] = None


class ShipmentLine(BaseModel):
    order_item_id: int
    quantity: int


class CreateShipmentData(BaseModel):
    order_id: int
    items: list[ShipmentLine]


class ShipData(BaseModel):
    shipping_carrier: Optional[str] = None
    tracking_number: Optional[str] = None


Category.model_rebuild()
Shipment.model_rebuild()
