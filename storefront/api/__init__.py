"""Typed wrappers around the backend REST API, one module per resource."""

from .addresses import AddressService
from .auth import AuthService
from .cart import CartService
from .categories import CategoryService
from .client import ApiClient, ApiError, describe_error
from .images import ImageService
from .inventory import InventoryService
from .orders import OrderService
from .products import ProductService
from .shipments import ShipmentService
from .wishlists import WishlistService

__all__ = [
    "AddressService",
    "ApiClient",
    "ApiError",
    "AuthService",
    "CartService",
    "CategoryService",
    "ImageService",
    "InventoryService",
    "OrderService",
    "ProductService",
    "ShipmentService",
    "WishlistService",
    "describe_error",
]
