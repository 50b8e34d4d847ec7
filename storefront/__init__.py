"""Web storefront and admin console for a REST e-commerce backend."""

__version__ = "0.1.0"
