from .blog import BlogPost
from .category import Category
from .media import MediaItem
from .order import (
    Address,
    Customer,
    Order,
    OrderCreate,
    OrderStatusUpdate,
    OrderUpdate,
    PaintingDetails,
)
from .painting import Painting
from .upload import CleanupResult, UploadResult

__all__ = [
    "BlogPost",
    "Category",
    "MediaItem",
    "Address",
    "Customer",
    "Order",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderUpdate",
    "PaintingDetails",
    "Painting",
    "CleanupResult",
    "UploadResult",
]
