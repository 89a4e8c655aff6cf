"""
Models package for database document structures.
These models represent how data is stored in MongoDB.
"""
from .product import ProductDocument, ProductImage, ScheduledPrice, generate_search_text
from .order import (
    OrderDocument,
    OrderItemDocument,
    ShippingDetails,
    OrderStatusHistory,
    ORDER_STATUSES,
    PAYMENT_STATUSES,
    PAYMENT_METHODS,
)
from .cart import CartItemDocument
from .review import ReviewDocument
from .consultation import BookingDocument, BookingStatusHistory, ConsultationMode, DoctorDocument
from .audit import AuditLogDocument, StockHistoryDocument, SYSTEM_ACTOR
from .analytics import (
    UserDocument,
    ActivityDocument,
    VariantConfig,
    ABTestDocument,
    CohortDocument,
    FunnelStep,
    FunnelDocument,
)

__all__ = [
    # Product models
    "ProductDocument",
    "ProductImage",
    "ScheduledPrice",
    "generate_search_text",

    # Order models
    "OrderDocument",
    "OrderItemDocument",
    "ShippingDetails",
    "OrderStatusHistory",
    "ORDER_STATUSES",
    "PAYMENT_STATUSES",
    "PAYMENT_METHODS",

    # Cart and logs
    "CartItemDocument",
    "AuditLogDocument",
    "StockHistoryDocument",
    "SYSTEM_ACTOR",

    # Analytics
    "UserDocument",
    "ActivityDocument",
    "VariantConfig",
    "ABTestDocument",
    "CohortDocument",
    "FunnelStep",
    "FunnelDocument",

    # Reviews and consultations
    "ReviewDocument",
    "DoctorDocument",
    "ConsultationMode",
    "BookingDocument",
    "BookingStatusHistory",
]
