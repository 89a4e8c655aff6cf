"""
Schemas package for API request/response validation.
These models define the structure of data sent to and from the API endpoints.
"""

# Product schemas
from .product import (
    CreateProductRequest,
    UpdateProductRequest,
    ScheduledPriceRequest,
    StockAdjustmentRequest,
    ScheduledPriceResponse,
    ProductResponse,
    ProductSummaryResponse,
    ProductsListResponse,
    StockHistoryResponse,
    LowStockProductResponse
)

# Cart schemas
from .cart import (
    AddToCartRequest,
    UpdateCartQuantityRequest,
    CartItemResponse,
    CartLineResponse,
    CartResponse
)

# Order schemas
from .order import (
    CreateOrderRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    OrderItemResponse,
    OrderResponse,
    OrderSummaryResponse,
    OrdersListResponse
)

# Audit schemas
from .audit import (
    AuditLogResponse,
    AuditLogListResponse,
    PriceJobResponse
)

# Analytics schemas
from .analytics import (
    CreateUserRequest,
    UpdateUserRoleRequest,
    UserResponse,
    UsersListResponse,
    TrackActivityRequest,
    ActivityResponse,
    CreateABTestRequest,
    UpdateABTestRequest,
    TrackVariantRequest,
    TrackConversionRequest,
    DeclareWinnerRequest,
    VariantAssignmentResponse,
    ABTestResponse,
    ABTestDetailResponse,
    CreateCohortRequest,
    CohortResponse,
    RetentionPoint,
    CohortRevenueResponse,
    CohortComparison,
    CompareCohortsRequest,
    CohortUserResponse,
    CreateFunnelRequest,
    UpdateFunnelRequest,
    TrackFunnelStepRequest,
    FunnelResponse,
    FunnelDataResponse,
    FunnelConversion,
    TimeToConvertResponse
)

# Delivery, payment and site settings schemas
from .integrations import (
    DeliveryCheckResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    SiteSettingsResponse,
    UpdateSiteSettingsRequest
)

from .review import (
    CreateReviewRequest,
    HelpfulVoteRequest,
    ModerateReviewRequest,
    ReviewReplyRequest,
    ReviewResponse
)
from .consultation import (
    BookConsultationRequest,
    BookingResponse,
    CreateDoctorRequest,
    DoctorResponse,
    UpdateBookingStatusRequest
)

# Common schemas
from .common import (
    HealthCheckResponse,
    RootResponse,
    PaginationMeta,
    SuccessResponse,
    ValidationErrorDetail,
    ValidationErrorResponse,
    pagination
)

__all__ = [
    # Product schemas
    "CreateProductRequest",
    "UpdateProductRequest",
    "ScheduledPriceRequest",
    "StockAdjustmentRequest",
    "ScheduledPriceResponse",
    "ProductResponse",
    "ProductSummaryResponse",
    "ProductsListResponse",
    "StockHistoryResponse",
    "LowStockProductResponse",

    # Cart schemas
    "AddToCartRequest",
    "UpdateCartQuantityRequest",
    "CartItemResponse",
    "CartLineResponse",
    "CartResponse",

    # Order schemas
    "CreateOrderRequest",
    "UpdateOrderStatusRequest",
    "UpdatePaymentStatusRequest",
    "OrderItemResponse",
    "OrderResponse",
    "OrderSummaryResponse",
    "OrdersListResponse",

    # Audit schemas
    "AuditLogResponse",
    "AuditLogListResponse",
    "PriceJobResponse",

    # Analytics schemas
    "CreateUserRequest",
    "UpdateUserRoleRequest",
    "UserResponse",
    "UsersListResponse",
    "TrackActivityRequest",
    "ActivityResponse",
    "CreateABTestRequest",
    "UpdateABTestRequest",
    "TrackVariantRequest",
    "TrackConversionRequest",
    "DeclareWinnerRequest",
    "VariantAssignmentResponse",
    "ABTestResponse",
    "ABTestDetailResponse",
    "CreateCohortRequest",
    "CohortResponse",
    "RetentionPoint",
    "CohortRevenueResponse",
    "CohortComparison",
    "CompareCohortsRequest",
    "CohortUserResponse",
    "CreateFunnelRequest",
    "UpdateFunnelRequest",
    "TrackFunnelStepRequest",
    "FunnelResponse",
    "FunnelDataResponse",
    "FunnelConversion",
    "TimeToConvertResponse",

    # Delivery, payment and site settings schemas
    "DeliveryCheckResponse",
    "PaymentIntentRequest",
    "PaymentIntentResponse",
    "SiteSettingsResponse",
    "UpdateSiteSettingsRequest",

    # Review and consultation schemas
    "CreateReviewRequest",
    "HelpfulVoteRequest",
    "ModerateReviewRequest",
    "ReviewReplyRequest",
    "ReviewResponse",
    "BookConsultationRequest",
    "BookingResponse",
    "CreateDoctorRequest",
    "DoctorResponse",
    "UpdateBookingStatusRequest",

    # Common schemas
    "HealthCheckResponse",
    "RootResponse",
    "PaginationMeta",
    "SuccessResponse",
    "ValidationErrorDetail",
    "ValidationErrorResponse",
    "pagination"
]
