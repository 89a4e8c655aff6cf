"""
API routers, one per resource.
"""
from .ab_tests import router as ab_tests_router
from .admin import router as admin_router
from .cart import router as cart_router
from .checkout import router as checkout_router
from .cohorts import router as cohorts_router
from .consultations import router as consultations_router
from .funnels import router as funnels_router
from .orders import router as orders_router
from .products import inventory_router, router as products_router
from .reviews import router as reviews_router
from .users import router as users_router

all_routers = [
    products_router,
    inventory_router,
    reviews_router,
    cart_router,
    orders_router,
    users_router,
    ab_tests_router,
    cohorts_router,
    funnels_router,
    checkout_router,
    consultations_router,
    admin_router,
]

__all__ = ["all_routers"]
