"""
Order endpoints: checkout, history and back-office status changes.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..config.settings import get_settings
from ..schemas.common import pagination
from ..schemas.order import (
    CreateOrderRequest,
    OrderResponse,
    OrderSummaryResponse,
    OrdersListResponse,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
)
from ..services import orders as order_service
from ..utils.dependencies import verify_order_exists
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", status_code=201, response_model=OrderResponse)
async def create_order(order: CreateOrderRequest, db=Depends(get_database)):
    """Place an order from the user's cart"""
    try:
        created = await order_service.create_order(
            db,
            order.user_id,
            order.shipping_details,
            order.payment_method,
            payment_id=order.payment_id,
            notes=order.notes,
        )
        return OrderResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create order: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to create order: {str(e)}")


@router.get("", status_code=200, response_model=OrdersListResponse)
async def list_orders(
    status: Optional[str] = Query(None, description="Filter by order status"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db=Depends(get_database)
):
    """All orders, newest first"""
    try:
        orders, total = await order_service.list_orders(db, status, limit, offset)
        return OrdersListResponse(
            orders=[OrderSummaryResponse(**o) for o in serialize_docs(orders)],
            pagination=pagination(total, limit, offset),
        )
    except Exception as e:
        logger.error(f"Failed to fetch orders: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch orders: {str(e)}")


@router.get("/detail/{order_id}", status_code=200, response_model=OrderResponse)
async def get_order(order_id: str, db=Depends(get_database)):
    """Get a specific order by ID"""
    try:
        order = await verify_order_exists(order_id, db)
        return OrderResponse(**serialize_doc(order))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch order {order_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch order: {str(e)}")


@router.get("/{user_id}", status_code=200, response_model=OrdersListResponse)
async def get_user_orders(
    user_id: str,
    status: Optional[str] = Query(None, description="Filter by order status"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Number of orders to return"),
    offset: int = Query(0, ge=0, description="Number of orders to skip"),
    db=Depends(get_database)
):
    """Get orders for a specific user"""
    try:
        orders, total = await order_service.get_user_orders(db, user_id, status, limit, offset)
        return OrdersListResponse(
            orders=[OrderSummaryResponse(**o) for o in serialize_docs(orders)],
            pagination=pagination(total, limit, offset),
            user_id=user_id,
        )
    except Exception as e:
        logger.error(f"Failed to fetch orders for user {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch orders: {str(e)}")


@router.patch("/{order_id}/status", status_code=200, response_model=OrderResponse)
async def update_order_status(order_id: str, status_update: UpdateOrderStatusRequest, db=Depends(get_database)):
    """Update order status; cancelling puts the stock back"""
    try:
        updated = await order_service.update_order_status(
            db, order_id, status_update.status, status_update.performed_by, note=status_update.note
        )
        return OrderResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update order status {order_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update order status: {str(e)}")


@router.patch("/{order_id}/payment", status_code=200, response_model=OrderResponse)
async def update_payment_status(order_id: str, payment_update: UpdatePaymentStatusRequest, db=Depends(get_database)):
    try:
        updated = await order_service.update_payment_status(
            db,
            order_id,
            payment_update.payment_status,
            payment_update.performed_by,
            payment_id=payment_update.payment_id,
        )
        return OrderResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update payment status {order_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update payment status: {str(e)}")
