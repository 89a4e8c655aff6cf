"""
Delivery availability and payment intent endpoints used during checkout.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
import httpx
import logging

from ..config.database import get_database
from ..schemas.integrations import DeliveryCheckResponse, PaymentIntentRequest, PaymentIntentResponse
from ..services import delivery, payments
from ..services.site_settings import shipping_rules
from ..utils.dependencies import get_http_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Checkout"])


@router.get("/delivery/check", status_code=200, response_model=DeliveryCheckResponse)
async def check_delivery(
    pincode: str = Query(..., description="Six digit destination pincode"),
    weight: float = Query(0.5, gt=0, description="Parcel weight in kg"),
    order_value: float = Query(0.0, ge=0, description="Order value used for free shipping"),
    db=Depends(get_database),
    client: httpx.AsyncClient = Depends(get_http_client)
):
    """Courier options and charges for a pincode"""
    try:
        _, threshold = await shipping_rules(db)
        return await delivery.check_availability(
            client, pincode, weight=weight, order_value=order_value, free_shipping_threshold=threshold
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to check delivery for {pincode}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to check delivery: {str(e)}")


@router.post("/payments/intent", status_code=201, response_model=PaymentIntentResponse)
async def create_payment_intent(request: PaymentIntentRequest):
    """Create a Stripe payment intent for an online checkout"""
    try:
        return await payments.create_payment_intent(request.amount, request.currency)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create payment intent: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to create payment intent: {str(e)}")
