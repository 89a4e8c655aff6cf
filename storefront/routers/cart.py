"""
Shopping cart endpoints. Every mutation answers with the refreshed cart.
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from ..config.database import get_database
from ..schemas.cart import AddToCartRequest, CartResponse, UpdateCartQuantityRequest
from ..services import cart as cart_service
from ..utils.serializers import serialize_doc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cart", tags=["Cart"])


async def _cart_response(db, user_id: str) -> CartResponse:
    cart = await cart_service.get_cart(db, user_id)
    return CartResponse(**serialize_doc(cart))


@router.get("/{user_id}", status_code=200, response_model=CartResponse)
async def get_cart(user_id: str, db=Depends(get_database)):
    """Get a user's cart with product details and totals"""
    try:
        return await _cart_response(db, user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch cart for {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch cart: {str(e)}")


@router.post("/{user_id}/items", status_code=201, response_model=CartResponse)
async def add_to_cart(user_id: str, item: AddToCartRequest, db=Depends(get_database)):
    """Add a product variant; an existing row for the same variant has its quantity increased"""
    try:
        await cart_service.add_to_cart(
            db,
            user_id,
            item.product_id,
            item.potency,
            item.form,
            item.quantity,
            packing_size=item.packing_size,
        )
        return await _cart_response(db, user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to add to cart for {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to add to cart: {str(e)}")


@router.put("/{user_id}/items/{item_id}", status_code=200, response_model=CartResponse)
async def update_cart_item(user_id: str, item_id: str, update: UpdateCartQuantityRequest, db=Depends(get_database)):
    try:
        await cart_service.update_quantity(db, user_id, item_id, update.quantity)
        return await _cart_response(db, user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update cart item {item_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update cart item: {str(e)}")


@router.delete("/{user_id}/items/{item_id}", status_code=200, response_model=CartResponse)
async def remove_cart_item(user_id: str, item_id: str, db=Depends(get_database)):
    try:
        await cart_service.remove_from_cart(db, user_id, item_id)
        return await _cart_response(db, user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to remove cart item {item_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to remove cart item: {str(e)}")


@router.delete("/{user_id}", status_code=204)
async def clear_cart(user_id: str, db=Depends(get_database)):
    try:
        removed = await cart_service.clear_cart(db, user_id)
        logger.info(f"Cart {user_id} cleared ({removed} rows)")
        return None
    except Exception as e:
        logger.error(f"Failed to clear cart for {user_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to clear cart: {str(e)}")
