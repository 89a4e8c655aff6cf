"""
Product catalog endpoints, including scheduled prices and per-product stock.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..config.database import get_database
from ..config.settings import get_settings
from ..models.product import ScheduledPrice
from ..schemas.common import pagination
from ..schemas.product import (
    CreateProductRequest,
    LowStockProductResponse,
    ProductResponse,
    ProductSummaryResponse,
    ProductsListResponse,
    ScheduledPriceRequest,
    ScheduledPriceResponse,
    StockAdjustmentRequest,
    StockHistoryResponse,
    UpdateProductRequest,
)
from ..services import inventory, pricing
from ..services import products as product_service
from ..utils.dependencies import verify_product_exists
from ..utils.serializers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("", status_code=201, response_model=ProductResponse)
async def create_product(product: CreateProductRequest, db=Depends(get_database)):
    """Create a new product"""
    try:
        values = product.model_dump(exclude={"performed_by"})
        created = await product_service.create_product(db, values, product.performed_by)
        return ProductResponse(**serialize_doc(created))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create product: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to create product: {str(e)}")


@router.get("", status_code=200, response_model=ProductsListResponse)
async def list_products(
    q: Optional[str] = Query(None, description="Search across name, brand, symptoms, forms and potencies"),
    category: Optional[str] = Query(None, description="Filter by category"),
    brand: Optional[str] = Query(None, description="Filter by brand"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum price filter"),
    max_price: Optional[float] = Query(None, gt=0, description="Maximum price filter"),
    in_stock: Optional[bool] = Query(None, description="Filter products in stock"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Number of products to return"),
    offset: int = Query(0, ge=0, description="Number of products to skip"),
    db=Depends(get_database)
):
    """List products with optional filtering and pagination"""
    try:
        products, total = await product_service.list_products(
            db, limit, offset,
            q=q, category=category, brand=brand,
            min_price=min_price, max_price=max_price, in_stock=in_stock,
        )
        return ProductsListResponse(
            products=[ProductSummaryResponse(**p) for p in serialize_docs(products)],
            pagination=pagination(total, limit, offset),
        )
    except Exception as e:
        logger.error(f"Failed to fetch products: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch products: {str(e)}")


@router.get("/search", status_code=200, response_model=List[ProductSummaryResponse])
async def search_products(q: str = Query("", description="Text to look for"), db=Depends(get_database)):
    try:
        products = await product_service.search_products(db, q)
        return serialize_docs(products)
    except Exception as e:
        logger.error(f"Failed to search products: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to search products: {str(e)}")


@router.get("/{product_id}", status_code=200, response_model=ProductResponse)
async def get_product(product_id: str, db=Depends(get_database)):
    """Get a specific product by ID"""
    try:
        product = await verify_product_exists(product_id, db)
        return ProductResponse(**serialize_doc(product))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch product {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch product: {str(e)}")


@router.put("/{product_id}", status_code=200, response_model=ProductResponse)
async def update_product(product_id: str, product_update: UpdateProductRequest, db=Depends(get_database)):
    """Update an existing product"""
    try:
        updates = product_update.model_dump(exclude_unset=True, exclude={"performed_by"})
        if not updates:
            raise HTTPException(status_code=400, detail="No fields to update")

        updated = await product_service.update_product(db, product_id, updates, product_update.performed_by)
        return ProductResponse(**serialize_doc(updated))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update product {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update product: {str(e)}")


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: str, performed_by: str = Query("admin", min_length=1), db=Depends(get_database)):
    """Delete a product and any cart rows pointing at it"""
    try:
        await product_service.delete_product(db, product_id, performed_by)
        return None
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete product {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to delete product: {str(e)}")


# Scheduled prices

@router.get("/{product_id}/scheduled-prices", status_code=200, response_model=List[ScheduledPriceResponse])
async def list_scheduled_prices(product_id: str, db=Depends(get_database)):
    try:
        return await pricing.list_scheduled_prices(db, product_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch scheduled prices for {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch scheduled prices: {str(e)}")


@router.post("/{product_id}/scheduled-prices", status_code=201, response_model=ProductResponse)
async def add_scheduled_price(product_id: str, request: ScheduledPriceRequest, db=Depends(get_database)):
    """Schedule a price override; it takes effect at once if its window is open"""
    try:
        entry = ScheduledPrice(price=request.price, start_date=request.start_date, end_date=request.end_date)
        product = await pricing.add_scheduled_price(db, product_id, entry, request.performed_by)
        return ProductResponse(**serialize_doc(product))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to schedule price for {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to schedule price: {str(e)}")


@router.delete("/{product_id}/scheduled-prices/{schedule_id}", status_code=200, response_model=ProductResponse)
async def cancel_scheduled_price(
    product_id: str,
    schedule_id: str,
    performed_by: str = Query("admin", min_length=1),
    db=Depends(get_database)
):
    try:
        product = await pricing.cancel_scheduled_price(db, product_id, schedule_id, performed_by)
        return ProductResponse(**serialize_doc(product))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to cancel scheduled price {schedule_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to cancel scheduled price: {str(e)}")


# Stock

@router.post("/{product_id}/stock", status_code=200, response_model=ProductResponse)
async def adjust_stock(product_id: str, request: StockAdjustmentRequest, db=Depends(get_database)):
    """Add or remove units, or set an absolute stock level"""
    try:
        product = await inventory.adjust_stock(
            db,
            product_id,
            reason=request.reason,
            performed_by=request.performed_by,
            change=request.change,
            new_stock=request.new_stock,
        )
        return ProductResponse(**serialize_doc(product))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to adjust stock for {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to adjust stock: {str(e)}")


@router.get("/{product_id}/stock-history", status_code=200, response_model=List[StockHistoryResponse])
async def get_stock_history(
    product_id: str,
    limit: int = Query(50, ge=1, le=500),
    db=Depends(get_database)
):
    try:
        history = await inventory.get_stock_history(db, product_id, limit)
        return serialize_docs(history)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch stock history for {product_id}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch stock history: {str(e)}")


inventory_router = APIRouter(prefix="/inventory", tags=["Inventory"])


@inventory_router.get("/low-stock", status_code=200, response_model=List[LowStockProductResponse])
async def get_low_stock_products(db=Depends(get_database)):
    """Products at or below their low-stock threshold, lowest stock first"""
    try:
        products = await inventory.get_low_stock_products(db)
        return [
            LowStockProductResponse(**serialize_doc(p), threshold=inventory.stock_threshold(p))
            for p in products
        ]
    except Exception as e:
        logger.error(f"Failed to fetch low stock products: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch low stock products: {str(e)}")


@inventory_router.get("/history", status_code=200, response_model=List[StockHistoryResponse])
async def get_all_stock_history(limit: int = Query(100, ge=1, le=1000), db=Depends(get_database)):
    try:
        history = await inventory.get_all_stock_history(db, limit)
        return serialize_docs(history)
    except Exception as e:
        logger.error(f"Failed to fetch stock history: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch stock history: {str(e)}")
