"""
FastAPI dependencies and lookup helpers shared by the routers and services
"""
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from typing import AsyncIterator, Dict, Any
import logging

import httpx

from ..config.settings import get_settings

logger = logging.getLogger(__name__)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Dependency yielding an HTTP client for third-party lookups."""
    async with httpx.AsyncClient(timeout=get_settings().http_timeout_seconds) as client:
        yield client


def validate_object_id(object_id: str, resource_name: str = "resource") -> ObjectId:
    """
    Validate and convert string to ObjectId

    Args:
        object_id: String representation of ObjectId
        resource_name: Name of the resource for error messages

    Returns:
        Valid ObjectId instance

    Raises:
        HTTPException: If ObjectId format is invalid
    """
    if not ObjectId.is_valid(object_id):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {resource_name} ID format: {object_id}"
        )
    return ObjectId(object_id)


async def verify_document_exists(
    collection: str,
    document_id: str,
    db: AsyncIOMotorDatabase,
    resource_name: str,
) -> Dict[str, Any]:
    """
    Fetch a document by id or fail with the matching HTTP error

    Raises:
        HTTPException: 400 for a malformed id, 404 when nothing matches
    """
    object_id = validate_object_id(document_id, resource_name)

    document = await db[collection].find_one({"_id": object_id})
    if not document:
        raise HTTPException(
            status_code=404,
            detail=f"{resource_name[:1].upper()}{resource_name[1:]} {document_id} not found"
        )

    return document


async def verify_product_exists(product_id: str, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    """Verify that a product exists in the database and return it."""
    return await verify_document_exists("products", product_id, db, "product")


async def verify_order_exists(order_id: str, db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    """Verify that an order exists in the database and return it."""
    return await verify_document_exists("orders", order_id, db, "order")
