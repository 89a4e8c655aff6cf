"""
Database configuration and connection management.
Handles MongoDB connection lifecycle, index creation and the background
price scheduler that depends on the connection.
"""
import asyncio
import logging
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException

from .settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class DatabaseManager:
    """Manages MongoDB database connection and operations."""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            logger.info("🚀 Connecting to MongoDB...")

            self.client = AsyncIOMotorClient(
                settings.mongodb_url,
                serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
                connectTimeoutMS=settings.connect_timeout_ms,
                socketTimeoutMS=settings.socket_timeout_ms,
                maxPoolSize=settings.max_pool_size,
                minPoolSize=settings.min_pool_size,
                retryWrites=settings.retry_writes,
                directConnection=settings.direct_connection,
            )

            database = self.client[settings.database_name]
            await self.client.admin.command('ping')
            self.database = database
            logger.info("✅ Connected to MongoDB successfully")

        except Exception as db_error:
            # The app still serves / and /health without a database
            logger.warning(f"⚠️  MongoDB connection failed: {db_error}")

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        try:
            if self.client is not None:
                self.client.close()
                logger.info("🔌 MongoDB connection closed")
        except Exception as e:
            logger.error(f"Error during database disconnect: {e}")
        finally:
            self.client = None
            self.database = None

    async def create_indexes(self) -> None:
        """Create database indexes for the storefront collections."""
        if self.database is None:
            logger.warning("Database not connected, skipping index creation")
            return

        try:
            db = self.database

            # Products
            await db.products.create_index("name")
            await db.products.create_index("category")
            await db.products.create_index("brand")
            await db.products.create_index("base_price")
            await db.products.create_index("created_at")

            # Cart rows are unique per user and product variant
            await db.cart_items.create_index("user_id")
            await db.cart_items.create_index(
                [("user_id", 1), ("product_id", 1), ("potency", 1), ("form", 1), ("packing_size", 1)],
                unique=True,
                name="by_user_product_variant",
            )

            # Orders
            await db.orders.create_index("status")
            await db.orders.create_index([("user_id", 1), ("created_at", -1)])

            # Stock history and audit trail
            await db.product_stock_history.create_index([("product_id", 1), ("timestamp", -1)])
            await db.product_stock_history.create_index([("timestamp", -1)])
            await db.audit_logs.create_index([("timestamp", -1)])
            await db.audit_logs.create_index([("entity_type", 1), ("entity_id", 1)])

            # Reviews: one per user and product, one helpful vote per user
            await db.reviews.create_index([("product_id", 1), ("user_id", 1)], unique=True)
            await db.reviews.create_index([("status", 1), ("created_at", 1)])
            await db.review_interactions.create_index(
                [("review_id", 1), ("user_id", 1), ("type", 1)], unique=True
            )

            # Consultations
            await db.consultation_doctors.create_index("clinic_city")
            await db.consultation_doctors.create_index("specialization")
            await db.consultation_bookings.create_index("doctor_id")
            await db.consultation_bookings.create_index("user_id")

            # Analytics
            await db.ab_tests.create_index("status")
            await db.ab_test_assignments.create_index([("test_id", 1), ("user_id", 1)], unique=True)
            await db.ab_test_conversions.create_index("test_id")
            await db.funnel_events.create_index([("funnel_id", 1), ("timestamp", 1)])
            await db.user_activity.create_index([("user_id", 1), ("timestamp", 1)])
            await db.users.create_index("email")
            await db.users.create_index("role")

            logger.info("✅ Database indexes created successfully")

        except Exception as index_error:
            logger.warning(f"⚠️  Failed to create indexes: {index_error}")

    def get_database(self) -> AsyncIOMotorDatabase:
        """Get database instance."""
        if self.database is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.database

    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self.database is not None


# Global database manager instance
db_manager = DatabaseManager()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for database connection and the price scheduler."""
    from ..services.pricing import run_price_scheduler

    scheduler_task: Optional[asyncio.Task] = None

    try:
        logger.info("🚀 Starting up application...")
        await db_manager.connect()
        await db_manager.create_indexes()

        app.state.db_manager = db_manager

        if settings.price_scheduler_enabled and db_manager.is_connected():
            scheduler_task = asyncio.create_task(
                run_price_scheduler(db_manager.get_database(), settings.price_scheduler_interval_seconds)
            )
            logger.info("⏰ Scheduled price job started")

    except Exception as e:
        logger.error(f"❌ Failed to initialize application: {e}")

    yield

    # Shutdown
    if scheduler_task is not None:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass
    await db_manager.disconnect()


async def get_database() -> AsyncIOMotorDatabase:
    """FastAPI dependency to get database instance."""
    if not db_manager.is_connected():
        raise HTTPException(
            status_code=503,
            detail="Database connection not available. Please check your MongoDB connection."
        )
    return db_manager.get_database()


def get_database_manager() -> DatabaseManager:
    """Get database manager instance."""
    return db_manager
