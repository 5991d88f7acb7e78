# avocado_api/core/database.py

from contextlib import AbstractAsyncContextManager
from typing import Optional, cast

from fastapi import HTTPException, status
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from avocado_api.core.config import settings


class MongoDbContext(AbstractAsyncContextManager):
    """Owns the process-wide MongoDB client."""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    async def __aenter__(self):
        """Connects on entering the async context."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Disconnects on exiting the async context."""
        await self.disconnect()

    async def connect(self, url: Optional[str] = None, db_name: Optional[str] = None):
        """Establishes and verifies the connection to MongoDB."""
        if self.client is not None and self.db is not None:
            logger.info("MongoDB connection already established.")
            return

        url = url or settings.MONGO_URL
        db_name = db_name or settings.mongo_db_name
        logger.info("Connecting to MongoDB...")
        # Hide credentials
        logger.debug(f"MongoDB host used: {url.split('@')[-1]}")

        try:
            self.client = AsyncIOMotorClient(
                url,
                serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
            )
            await self.client.admin.command('ping')
            self.db = self.client[db_name]
            logger.success(f"MongoDB connection successful to database '{db_name}'.")
        except Exception as e:
            logger.critical(f"FATAL: Failed to connect to MongoDB: {e}")
            if self.client is not None:
                self.client.close()
            self.client = None
            self.db = None
            raise ConnectionError(f"MongoDB connection failed: {e}") from e

    async def disconnect(self):
        """Closes the MongoDB connection."""
        if self.client is not None:
            logger.info("Closing MongoDB connection...")
            try:
                self.client.close()
                logger.info("MongoDB connection closed.")
            finally:
                self.client = None
                self.db = None

    def get_db(self) -> AsyncIOMotorDatabase:
        """Returns the database instance, raising if not connected."""
        if self.db is None:
            logger.critical("Attempted to get MongoDB instance, but it's not available.")
            raise RuntimeError("MongoDB database is not connected or initialized.")
        return cast(AsyncIOMotorDatabase, self.db)


mongo_manager = MongoDbContext()


async def get_database() -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the shared MongoDB database."""
    try:
        return mongo_manager.get_db()
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Database connection not available: {e}")
