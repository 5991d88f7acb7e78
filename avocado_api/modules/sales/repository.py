# avocado_api/modules/sales/repository.py
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Depends
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorDatabase

from avocado_api.core.database import get_database
from avocado_api.core.repository import BaseRepository
from .models import SalesRecordCreateInternal, SalesRecordInDB


class SalesRecordRepository(BaseRepository[SalesRecordInDB, SalesRecordCreateInternal]):
    model = SalesRecordInDB
    collection_name = "avocados"

    async def create_indexes(self):
        """Ensures the unique index that makes ``id`` the logical key."""
        try:
            await self.collection.create_index("id", unique=True, name="id_unique")
        except Exception as e:
            self._handle_db_exception(e, "create_indexes")
        logger.info(f"Indexes ensured for collection '{self.collection_name}'.")

    async def find_matching(self, filters: Optional[Dict[str, Any]] = None) -> List[SalesRecordInDB]:
        """Records whose fields equal every value in ``filters``."""
        log = logger.bind(filters=filters)
        records = await self.list_by(filters or {})
        log.debug(f"Found {len(records)} sales records.")
        return records

    async def get_by_record_id(self, record_id: int) -> Optional[SalesRecordInDB]:
        """Looks up the logical ``id`` field, not MongoDB's _id."""
        return await self.get_by({"id": record_id})

    async def replace_all(self, records: Sequence[SalesRecordCreateInternal]) -> int:
        """Wipes the collection and inserts ``records`` in its place."""
        deleted = await self.delete_all()
        inserted = await self.insert_many(records)
        logger.info(f"Replaced {deleted} sales records with {inserted} new ones.")
        return inserted


# Factory to get repository instance
async def get_sales_record_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> SalesRecordRepository:
    return SalesRecordRepository(db)
