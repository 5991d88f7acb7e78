# avocado_api/core/repository.py

from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar
from abc import ABC

from bson import ObjectId
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult

from avocado_api.core.exceptions import DatabaseOperationError, DuplicateRecordError

ModelType = TypeVar("ModelType", bound=BaseModel)  # document as stored (e.g. SalesRecordInDB)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)  # payload for inserts


class BaseRepository(ABC, Generic[ModelType, CreateSchemaType]):
    """Base class for MongoDB repositories backed by motor and pydantic."""

    model: Type[ModelType]
    collection_name: str

    def __init__(self, db: AsyncIOMotorDatabase):
        if not getattr(self, 'collection_name', None):
            raise AttributeError("Repository subclass must define a 'collection_name'")
        if not hasattr(self, 'model') or not issubclass(self.model, BaseModel):
            raise AttributeError("Repository subclass must define a pydantic 'model'")

        self.db = db
        self.collection: AsyncIOMotorCollection = db[self.collection_name]
        logger.debug(f"BaseRepository initialized for collection: '{self.collection_name}'")

    @staticmethod
    def _to_objectid(id_str: Any) -> Optional[ObjectId]:
        """Converts the input to an ObjectId, returning None when it is not a valid one."""
        if isinstance(id_str, ObjectId):
            return id_str
        if isinstance(id_str, str) and ObjectId.is_valid(id_str):
            return ObjectId(id_str)
        return None

    def _handle_db_exception(self, e: Exception, operation: str, query: Optional[Dict] = None):
        """Logs a driver exception and raises the matching application error."""
        context = f"op='{operation}' coll='{self.collection_name}'"
        if query is not None: context += f" query='{str(query)[:100]}'"
        log_msg = f"DB Error during {context}: {e}"

        if isinstance(e, DuplicateKeyError):
            dup_key_info = e.details.get('keyValue', {}) if e.details else {}
            logger.warning(f"{log_msg} - Duplicate Key: {dup_key_info}")
            raise DuplicateRecordError(key_value=dup_key_info) from e

        logger.opt(exception=e).error(log_msg)
        raise DatabaseOperationError(operation, str(e)) from e

    def _prepare_data_for_db(self, data: Dict) -> Dict:
        """Hook for subclasses that need to convert values before writing."""
        return dict(data)

    async def get_by_id(self, id: str | ObjectId) -> Optional[ModelType]:
        """Finds a document by its MongoDB _id."""
        obj_id = self._to_objectid(id)
        if not obj_id: return None
        return await self.get_by({"_id": obj_id})

    async def get_by(self, query: Dict[str, Any]) -> Optional[ModelType]:
        """Finds the FIRST document matching the query."""
        try:
            document = await self.collection.find_one(query)
            return self.model.model_validate(document) if document else None
        except Exception as e:
            self._handle_db_exception(e, "get_by", query=query)

    async def list_by(self, query: Optional[Dict[str, Any]] = None) -> List[ModelType]:
        """Lists every document matching the query, in natural order."""
        query = query or {}
        try:
            cursor = self.collection.find(query)
            documents = await cursor.to_list(length=None)
            return [self.model.model_validate(doc) for doc in documents]
        except Exception as e:
            self._handle_db_exception(e, "list_by", query=query)

    async def create(self, data_in: CreateSchemaType | Dict) -> ModelType:
        """Inserts a new document and returns it as stored."""
        if isinstance(data_in, BaseModel):
            create_data_dict = data_in.model_dump()
        else:
            create_data_dict = dict(data_in)

        create_data_prepared = self._prepare_data_for_db(create_data_dict)
        create_data_prepared.pop("_id", None)

        try:
            result: InsertOneResult = await self.collection.insert_one(create_data_prepared)
            inserted_id = result.inserted_id
        except Exception as e:
            self._handle_db_exception(e, "create")

        created_document = await self.get_by_id(inserted_id)
        if created_document is None:
            logger.critical(f"CRITICAL: Failed to retrieve document immediately after insertion! ID: {inserted_id}, Collection: {self.collection_name}")
            raise DatabaseOperationError("create", "Failed to retrieve document after creation.")
        return created_document

    async def insert_many(self, data_in: Sequence[CreateSchemaType | Dict]) -> int:
        """Inserts several documents at once and returns how many were written."""
        documents = [
            self._prepare_data_for_db(item.model_dump() if isinstance(item, BaseModel) else item)
            for item in data_in
        ]
        if not documents:
            return 0
        try:
            result: InsertManyResult = await self.collection.insert_many(documents)
            return len(result.inserted_ids)
        except Exception as e:
            self._handle_db_exception(e, "insert_many")

    async def delete_all(self) -> int:
        """Deletes every document in the collection."""
        try:
            result: DeleteResult = await self.collection.delete_many({})
            logger.info(f"Deleted {result.deleted_count} documents from {self.collection_name}")
            return result.deleted_count
        except Exception as e:
            self._handle_db_exception(e, "delete_all")
