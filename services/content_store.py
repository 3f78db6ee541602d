from datetime import datetime, timezone
from typing import Any, Dict, List, Union

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel, ValidationError
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure, PyMongoError

from config.log_config import get_logger
from models.content_model import ContentRecord, collection_name, model_for
from utils.convert_objectIds import document_to_record
from utils.exceptions import NetworkError, NotFoundError, StoreError

logger = get_logger("content_store")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def translate_error(error: PyMongoError, collection: str) -> StoreError:
    if isinstance(error, ConnectionFailure):
        return NetworkError(str(error), collection)
    return StoreError(str(error), collection)


def to_object_id(record_id: str, collection: str) -> ObjectId:
    if not ObjectId.is_valid(record_id):
        raise NotFoundError(f"No document '{record_id}' in {collection}", collection)
    return ObjectId(record_id)


class ContentStore:
    """Collection-agnostic CRUD gateway over the document store.

    Records go in and come out as the canonical model of their collection
    (see ``models.content_model.COLLECTION_MODELS``). Every driver error is
    re-raised as a ``StoreError``; nothing is retried.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    def _coerce(self, collection: str, record: Union[ContentRecord, Dict[str, Any]]) -> ContentRecord:
        model = model_for(collection)
        if isinstance(record, model):
            return record
        if isinstance(record, BaseModel):
            record = record.model_dump(by_alias=True)
        return model.model_validate(record)

    def _parse(self, collection: str, doc: Dict[str, Any]) -> ContentRecord:
        return model_for(collection).model_validate(document_to_record(doc))

    # Fetch every record of a collection
    async def fetch_all(self, collection) -> List[ContentRecord]:
        name = collection_name(collection)
        model_for(name)  # unknown collections fail before any network call
        try:
            docs = await self.db[name].find({}).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error fetching {name}: {e}")
            raise translate_error(e, name) from e

        records = []
        for doc in docs:
            try:
                records.append(self._parse(name, doc))
            except ValidationError as e:
                logger.warning(f"Skipping malformed document {doc.get('_id')} in {name}\n{e}")
        return records

    async def get(self, collection, record_id: str) -> ContentRecord:
        name = collection_name(collection)
        oid = to_object_id(record_id, name)
        try:
            doc = await self.db[name].find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Error getting document {record_id} from {name}: {e}")
            raise translate_error(e, name) from e

        if doc is None:
            raise NotFoundError(f"No document '{record_id}' in {name}", name)
        return self._parse(name, doc)

    async def add(self, collection, record: Union[ContentRecord, Dict[str, Any]]) -> ContentRecord:
        name = collection_name(collection)
        record = self._coerce(name, record)
        created_at = utc_now()
        document = {**record.to_document(), "createdAt": created_at}

        try:
            result = await self.db[name].insert_one(document)
        except PyMongoError as e:
            logger.error(f"Error adding document to {name}: {e}")
            raise translate_error(e, name) from e

        return record.model_copy(update={"id": str(result.inserted_id), "created_at": created_at})

    async def update(self, collection, record_id: str, changes: Union[BaseModel, Dict[str, Any]]) -> ContentRecord:
        name = collection_name(collection)
        oid = to_object_id(record_id, name)
        if isinstance(changes, BaseModel):
            changes = changes.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)

        try:
            doc = await self.db[name].find_one_and_update(
                {"_id": oid},
                {"$set": {**changes, "updatedAt": utc_now()}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Error updating document {record_id} in {name}: {e}")
            raise translate_error(e, name) from e

        if doc is None:
            raise NotFoundError(f"No document '{record_id}' in {name}", name)

        try:
            return self._parse(name, doc)
        except ValidationError as e:
            raise StoreError(f"Document '{record_id}' in {name} is malformed after update: {e}", name) from e

    async def delete(self, collection, record_id: str) -> str:
        name = collection_name(collection)
        oid = to_object_id(record_id, name)
        try:
            result = await self.db[name].delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Error deleting document {record_id} from {name}: {e}")
            raise translate_error(e, name) from e

        # deleting an id twice is an error, not a no-op
        if result.deleted_count == 0:
            raise NotFoundError(f"No document '{record_id}' in {name}", name)
        return record_id
