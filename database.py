# database.py
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import ValidationError
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError, WriteError

import config
from models.student import STUDENT_INDEXES, StudentRecord, serialize_student

logger = logging.getLogger(__name__)

STUDENTS_COLLECTION = "students"

# MongoDB error code for a write rejected by a collection validator
DOCUMENT_VALIDATION_FAILED = 121


class StorageError(Exception):
    """Any failure raised by the storage layer that has no more specific tag."""


class ValidationFailure(StorageError):
    def __init__(self, field: Optional[str], message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class DuplicateKey(StorageError):
    def __init__(self, field: str):
        super().__init__(f"Duplicate value for {field}")
        self.field = field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# BSON dates keep milliseconds only
def _to_millis(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def _object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _validate(fields: dict) -> dict:
    try:
        return StudentRecord.model_validate(fields).to_document()
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else None
        raise ValidationFailure(field, first["msg"]) from e


def _duplicate_field(error: DuplicateKeyError) -> str:
    key_pattern = (error.details or {}).get("keyPattern") or {}
    return next(iter(key_pattern), "registrationNumber")


class StudentGateway:
    """Thin async access to the students collection.

    Every method either returns serialized records (``id`` as a string, no
    ``_id``) or raises one of ``ValidationFailure``, ``DuplicateKey`` or
    ``StorageError``.
    """

    def __init__(self, collection, clock: Callable[[], datetime] = None):
        self.collection = collection
        self.clock = clock or _utcnow

    async def find_many(
        self, filter: dict, sort: List[Tuple[str, int]], skip: int, limit: int
    ) -> Tuple[List[dict], int]:
        try:
            total = await self.collection.count_documents(filter)
            cursor = self.collection.find(filter, sort=sort, skip=skip, limit=limit)
            docs = await cursor.to_list(None)
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        return [serialize_student(doc) for doc in docs], total

    async def find_one(self, filter: dict) -> Optional[dict]:
        try:
            doc = await self.collection.find_one(filter)
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        return serialize_student(doc) if doc else None

    async def find_by_id(self, id: str) -> Optional[dict]:
        oid = _object_id(id)
        if oid is None:
            return None
        return await self.find_one({"_id": oid})

    async def insert(self, record: dict) -> dict:
        doc = _validate(record)
        now = _to_millis(self.clock())
        doc["createdAt"] = now
        doc["updatedAt"] = now
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateKey(_duplicate_field(e)) from e
        except WriteError as e:
            if e.code == DOCUMENT_VALIDATION_FAILED:
                raise ValidationFailure(None, "Student data is invalid") from e
            raise StorageError(str(e)) from e
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        doc["_id"] = result.inserted_id
        return serialize_student(doc)

    async def update_by_id(self, id: str, fields: dict) -> Optional[dict]:
        oid = _object_id(id)
        if oid is None:
            return None
        doc = _validate(fields)
        doc["updatedAt"] = _to_millis(self.clock())
        try:
            updated = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": doc},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise DuplicateKey(_duplicate_field(e)) from e
        except WriteError as e:
            if e.code == DOCUMENT_VALIDATION_FAILED:
                raise ValidationFailure(None, "Student data is invalid") from e
            raise StorageError(str(e)) from e
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        return serialize_student(updated) if updated else None

    async def delete_by_id(self, id: str) -> bool:
        oid = _object_id(id)
        if oid is None:
            return False
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            raise StorageError(str(e)) from e
        return result.deleted_count == 1


def _motor_client(uri: str):
    return AsyncIOMotorClient(uri, tz_aware=True)


class Database:
    """Process-wide MongoDB connection, opened on first use.

    One instance is stored on ``app.state.database`` and handed to the
    routes through a dependency; ``connect()`` may be called any number of
    times and always returns the same database handle.
    """

    def __init__(
        self,
        uri: str = None,
        name: str = None,
        client_factory: Callable = _motor_client,
        clock: Callable[[], datetime] = None,
    ):
        self.uri = uri or config.MONGODB_URI
        self.name = name or config.MONGODB_DB
        self.client_factory = client_factory
        self.clock = clock
        self._client = None
        self._db = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._db is not None

    async def connect(self):
        if self._db is not None:
            return self._db
        async with self._lock:
            if self._db is None:
                logger.info(f"Connecting to MongoDB database: {self.name}")
                client = self.client_factory(self.uri)
                db = client[self.name]
                try:
                    await self._ensure_indexes(db)
                except Exception:
                    logger.error(f"Could not prepare MongoDB database: {self.name}")
                    client.close()
                    raise
                self._client = client
                self._db = db
        return self._db

    async def _ensure_indexes(self, db):
        collection = db[STUDENTS_COLLECTION]
        for key, options in STUDENT_INDEXES:
            await collection.create_index(key, **options)

    async def students(self) -> StudentGateway:
        db = await self.connect()
        return StudentGateway(db[STUDENTS_COLLECTION], clock=self.clock)

    def close(self):
        if self._client is not None:
            logger.info("Closing MongoDB connection")
            self._client.close()
        self._client = None
        self._db = None
