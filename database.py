"""
MongoDB record store for schools

Each operation opens its own client, does its work and closes the client on
every exit path. There is no pooling across requests, no caching and no
retry: a driver error surfaces once as StorageError.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import CollectionInvalid, PyMongoError

from config import Settings
from errors import StorageError
from schemas import SchoolCreate

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., MongoClient]


def _redact(uri: str) -> str:
    return uri[:20] + "..." if len(uri) > 20 else uri


class SchoolStore:
    def __init__(self, settings: Settings, client_factory: ClientFactory = MongoClient):
        self._uri = settings.mongodb_uri
        self._db_name = settings.mongodb_db
        self._collection_name = settings.mongodb_collection
        self._client_factory = client_factory

    @contextmanager
    def _database(self, action: str) -> Iterator[Database]:
        """Yield the database for one operation; driver errors become StorageError."""
        client = None
        try:
            logger.debug("Connecting to MongoDB %s (db=%s)", _redact(self._uri), self._db_name)
            client = self._client_factory(self._uri, tz_aware=True)
            db = client[self._db_name]
            self.ensure_collection(db)
            yield db
        except PyMongoError as e:
            logger.exception("MongoDB error during %s", action)
            raise StorageError(f"Failed to {action}") from e
        finally:
            if client is not None:
                client.close()
                logger.debug("MongoDB connection closed")

    def ensure_collection(self, db: Database) -> None:
        """Create the collection if it is missing. Safe to race with other callers."""
        if self._collection_name in db.list_collection_names():
            return
        try:
            db.create_collection(self._collection_name)
            logger.info("Created collection %s", self._collection_name)
        except CollectionInvalid:
            logger.debug("Collection %s created concurrently", self._collection_name)

    def insert(self, school: SchoolCreate, image: Optional[str] = None) -> str:
        """Persist a validated school and return its new id."""
        document: Dict[str, Any] = school.model_dump()
        document["image"] = image
        document["createdAt"] = datetime.now(timezone.utc)
        with self._database("add school") as db:
            result = db[self._collection_name].insert_one(document)
        logger.info("School added with id %s", result.inserted_id)
        return str(result.inserted_id)

    def list(self) -> List[Dict[str, Any]]:
        """Every stored school, newest first."""
        with self._database("fetch schools") as db:
            cursor = db[self._collection_name].find({}).sort(
                [("createdAt", DESCENDING), ("_id", DESCENDING)]
            )
            schools = list(cursor)
        logger.info("Fetched %d schools", len(schools))
        return schools

    def get(self, identifier: str) -> Optional[Dict[str, Any]]:
        if not ObjectId.is_valid(identifier):
            return None
        with self._database("fetch school") as db:
            return db[self._collection_name].find_one({"_id": ObjectId(identifier)})

    def ping(self) -> List[str]:
        """Collection names, as a connectivity check."""
        with self._database("reach database") as db:
            return db.list_collection_names()
