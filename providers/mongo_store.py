from __future__ import annotations

"""
MongoDB-backed listing store.

The client is created on first connect() and reused for the life of the
process; pymongo pools connections internally.
"""

import logging
import threading
from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from errors import StoreConnectionError

logger = logging.getLogger(__name__)


class MongoListingStore:
    def __init__(self, uri: str, db_name: str, collection: str = "pglistings"):
        self.uri = uri
        self.db_name = db_name
        self.collection_name = collection
        self._client: Optional[MongoClient] = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        if self._client is not None:
            return
        # sync endpoints run in a threadpool; only one thread may build the client
        with self._lock:
            if self._client is not None:
                return
            client = MongoClient(self.uri)
            try:
                client.admin.command("ping")
            except PyMongoError as e:
                client.close()
                raise StoreConnectionError(f"MongoDB connection failed: {e}") from e
            logger.info("Connected to MongoDB database %s", self.db_name)
            self._client = client

    def find_by_id(self, pg_id: str) -> Optional[Dict[str, Any]]:
        if self._client is None:
            raise StoreConnectionError("find_by_id() called before connect()")
        coll = self._client[self.db_name][self.collection_name]
        return coll.find_one({"_id": ObjectId(pg_id)})

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
