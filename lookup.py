"""
Single-listing lookup behind GET /api/pg/{id}.

Order matters: the store connection is checked before the identifier, so a
dead database answers 500 even for a malformed id.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from bson import ObjectId
from fastapi.encoders import jsonable_encoder

from errors import InvalidListingId, ListingLookupError, ListingNotFound, UnexpectedLookupError

logger = logging.getLogger(__name__)


class ListingStore(Protocol):
    def connect(self) -> None: ...

    def find_by_id(self, pg_id: str) -> Optional[Dict[str, Any]]: ...


def is_valid_listing_id(pg_id: str) -> bool:
    return ObjectId.is_valid(pg_id)


def lookup_listing(store: ListingStore, pg_id: str) -> Dict[str, Any]:
    """Return the stored record for ``pg_id`` as a JSON-ready dict.

    Raises a ListingLookupError subclass for every failure; anything not
    already classified is wrapped in UnexpectedLookupError.
    """
    try:
        store.connect()

        if not is_valid_listing_id(pg_id):
            raise InvalidListingId(pg_id)

        doc = store.find_by_id(pg_id)
        if not doc:
            raise ListingNotFound(pg_id)

        logger.info("Found PG listing with ID: %s", pg_id)
        return jsonable_encoder(doc, custom_encoder={ObjectId: str})
    except ListingLookupError:
        raise
    except Exception as e:
        raise UnexpectedLookupError(f"Error fetching PG listing {pg_id}: {e}") from e
