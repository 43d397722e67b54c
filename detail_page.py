"""
Controller for the PG detail page.

Holds the page state (loading / error / data plus the UI toggles) and the
gated actions. Collaborators are passed in explicitly:

- ``source``   fetches the raw listing (HttpListingSource in production)
- ``auth``     anything with an ``is_authenticated`` attribute
- ``notify``   ``notify(message, kind)`` for transient toasts
- ``fallback`` optional static-data strategy, only wired in development
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from pydantic import ValidationError

from errors import FetchFailure
from formatter import format_pg_details
from models import PgDetails

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load PG details. Please try again later."
TABS = ("amenities", "rules", "rooms", "location")
DEFAULT_TAB = "amenities"
MAINTENANCE_FEE = 1000

Notifier = Callable[[str, str], None]


class ListingSource(Protocol):
    def fetch(self, pg_id: str) -> Mapping[str, Any]: ...


class FallbackSource(Protocol):
    def lookup(self, pg_id: str) -> Optional[PgDetails]: ...


@dataclass
class AuthContext:
    is_authenticated: bool = False


class ImageCarousel:
    """Index into a non-empty image list, wrapping at both ends."""

    def __init__(self, count: int):
        if count < 1:
            raise ValueError("carousel needs at least one image")
        self.count = count
        self.index = 0

    def next(self) -> int:
        self.index = 0 if self.index == self.count - 1 else self.index + 1
        return self.index

    def prev(self) -> int:
        self.index = self.count - 1 if self.index == 0 else self.index - 1
        return self.index

    def select(self, index: int) -> int:
        if not 0 <= index < self.count:
            raise IndexError(f"image index {index} out of range 0..{self.count - 1}")
        self.index = index
        return self.index


class PgDetailController:
    def __init__(
        self,
        pg_id: str,
        source: ListingSource,
        *,
        auth: AuthContext,
        notify: Notifier,
        fallback: Optional[FallbackSource] = None,
    ):
        self.pg_id = pg_id
        self.source = source
        self.auth = auth
        self.notify = notify
        self.fallback = fallback

        self.loading = True
        self.error: Optional[str] = None
        self.data: Optional[PgDetails] = None
        self.carousel: Optional[ImageCarousel] = None

        self.saved = False
        self.show_auth_modal = False
        self.show_booking_form = False
        self.review_text = ""

        self._generation = 0

    # -- loading -------------------------------------------------------------

    def begin_load(self) -> int:
        """Enter the loading state and return the token the result must carry."""
        self._generation += 1
        self.loading = True
        self.error = None
        return self._generation

    def _is_stale(self, token: int) -> bool:
        if token != self._generation:
            logger.debug("Dropping stale PG details result (token %s, current %s)", token, self._generation)
            return True
        return False

    def finish_load(self, token: int, payload: Mapping[str, Any]) -> bool:
        if self._is_stale(token):
            return False
        try:
            details = format_pg_details(payload)
        except ValidationError as e:
            return self.fail_load(token, FetchFailure(f"Unexpected PG details payload: {e}"))
        self._install(details)
        self.loading = False
        return True

    def fail_load(self, token: int, exc: Exception) -> bool:
        if self._is_stale(token):
            return False
        logger.warning("Failed to fetch PG details for %s: %s", self.pg_id, exc)
        self.error = LOAD_ERROR_MESSAGE
        if self.fallback is not None:
            logger.warning("Using fallback static data")
            self._install(self.fallback.lookup(self.pg_id))
        self.loading = False
        return True

    def load(self) -> None:
        token = self.begin_load()
        try:
            payload = self.source.fetch(self.pg_id)
        except FetchFailure as e:
            self.fail_load(token, e)
            return
        self.finish_load(token, payload)

    def change_id(self, pg_id: str) -> None:
        if pg_id == self.pg_id:
            return
        self.pg_id = pg_id
        self.load()

    def _install(self, details: Optional[PgDetails]) -> None:
        self.data = details
        self.carousel = ImageCarousel(len(details.images)) if details else None

    # -- carousel --------------------------------------------------------------

    @property
    def current_image_index(self) -> int:
        return self.carousel.index if self.carousel else 0

    def next_image(self) -> int:
        return self.carousel.next() if self.carousel else 0

    def prev_image(self) -> int:
        return self.carousel.prev() if self.carousel else 0

    def select_image(self, index: int) -> int:
        if self.carousel is None:
            raise IndexError("no images loaded")
        return self.carousel.select(index)

    # -- gated actions ---------------------------------------------------------

    def _require_auth(self) -> bool:
        if not self.auth.is_authenticated:
            self.show_auth_modal = True
            return False
        return True

    def toggle_save(self) -> None:
        if not self._require_auth():
            return
        self.saved = not self.saved
        self.notify("Added to favorites" if self.saved else "Removed from favorites", "success")

    def handle_book_now(self) -> None:
        if not self._require_auth():
            return
        self.notify("Proceeding to payment...", "info")

    def handle_contact_owner(self) -> None:
        if not self._require_auth():
            return
        self.notify("Message sent to owner", "success")

    def open_booking_form(self) -> None:
        self.show_booking_form = True

    def close_auth_modal(self) -> None:
        self.show_auth_modal = False

    def set_review_text(self, text: str) -> None:
        self.review_text = text

    # -- rendering -------------------------------------------------------------

    def view(self) -> str:
        if self.loading:
            return "loading"
        if self.error or self.data is None:
            return "error"
        return "detail"

    def context(self, tab: str = DEFAULT_TAB) -> Dict[str, Any]:
        pg = self.data
        return {
            "view": self.view(),
            "pg_id": self.pg_id,
            "pg": pg,
            "error": self.error or LOAD_ERROR_MESSAGE,
            "image_index": self.current_image_index,
            "current_image": pg.images[self.current_image_index] if pg else None,
            "saved": self.saved,
            "is_authenticated": self.auth.is_authenticated,
            "show_auth_modal": self.show_auth_modal,
            "auth_redirect": f"/explore/{self.pg_id}",
            "tabs": TABS,
            "active_tab": tab if tab in TABS else DEFAULT_TAB,
            "maintenance_fee": MAINTENANCE_FEE,
            "review_text": self.review_text,
        }
