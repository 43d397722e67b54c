from __future__ import annotations

"""
HTTP listing source used by the detail page: one GET against /api/pg/{id}.

Caching is disabled on the request side; the endpoint disables it on the
response side.
"""

from typing import Any, Dict, Optional

import requests

from errors import FetchFailure

NO_CACHE_HEADERS: Dict[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class HttpListingSource:
    def __init__(self, base_url: str, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, pg_id: str) -> Dict[str, Any]:
        url = f"{self.base_url}/api/pg/{pg_id}"
        try:
            r = self.session.get(url, headers=NO_CACHE_HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchFailure(f"Error fetching PG details: {e}") from e

        if not r.ok:
            raise FetchFailure(f"Error fetching PG details: {r.status_code}", status_code=r.status_code)
        try:
            return r.json()
        except ValueError as e:
            raise FetchFailure(f"Error decoding PG details: {e}", status_code=r.status_code) from e

    def close(self) -> None:
        self.session.close()
