"""
HTTP tests for the lookup endpoint and the server-rendered detail page.
"""
import logging
from datetime import datetime

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

import app as app_module
from app import app, get_auth, get_fallback_source, get_listing_source, get_store
from conftest import VALID_ID, FakeSource, FakeStore
from errors import FetchFailure
from providers.mock import FixtureListingSource

NO_CACHE = {
    "cache-control": "no-cache, no-store, must-revalidate",
    "pragma": "no-cache",
    "expires": "0",
}


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_store(store):
    app.dependency_overrides[get_store] = lambda: store
    return store


def use_source(source, fallback=None):
    app.dependency_overrides[get_listing_source] = lambda: source
    app.dependency_overrides[get_fallback_source] = lambda: fallback
    return source


def assert_no_cache(response):
    for k, v in NO_CACHE.items():
        assert response.headers[k] == v


# ============================================================================
# GET /api/pg/{id}
# ============================================================================

class TestListingLookupEndpoint:
    def test_found(self, client):
        doc = {
            "_id": ObjectId(VALID_ID),
            "title": "Sunrise Residency PG",
            "price": 6500,
            "createdAt": datetime(2024, 1, 5, 10, 0),
            "reviews": [],
        }
        use_store(FakeStore(docs={VALID_ID: doc}))

        r = client.get(f"/api/pg/{VALID_ID}")
        assert r.status_code == 200
        body = r.json()
        assert body["_id"] == VALID_ID
        assert body["title"] == "Sunrise Residency PG"
        assert body["price"] == 6500
        assert body["createdAt"].startswith("2024-01-05T10:00:00")
        assert_no_cache(r)

    def test_valid_format_but_missing(self, client):
        store = use_store(FakeStore())
        r = client.get("/api/pg/000000000000000000000000")
        assert r.status_code == 404
        assert r.json() == {"error": "PG listing not found"}
        assert store.queries == ["000000000000000000000000"]
        assert_no_cache(r)

    def test_malformed_id_skips_query(self, client):
        store = use_store(FakeStore())
        r = client.get("/api/pg/not-a-valid-id")
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid PG ID format"}
        assert store.queries == []

    @pytest.mark.parametrize("pg_id", [VALID_ID, "not-a-valid-id"])
    def test_connection_failure_wins(self, client, pg_id):
        store = use_store(FakeStore(fail_connect=True))
        r = client.get(f"/api/pg/{pg_id}")
        assert r.status_code == 500
        assert r.json() == {"error": "Database connection failed. Please try again later."}
        assert store.queries == []
        assert_no_cache(r)

    def test_unexpected_failure_is_generic(self, client):
        use_store(FakeStore(fail_find=True))
        r = client.get(f"/api/pg/{VALID_ID}")
        assert r.status_code == 500
        assert r.json() == {"error": "Failed to fetch PG listing. Please try again later."}
        assert "cursor exploded" not in r.text


# ============================================================================
# GET /explore/{id}
# ============================================================================

class TestDetailPage:
    def test_renders_listing(self, client, listing_record):
        source = use_source(FakeSource(payload=listing_record))
        r = client.get(f"/explore/{VALID_ID}")

        assert r.status_code == 200
        assert source.calls == [VALID_ID]
        html = r.text
        assert "Sunrise Residency PG" in html
        assert "Member since June 2023" in html
        assert "Usually responds within 1 hour" in html
        assert "Great food" in html
        assert "Want to write a review?" in html
        assert 'data-lucide="utensils"' in html

    def test_tab_and_image_selection(self, client, listing_record):
        use_source(FakeSource(payload=listing_record))
        r = client.get(f"/explore/{VALID_ID}", params={"tab": "location", "image": 1})
        html = r.text
        assert 'class="main" src="/uploads/b.jpg"' in html
        assert "Hubli Railway Station (3 km)" in html
        assert 'data-lat="15.3647"' in html

    def test_rooms_tab(self, client, listing_record):
        use_source(FakeSource(payload=listing_record))
        html = client.get(f"/explore/{VALID_ID}", params={"tab": "rooms"}).text
        assert "Single Room" in html
        assert "2 rooms available" in html

    def test_out_of_range_image_shows_first(self, client, listing_record):
        use_source(FakeSource(payload=listing_record))
        html = client.get(f"/explore/{VALID_ID}", params={"image": 9}).text
        assert 'class="main" src="https://cdn.example.com/a.jpg"' in html

    def test_fetch_failure_shows_error_panel(self, client):
        use_source(FakeSource(error=FetchFailure("Error fetching PG details: 404", status_code=404)))
        html = client.get(f"/explore/{VALID_ID}").text
        assert "Error Loading PG Details" in html
        assert "Failed to load PG details. Please try again later." in html
        assert 'href="/explore"' in html

    def test_error_panel_even_with_fallback_data(self, client):
        use_source(FakeSource(error=FetchFailure("down")), fallback=FixtureListingSource())
        html = client.get("/explore/1").text
        assert "Error Loading PG Details" in html

    def test_anonymous_action_opens_auth_modal(self, client, listing_record):
        use_source(FakeSource(payload=listing_record))
        html = client.post(f"/explore/{VALID_ID}/save").text
        assert "Login Required" in html
        assert "Added to favorites" not in html

    def test_authenticated_actions_toast(self, client, listing_record):
        use_source(FakeSource(payload=listing_record))
        app.dependency_overrides[get_auth] = lambda: app_module.AuthContext(is_authenticated=True)

        html = client.post(f"/explore/{VALID_ID}/save").text
        assert "Added to favorites" in html
        assert "Login Required" not in html

        html = client.post(f"/explore/{VALID_ID}/save", params={"saved": "true"}).text
        assert "Removed from favorites" in html

        html = client.post(f"/explore/{VALID_ID}/contact").text
        assert "Message sent to owner" in html

        html = client.post(f"/explore/{VALID_ID}/book").text
        assert "Proceeding to payment..." in html

    def test_session_cookie_counts_as_logged_in(self, client, listing_record):
        use_source(FakeSource(payload=listing_record))
        client.cookies.set("session", "abc123")
        html = client.get(f"/explore/{VALID_ID}").text
        assert "Write a Review" in html
        assert "Want to write a review?" not in html

    def test_unknown_action(self, client, listing_record):
        use_source(FakeSource(payload=listing_record))
        r = client.post(f"/explore/{VALID_ID}/delete")
        assert r.status_code == 404


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


# ============================================================================
# Resource handling
# ============================================================================

class RecordingSource:
    instances = []

    def __init__(self, base_url, timeout=None):
        self.closed = False
        RecordingSource.instances.append(self)

    def fetch(self, pg_id):
        raise FetchFailure("offline")

    def close(self):
        self.closed = True


def test_listing_source_closed_after_page_view(client, monkeypatch):
    RecordingSource.instances = []
    monkeypatch.setattr(app_module, "HttpListingSource", RecordingSource)
    app.dependency_overrides[get_fallback_source] = lambda: None

    r = client.get(f"/explore/{VALID_ID}")
    assert r.status_code == 200
    assert len(RecordingSource.instances) == 1
    assert RecordingSource.instances[0].closed is True


def test_store_closed_on_shutdown(monkeypatch):
    class ClosingStore(FakeStore):
        closed = False

        def close(self):
            self.closed = True

    store = ClosingStore()
    monkeypatch.setattr(app_module, "store", store)
    with TestClient(app):
        assert store.closed is False
    assert store.closed is True


def test_bad_image_index_is_logged(client, listing_record, caplog):
    use_source(FakeSource(payload=listing_record))
    caplog.set_level(logging.DEBUG, logger="app")
    client.get(f"/explore/{VALID_ID}", params={"image": 9})
    assert f"Ignoring image index 9 for PG {VALID_ID}" in caplog.text
