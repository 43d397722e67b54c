import pytest

from errors import StoreConnectionError

VALID_ID = "65f1c2a4e4b0a1b2c3d4e5f6"


@pytest.fixture
def listing_record():
    return {
        "_id": VALID_ID,
        "title": "Sunrise Residency PG",
        "location": "Vidyanagar, Hubli",
        "price": 6500,
        "description": "Furnished rooms near KLE Tech.",
        "amenities": ["WiFi", "Food", "Attached Bathroom", "Gym"],
        "gender": "Male",
        "roomType": "Single",
        "address": "12, 3rd Cross, Vidyanagar",
        "city": "Hubli",
        "images": ["https://cdn.example.com/a.jpg", "/uploads/b.jpg", "c.jpg"],
        "rating": 4.5,
        "reviews": [
            {
                "userId": "u1",
                "userName": "Asha",
                "rating": 5,
                "comment": "Great food",
                "createdAt": "2024-02-11T09:30:00.000Z",
            },
            {
                "userId": "u2",
                "userName": "Vikram",
                "rating": 3,
                "comment": "Noisy at night",
                "createdAt": "2024-03-02T18:00:00.000Z",
            },
        ],
        "ownerId": "o1",
        "ownerName": "Suresh Patil",
        "ownerContact": "+91 9845012345",
        "createdAt": "2023-06-01T00:00:00.000Z",
        "updatedAt": "2024-03-02T18:00:00.000Z",
    }


class FakeStore:
    def __init__(self, docs=None, fail_connect=False, fail_find=False):
        self.docs = docs or {}
        self.fail_connect = fail_connect
        self.fail_find = fail_find
        self.queries = []

    def connect(self):
        if self.fail_connect:
            raise StoreConnectionError("connection refused")

    def find_by_id(self, pg_id):
        self.queries.append(pg_id)
        if self.fail_find:
            raise RuntimeError("cursor exploded")
        return self.docs.get(pg_id)


class FakeSource:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    def fetch(self, pg_id):
        self.calls.append(pg_id)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def toasts():
    return []


@pytest.fixture
def notify(toasts):
    def _notify(message, kind):
        toasts.append((message, kind))
    return _notify
