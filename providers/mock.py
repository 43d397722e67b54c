from __future__ import annotations

"""
Static PG listings for local development.

Only wired in when APP_ENV=development; the production page never reads
from here.
"""

import re
from typing import Dict, Optional

from formatter import format_pg_details
from models import ListingRecord, PgDetails

MOCK_PG_LISTINGS: Dict[int, ListingRecord] = {
    1: ListingRecord(
        _id="1",
        title="Sunshine PG for Boys (Mock)",
        location="Vidyanagar, Hubli",
        price=6500,
        description="Fully furnished PG close to the engineering colleges, with home-style food.",
        amenities=["WiFi", "Food", "Attached Bathroom", "Parking"],
        gender="Male",
        roomType="Single",
        address="12, 3rd Cross, Vidyanagar, Hubli 580031",
        city="Hubli",
        images=["/pg/sunshine-1.jpg", "/pg/sunshine-2.jpg", "/pg/sunshine-3.jpg"],
        rating=4.3,
        reviews=[
            {
                "userId": "u-101",
                "userName": "Rahul K",
                "rating": 4,
                "comment": "Clean rooms and the food is good.",
                "createdAt": "2024-02-11T09:30:00.000Z",
            },
        ],
        ownerId="o-1",
        ownerName="Suresh Patil",
        ownerContact="+91 9845012345",
        createdAt="2023-06-01T00:00:00.000Z",
        updatedAt="2024-02-11T09:30:00.000Z",
    ),
    2: ListingRecord(
        _id="2",
        title="Green Nest Ladies PG (Mock)",
        location="Keshwapur, Hubli",
        price=7200,
        description="Secure PG for working women with AC rooms and 24x7 security.",
        amenities=["WiFi", "AC", "Food", "TV", "Common Bathroom"],
        gender="Female",
        roomType="Double",
        address="45, Keshwapur Main Road, Hubli 580023",
        city="Hubli",
        images=["https://images.example.com/pg/green-nest-1.jpg"],
        rating=4.6,
        reviews=[],
        ownerId="o-2",
        ownerName="Lakshmi Rao",
        ownerContact="+91 9900112233",
        createdAt="2022-11-15T00:00:00.000Z",
        updatedAt="2024-01-20T00:00:00.000Z",
        rules=["Gate closes at 10 PM", "No male visitors inside rooms"],
        coordinates={"lat": 15.3521, "lng": 75.1352},
    ),
    3: ListingRecord(
        _id="3",
        title="Budget Stay Co-living (Mock)",
        location="Gokul Road, Hubli",
        price=4800,
        description="Affordable shared rooms near the bus stand.",
        amenities=["WiFi", "Laundry"],
        gender="Unisex",
        roomType="Triple",
        address="8, Gokul Road, Hubli 580030",
        city="Hubli",
        images=[],
        rating=0,
        reviews=[],
        ownerId="o-3",
        createdAt="2024-03-05T00:00:00.000Z",
        updatedAt="2024-03-05T00:00:00.000Z",
    ),
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_leading_int(value: str) -> Optional[int]:
    """Lenient integer parse: "12abc" -> 12, "abc" -> None."""
    m = _LEADING_INT.match(value or "")
    return int(m.group(1)) if m else None


class FixtureListingSource:
    def __init__(self, listings: Optional[Dict[int, ListingRecord]] = None):
        self.listings = MOCK_PG_LISTINGS if listings is None else listings

    def lookup(self, pg_id: str) -> Optional[PgDetails]:
        key = parse_leading_int(pg_id)
        if key is None or key not in self.listings:
            return None
        return format_pg_details(self.listings[key])
