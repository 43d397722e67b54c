"""
Turns a stored PG listing into the structure the detail page renders.

format_pg_details() never raises on sparse input: every optional field gets a
fixed default so templates can render without checks.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Union

from models import (
    AMENITY_ICONS,
    DEFAULT_AMENITY_ICON,
    ROOM_KINDS,
    AmenityIcon,
    AmenityView,
    Coordinates,
    ListingRecord,
    OwnerView,
    PgDetails,
    ReviewRecord,
    ReviewView,
    RoomKind,
    RoomTypeOption,
    Timestamp,
)

PLACEHOLDER_IMAGE = "/placeholder-hostel.jpg"
INVALID_DATE = "Invalid Date"

DEFAULT_RULES: List[str] = [
    "No smoking inside the premises",
    "Guests allowed only in common areas",
    "Quiet hours from 10 PM to 6 AM",
    "No pets allowed",
    "ID proof required for check-in",
]
DEFAULT_COORDINATES = Coordinates(lat=15.3647, lng=75.124)
DEFAULT_RATING = 4.0
DEFAULT_OWNER_NAME = "PG Owner"
DEFAULT_OWNER_PHONE = "+91 9876543210"
OWNER_RESPONSE_TIME = "Usually responds within 1 hour"
# Listings only carry one room type, so the availability shown is fixed.
ROOM_AVAILABILITY = 2

DateFormatter = Callable[[datetime], str]


def parse_timestamp(value: Optional[Timestamp]) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def locale_date(d: datetime) -> str:
    # en-US short date, e.g. 1/5/2024
    return f"{d.month}/{d.day}/{d.year}"


def format_review_date(value: Optional[Timestamp], date_formatter: DateFormatter = locale_date) -> str:
    d = parse_timestamp(value)
    return date_formatter(d) if d else INVALID_DATE


def format_member_since(value: Optional[Timestamp]) -> str:
    d = parse_timestamp(value)
    return d.strftime("%B %Y") if d else INVALID_DATE


def resolve_amenity_icon(label: str) -> AmenityIcon:
    return AMENITY_ICONS.get(label, DEFAULT_AMENITY_ICON)


def resolve_room_kind(label: Optional[str]) -> RoomKind:
    if not label:
        return RoomKind.OTHER
    return ROOM_KINDS.get(label.strip().lower(), RoomKind.OTHER)


def normalize_images(images: Optional[List[str]]) -> List[str]:
    """Keep absolute and root-relative references; swap everything else for the placeholder."""
    out = [
        img if isinstance(img, str) and img.startswith(("http", "/")) else PLACEHOLDER_IMAGE
        for img in images or []
    ]
    return out or [PLACEHOLDER_IMAGE]


def default_nearby_places(city: Optional[str]) -> List[str]:
    prefix = f"{city} " if city else ""
    return [
        f"{prefix}Bus Station (2 km)",
        f"{prefix}Railway Station (3 km)",
        f"{prefix}Market (1 km)",
        "City Hospital (1.5 km)",
    ]


def format_reviews(reviews: Optional[List[ReviewRecord]], date_formatter: DateFormatter = locale_date) -> List[ReviewView]:
    return [
        ReviewView(
            id=i,
            user=r.user_name,
            rating=r.rating,
            date=format_review_date(r.created_at, date_formatter),
            comment=r.comment,
        )
        for i, r in enumerate(reviews or [], start=1)
    ]


def format_pg_details(
    data: Union[ListingRecord, Mapping[str, Any]],
    *,
    date_formatter: DateFormatter = locale_date,
) -> PgDetails:
    pg = data if isinstance(data, ListingRecord) else ListingRecord.model_validate(data)

    return PgDetails(
        id=pg.id,
        title=pg.title,
        location=pg.location,
        price=pg.price,
        description=pg.description,
        amenities=[AmenityView(name=a, icon=resolve_amenity_icon(a)) for a in pg.amenities or []],
        rules=pg.rules if pg.rules is not None else list(DEFAULT_RULES),
        images=normalize_images(pg.images),
        rating=pg.rating or DEFAULT_RATING,
        reviews=format_reviews(pg.reviews, date_formatter),
        owner=OwnerView(
            name=pg.owner_name or DEFAULT_OWNER_NAME,
            phone=pg.owner_contact or DEFAULT_OWNER_PHONE,
            response_time=OWNER_RESPONSE_TIME,
            member_since=format_member_since(pg.created_at),
        ),
        room_types=[
            RoomTypeOption(
                type=pg.room_type,
                kind=resolve_room_kind(pg.room_type),
                price=pg.price,
                availability=ROOM_AVAILABILITY,
            )
        ],
        gender=pg.gender,
        address=pg.address,
        city=pg.city,
        coordinates=pg.coordinates or DEFAULT_COORDINATES.model_copy(),
        nearby_places=pg.nearby_places if pg.nearby_places is not None else default_nearby_places(pg.city),
    )
