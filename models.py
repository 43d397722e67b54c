from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, WrapValidator, field_validator
from pydantic.alias_generators import to_camel

Timestamp = Union[datetime, str]
Number = Union[int, float]


def _none_if_invalid(value, handler):
    try:
        return handler(value)
    except ValidationError:
        return None


def _valid_items(value, handler):
    """Keep the well-formed entries of a list and drop the rest; non-lists become None."""
    if not isinstance(value, list):
        return None
    items = []
    for item in value:
        try:
            items.extend(handler([item]))
        except ValidationError:
            continue
    return items


# Stored listings are edited by hand and by older clients, so a field of the
# wrong shape is treated as missing instead of rejecting the whole record.
LenientStr = Annotated[Optional[str], WrapValidator(_none_if_invalid)]
LenientNumber = Annotated[Optional[Number], WrapValidator(_none_if_invalid)]
LenientTimestamp = Annotated[Optional[Timestamp], WrapValidator(_none_if_invalid)]
StrItems = Annotated[Optional[List[str]], WrapValidator(_valid_items)]


class _StoreModel(BaseModel):
    # Documents come from the store in camelCase and may carry fields we don't use.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Coordinates(BaseModel):
    lat: float
    lng: float


class ReviewRecord(_StoreModel):
    user_id: LenientStr = None
    user_name: LenientStr = None
    rating: LenientNumber = None
    comment: LenientStr = None
    created_at: LenientTimestamp = None


ReviewItems = Annotated[Optional[List[ReviewRecord]], WrapValidator(_valid_items)]


class ListingRecord(_StoreModel):
    """A PG listing as stored in the document store (and returned by /api/pg/{id})."""

    id: Optional[str] = Field(None, alias="_id")
    title: LenientStr = None
    location: LenientStr = None
    price: LenientNumber = None
    description: LenientStr = None
    amenities: StrItems = None
    gender: LenientStr = None
    room_type: LenientStr = None
    address: LenientStr = None
    city: LenientStr = None
    # non-string entries are kept so the formatter can swap in the placeholder
    images: Annotated[Optional[List[Any]], WrapValidator(_none_if_invalid)] = None
    rating: LenientNumber = None
    reviews: ReviewItems = None
    owner_id: LenientStr = None
    owner_name: LenientStr = None
    owner_contact: LenientStr = None
    created_at: LenientTimestamp = None
    updated_at: LenientTimestamp = None
    rules: StrItems = None
    nearby_places: StrItems = None
    coordinates: Annotated[Optional[Coordinates], WrapValidator(_none_if_invalid)] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v):
        # ObjectId from the driver, plain string from JSON
        return str(v) if v is not None else None


class AmenityIcon(str, Enum):
    WIFI = "wifi"
    FOOD = "utensils"
    AC = "wind"
    BATHROOM = "shower-head"
    TV = "tv"
    PARKING = "parking-meter"


# Exact label match; anything else falls back to DEFAULT_AMENITY_ICON.
AMENITY_ICONS: Dict[str, AmenityIcon] = {
    "WiFi": AmenityIcon.WIFI,
    "Food": AmenityIcon.FOOD,
    "AC": AmenityIcon.AC,
    "Attached Bathroom": AmenityIcon.BATHROOM,
    "Common Bathroom": AmenityIcon.BATHROOM,
    "TV": AmenityIcon.TV,
    "Parking": AmenityIcon.PARKING,
}
DEFAULT_AMENITY_ICON = AmenityIcon.WIFI


class RoomKind(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    DORMITORY = "dormitory"
    OTHER = "other"


ROOM_KINDS: Dict[str, RoomKind] = {
    "single": RoomKind.SINGLE,
    "double": RoomKind.DOUBLE,
    "triple": RoomKind.TRIPLE,
    "dormitory": RoomKind.DORMITORY,
    "dorm": RoomKind.DORMITORY,
}


class AmenityView(BaseModel):
    name: str
    icon: AmenityIcon


class ReviewView(BaseModel):
    id: int
    user: Optional[str] = None
    rating: Optional[Number] = None
    date: str
    comment: Optional[str] = None


class OwnerView(BaseModel):
    name: str
    phone: str
    response_time: str
    member_since: str


class RoomTypeOption(BaseModel):
    type: Optional[str] = None  # label as entered by the owner
    kind: RoomKind
    price: Optional[Number] = None
    availability: int


class PgDetails(BaseModel):
    """Display-ready listing. Every list and nested block is populated."""

    id: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None
    price: Optional[Number] = None
    description: Optional[str] = None
    amenities: List[AmenityView]
    rules: List[str]
    images: List[str] = Field(min_length=1)
    rating: Number
    reviews: List[ReviewView]
    owner: OwnerView
    room_types: List[RoomTypeOption]
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    coordinates: Coordinates
    nearby_places: List[str]
