"""Typed concert calendar models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class LiveFormat(str, Enum):
    """How a concert can be attended."""

    ONLINE = "online"
    IRL = "irl"
    BOTH = "both"


class Platform(str, Enum):
    """Ticketing or streaming platform hosting a concert."""

    NICONICO = "niconico"
    SPWN = "spwn"
    TBA = "tba"
    YOUTUBE = "youtube"
    ZAN = "zan"
    ZAIKO = "zaiko"
    OTHER = "other"


class JpyPriceKind(str, Enum):
    """Ticket pricing shape."""

    TBD = "tbd"
    FREE = "free"
    FIXED = "fixed"
    MULTI_TIER = "multi_tier"


@dataclass(frozen=True)
class JpyPrice:
    """Ticket price in yen.

    Attributes:
        kind: Pricing shape.
        amount: Fixed price, or the lowest tier for multi-tier pricing; None otherwise.
    """

    kind: JpyPriceKind
    amount: int | None = None


@dataclass(frozen=True)
class LiveConcert:
    """One upcoming concert parsed from a calendar event.

    Attributes:
        title: Concert title.
        live_format: Attendance format.
        jpy_price: Ticket price.
        platform: Hosting platform.
        description: Event description without the submission-form footer.
        start_time_utc: Start instant in UTC.
        image_url: Optional key visual URL.
        twitter_url: Optional announcement URL.
    """

    title: str
    live_format: LiveFormat
    jpy_price: JpyPrice
    platform: Platform
    description: str
    start_time_utc: datetime
    image_url: str | None = None
    twitter_url: str | None = None


def calendar_concert_to_payload(concert: LiveConcert) -> dict[str, Any]:
    """Render one concert as the public JSON payload.

    Args:
        concert: Parsed concert.

    Returns:
        dict[str, Any]: JSON-compatible mapping.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "title": concert.title,
        "format": concert.live_format.value,
        "jpy_price": {"kind": concert.jpy_price.kind.value, "amount": concert.jpy_price.amount},
        "platform": concert.platform.value,
        "description": concert.description,
        "start_time": concert.start_time_utc.isoformat().replace("+00:00", "Z"),
        "image_url": concert.image_url,
        "twitter_url": concert.twitter_url,
    }
