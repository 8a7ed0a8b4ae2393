from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

MANUFACTURER_BADGE = "mfg"


@dataclass(frozen=True)
class Credentials:
    """Login credentials for a Raley's account."""

    email: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, password='***')"


@dataclass(frozen=True)
class SessionToken:
    """A single cookie from an authenticated browser session."""

    name: str
    value: str
    domain: str = ""
    path: str = "/"
    http_only: bool = False
    secure: bool = False
    expires: float | None = None


@dataclass(frozen=True)
class Offer:
    """An offer from the Raley's targeted offers listing."""

    external_id: str
    badge_type_code: str
    headline: str = ""
    sub_headline: str | None = None
    is_accepted: bool = False
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_coupon(self) -> bool:
        return self.badge_type_code == MANUFACTURER_BADGE

    def __str__(self) -> str:
        kind = "Coupon" if self.is_coupon else self.badge_type_code
        text = self.headline
        if self.sub_headline:
            text = f"{text} {' '.join(self.sub_headline.split())}"
        return f"{kind}: {text}"


@dataclass(frozen=True)
class ClipOutcome:
    """Result of one clip attempt. `reason` is set only on failure."""

    offer: Offer
    success: bool
    attempted_at: datetime
    reason: str | None = None


@dataclass(frozen=True)
class ClipTally:
    clipped: int
    failed: int
    total: int

    @property
    def nothing_to_do(self) -> bool:
        return self.total == 0
