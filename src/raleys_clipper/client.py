import logging
from typing import Any

import requests

from .errors import ClipFailedError, InvalidOfferDataError, OfferListingFailedError
from .models import MANUFACTURER_BADGE, Offer, SessionToken

logger = logging.getLogger(__name__)

BASE_URL = "https://www.raleys.com"
TARGETED_OFFERS_PATH = "/api/offers/targeted"
ACCEPT_OFFER_PATH = "/api/offers/accept"
ACCEPT_COUPON_PATH = "/api/offers/accept-coupons"

# Listing page size - large enough to fetch every offer in one request
MAX_ROWS = 999


class RaleysClient:
    """Client for the Raley's offers API, authenticated with browser session cookies."""

    def __init__(self, tokens: list[SessionToken], base_url: str = BASE_URL, timeout: float = 30.0):
        """
        Initialize the Raley's client.

        Args:
            tokens: Session cookies from a browser login or a saved cookies file
            base_url: Storefront host the API lives on
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._requests = requests.Session()
        self._requests.headers.update(
            {
                "User-Agent": (
                    "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
                ),
                "Accept": "application/json, text/plain, */*",
                "Origin": self.base_url,
                "Referer": f"{self.base_url}/",
            }
        )
        for token in tokens:
            self._requests.cookies.set(
                token.name,
                token.value,
                domain=token.domain,
                path=token.path or "/",
                secure=token.secure,
                expires=int(token.expires) if token.expires is not None else None,
                rest={"HttpOnly": None} if token.http_only else {},
            )

    def get_available_offers(self, category: str | None = None) -> tuple[list[dict[str, Any]], int]:
        """
        Fetch the raw available offer records, optionally for a single category.

        Returns the records and the total count reported by the server.
        """
        params: dict[str, Any] = {"offset": 0, "rows": MAX_ROWS, "type": "available"}
        if category:
            params["filter"] = category

        url = f"{self.base_url}{TARGETED_OFFERS_PATH}"
        logger.debug(f"Listing offers: {url} {params}")
        try:
            response = self._requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise OfferListingFailedError(f"Could not list {category or 'available'} offers: {e}") from e

        if not isinstance(data, dict):
            raise OfferListingFailedError(f"Unexpected offers response: {str(data)[:200]}")
        records = data.get("data") or []
        total = data.get("total", len(records))
        return records, total

    def accept_offer(self, offer_id: str, offer_type: str) -> dict[str, Any]:
        """
        Accept (clip) an offer.

        Manufacturer coupons are accepted on their own route. Raises ClipFailedError with
        the most descriptive reason available when the server refuses the offer.
        """
        path = ACCEPT_COUPON_PATH if offer_type == MANUFACTURER_BADGE else ACCEPT_OFFER_PATH
        payload = {"offerId": offer_id, "offerType": offer_type}

        try:
            response = self._requests.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ClipFailedError(str(e)) from e

        body = _json_or_none(response)
        if not response.ok:
            raise ClipFailedError(_error_message(body) or f"{response.status_code} {response.reason}")
        if isinstance(body, dict) and _is_error_body(body):
            raise ClipFailedError(_error_message(body) or "Offer was not accepted")
        return body if isinstance(body, dict) else {}


def parse_offer(raw: dict[str, Any]) -> Offer:
    """Parse a single targeted offer record. Raises InvalidOfferDataError if it can't be clipped."""
    if not isinstance(raw, dict):
        raise InvalidOfferDataError(f"Offer record is not an object: {raw!r}")

    external_id = raw.get("ExtPromotionId")
    badge_type_code = raw.get("ExtBadgeTypeCode")
    if not external_id or not badge_type_code:
        raise InvalidOfferDataError(
            f"Offer {raw.get('Headline', '<no headline>')!r} is missing ExtPromotionId or ExtBadgeTypeCode"
        )

    return Offer(
        external_id=str(external_id),
        badge_type_code=str(badge_type_code),
        headline=raw.get("Headline") or "",
        sub_headline=raw.get("SubHeadline"),
        is_accepted=bool(raw.get("IsAccepted", False)),
        raw=raw,
    )


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _is_error_body(body: dict[str, Any]) -> bool:
    return body.get("success") is False or bool(body.get("error")) or bool(body.get("errors"))


def _error_message(body: Any) -> str | None:
    """Pull a human readable message out of an error response body."""
    if isinstance(body, str):
        return body or None
    if not isinstance(body, dict):
        return None
    for key in ("message", "Message", "error", "errorMessage"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict) and value.get("message"):
            return str(value["message"])
    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        return str(first.get("message", first)) if isinstance(first, dict) else str(first)
    return None
