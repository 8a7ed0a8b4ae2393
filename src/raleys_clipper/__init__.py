"""
Raley's Clipper - Automated offer clipper for Raley's.

This package provides tools to:
- Log in to raleys.com via a real browser (Playwright/Firefox), handing CAPTCHAs to a human
- Save and reuse the resulting session cookies
- List available offers and coupons via the storefront API
- Clip them one at a time with human-like pacing, or all at once
"""

from .client import RaleysClient
from .clipper import clip_offer, clip_offers, list_unclipped_offers, run, tally
from .models import ClipOutcome, ClipTally, Credentials, Offer, SessionToken
from .session import acquire_session

__all__ = [
    "RaleysClient",
    "ClipOutcome",
    "ClipTally",
    "Credentials",
    "Offer",
    "SessionToken",
    "acquire_session",
    "clip_offer",
    "clip_offers",
    "list_unclipped_offers",
    "run",
    "tally",
]
