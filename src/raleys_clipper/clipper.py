import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from .client import RaleysClient, parse_offer
from .config import Config
from .errors import ClipFailedError, InvalidOfferDataError
from .models import ClipOutcome, ClipTally, Offer
from .pacing import Pacer

logger = logging.getLogger(__name__)

# Categories queried one by one in legacy listing mode
LEGACY_CATEGORIES = ("SomethingExtra", "WeeklyExclusive", "DigitalCoupons")

OutcomeHandler = Callable[[ClipOutcome], None]


@dataclass
class ListingResult:
    offers: list[Offer]
    skipped_invalid: int = 0
    already_accepted: int = 0
    duplicates: int = 0


def wait_before_start(config: Config, pacer: Pacer) -> int:
    """Sleep a random amount before doing anything, so scheduled runs don't all fire at once."""
    delay = pacer.pick(config.min_start_delay, config.max_start_delay)
    logger.info(f"Waiting {delay}ms before starting...")
    pacer.sleep(delay)
    return delay


def list_unclipped_offers(client: RaleysClient, legacy_categories: bool = False) -> ListingResult:
    """
    Fetch every offer that can still be clipped, in listing order.

    Accepted offers are filtered out even though the server was asked for available ones
    only. Records missing their identifying fields are skipped with a warning.
    """
    if legacy_categories:
        logger.info(f"Checking for {', '.join(LEGACY_CATEGORIES)} offers...")
        records = []
        for category in LEGACY_CATEGORIES:
            category_records, total = client.get_available_offers(category)
            logger.info(f"{total} {category} offer{'' if total == 1 else 's'} found")
            records.extend(category_records)
    else:
        logger.info("Checking for available offers...")
        records, total = client.get_available_offers()
        logger.info(f"{total} offer{'' if total == 1 else 's'} found")

    result = ListingResult(offers=[])
    seen: set[str] = set()
    for raw in records:
        try:
            offer = parse_offer(raw)
        except InvalidOfferDataError as e:
            logger.warning(f"Invalid offer data detected, skipping: {e}")
            result.skipped_invalid += 1
            continue
        if offer.is_accepted:
            logger.debug(f"Already clipped, skipping: {offer}")
            result.already_accepted += 1
            continue
        # Categories overlap, and a second accept of the same offer would be refused
        if offer.external_id in seen:
            logger.debug(f"Listed more than once, skipping: {offer}")
            result.duplicates += 1
            continue
        seen.add(offer.external_id)
        result.offers.append(offer)
    return result


def clip_offer(client: RaleysClient, offer: Offer) -> ClipOutcome:
    """Clip a single offer. Never raises: any failure becomes a failed outcome."""
    attempted_at = datetime.now(timezone.utc)
    try:
        client.accept_offer(offer.external_id, offer.badge_type_code)
    except ClipFailedError as e:
        logger.warning(f"Error accepting {offer}: {e.reason}")
        return ClipOutcome(offer=offer, success=False, attempted_at=attempted_at, reason=e.reason)
    except Exception as e:
        logger.warning(f"Error accepting {offer}: {e}", exc_info=True)
        return ClipOutcome(offer=offer, success=False, attempted_at=attempted_at, reason=str(e) or type(e).__name__)
    return ClipOutcome(offer=offer, success=True, attempted_at=attempted_at)


def clip_offers(
    client: RaleysClient,
    offers: list[Offer],
    pacer: Pacer,
    concurrent: bool = False,
    min_request_delay: int = 1000,
    max_request_delay: int = 5000,
    on_outcome: OutcomeHandler | None = None,
    max_workers: int | None = None,
) -> list[ClipOutcome]:
    """
    Clip every offer and return one outcome per offer, in the order the offers were given.

    Sequential mode clips one offer at a time with a random pause between requests.
    Concurrent mode fires every request at once and waits for all of them.
    """
    if not offers:
        return []
    if concurrent:
        return _clip_concurrently(client, offers, on_outcome, max_workers)
    return _clip_sequentially(client, offers, pacer, min_request_delay, max_request_delay, on_outcome)


def _clip_sequentially(
    client: RaleysClient,
    offers: list[Offer],
    pacer: Pacer,
    min_request_delay: int,
    max_request_delay: int,
    on_outcome: OutcomeHandler | None,
) -> list[ClipOutcome]:
    outcomes = []
    for i, offer in enumerate(offers):
        logger.info(f"Clipping {offer}...")
        outcome = clip_offer(client, offer)
        outcomes.append(outcome)
        if on_outcome:
            on_outcome(outcome)
        if i < len(offers) - 1:
            pacer.pause(min_request_delay, max_request_delay)
    return outcomes


def _clip_concurrently(
    client: RaleysClient,
    offers: list[Offer],
    on_outcome: OutcomeHandler | None,
    max_workers: int | None,
) -> list[ClipOutcome]:
    logger.info(f"Clipping {len(offers)} offers concurrently...")
    with ThreadPoolExecutor(max_workers=max_workers or len(offers)) as executor:
        futures = [executor.submit(clip_offer, client, offer) for offer in offers]
        # clip_offer never raises, so waiting on each future in turn collects every outcome
        outcomes = [future.result() for future in futures]

    if on_outcome:
        for outcome in outcomes:
            on_outcome(outcome)
    return outcomes


def tally(outcomes: list[ClipOutcome]) -> ClipTally:
    clipped = sum(1 for outcome in outcomes if outcome.success)
    return ClipTally(clipped=clipped, failed=len(outcomes) - clipped, total=len(outcomes))


def run(
    client: RaleysClient,
    config: Config,
    pacer: Pacer,
    on_outcome: OutcomeHandler | None = None,
) -> list[ClipOutcome]:
    """List unclipped offers and clip them according to the configured mode."""
    listing = list_unclipped_offers(client, legacy_categories=config.legacy_categories)
    return clip_offers(
        client,
        listing.offers,
        pacer,
        concurrent=config.concurrent,
        min_request_delay=config.min_request_delay,
        max_request_delay=config.max_request_delay,
        on_outcome=on_outcome,
    )
