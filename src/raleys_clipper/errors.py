"""Exception hierarchy for the Raley's offer clipper.

Everything except `ClipFailedError` and `InvalidOfferDataError` is fatal to a
run. Those two are raised below the orchestrator and absorbed into per-offer
outcomes or skipped entries.
"""


class ClipperError(Exception):
    """Base class for all classified clipper errors."""


class CredentialsMissingError(ClipperError):
    pass


class LoginError(ClipperError):
    """Any failure while acquiring an authenticated browser session."""


class NavigationFailedError(LoginError):
    pass


class FormNotFoundError(LoginError):
    pass


class LoginNavigationFailedError(LoginError):
    def __init__(self, attempts: int):
        super().__init__(f"Failed to trigger navigation after {attempts} login attempts")
        self.attempts = attempts


class ChallengeRequiresHeadfulError(LoginError):
    pass


class ChallengeTimeoutError(LoginError):
    pass


class SessionLoadFailedError(ClipperError):
    pass


class OfferListingFailedError(ClipperError):
    pass


class ClipFailedError(ClipperError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidOfferDataError(ClipperError):
    pass
