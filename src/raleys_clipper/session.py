import logging
from enum import Enum
from typing import Any, Callable

from playwright.sync_api import Error as PlaywrightError

from .browser import PlaywrightBrowser
from .errors import (
    ChallengeRequiresHeadfulError,
    ChallengeTimeoutError,
    FormNotFoundError,
    LoginNavigationFailedError,
    NavigationFailedError,
)
from .models import Credentials, SessionToken
from .pacing import FORM_SETTLE_MS, TYPING_DELAY_MS, Pacer

logger = logging.getLogger(__name__)

STOREFRONT_URL = "https://www.raleys.com/"

LOGIN_ENTRY_SELECTOR = "#header nav div.tablet\\:block p > a:nth-child(1)"
EMAIL_SELECTOR = "#email"
PASSWORD_SELECTOR = "#password"
SUBMIT_SELECTOR = "#auth-modal form div.flex.justify-center > button"
CHALLENGE_SELECTOR = 'iframe[title="reCAPTCHA"]'

MAX_SUBMIT_ATTEMPTS = 3
SUBMIT_NAVIGATION_TIMEOUT_MS = 5000
MANUAL_CHALLENGE_TIMEOUT_MS = 90000
FORM_TIMEOUT_MS = 30000


class LoginState(Enum):
    IDLE = "idle"
    NAVIGATED = "navigated"
    FORM_VISIBLE = "form_visible"
    SUBMITTING = "submitting"
    CHALLENGE_PENDING_MANUAL = "challenge_pending_manual"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def acquire_session(
    credentials: Credentials,
    headless: bool = True,
    browser_factory: Callable[[bool], Any] = PlaywrightBrowser,
    pacer: Pacer | None = None,
) -> list[SessionToken]:
    """
    Log in to raleys.com through a real browser and return the session cookies.

    Args:
        credentials: Account email and password
        headless: Run browser without UI. A human-verification challenge can only be
            solved by hand in a visible browser.
        browser_factory: Callable returning a browser adapter for the given headless flag
        pacer: Delay strategy for typing and settle pauses

    Raises:
        LoginError subclasses, classified by where the login failed.
    """
    pacer = pacer or Pacer()
    login = _LoginFlow(browser_factory(headless), headless, pacer)
    return login.run(credentials)


class _LoginFlow:
    """One login attempt sequence against a single browser."""

    def __init__(self, browser: Any, headless: bool, pacer: Pacer):
        self.browser = browser
        self.headless = headless
        self.pacer = pacer
        self.state = LoginState.IDLE

    def _transition(self, state: LoginState) -> None:
        logger.debug(f"Login state: {self.state.value} -> {state.value}")
        self.state = state

    def run(self, credentials: Credentials) -> list[SessionToken]:
        logger.info("Starting up browser...")
        try:
            self.browser.launch()
            self._open_storefront()
            self._open_login_form()
            self._type_like_human(EMAIL_SELECTOR, credentials.email)
            self._type_like_human(PASSWORD_SELECTOR, credentials.password)
            self._submit()
            tokens = tokens_from_cookies(self.browser.cookies())
        except Exception:
            self._transition(LoginState.FAILED)
            raise
        finally:
            self.browser.close()
        logger.info("Logged in successfully")
        return tokens

    def _open_storefront(self) -> None:
        logger.info("Navigating to raleys.com...")
        try:
            self.browser.goto(STOREFRONT_URL)
        except PlaywrightError as e:
            raise NavigationFailedError(f"Could not load {STOREFRONT_URL}: {e}") from e
        self._transition(LoginState.NAVIGATED)

    def _open_login_form(self) -> None:
        try:
            self.browser.wait_for_visible(LOGIN_ENTRY_SELECTOR, FORM_TIMEOUT_MS)
            self.browser.click(LOGIN_ENTRY_SELECTOR)
            self.browser.wait_for_visible(EMAIL_SELECTOR, FORM_TIMEOUT_MS)
        except PlaywrightError as e:
            raise FormNotFoundError(f"Login form did not appear: {e}") from e
        self._transition(LoginState.FORM_VISIBLE)
        self.pacer.sleep(FORM_SETTLE_MS)

    def _type_like_human(self, selector: str, text: str) -> None:
        for char in text:
            self.browser.type_text(selector, char)
            self.pacer.pause(*TYPING_DELAY_MS)

    def _submit(self) -> None:
        logger.info("Logging in...")
        for attempt in range(1, MAX_SUBMIT_ATTEMPTS + 1):
            self._transition(LoginState.SUBMITTING)
            clicked = self.browser.navigation_after(
                lambda: self.browser.click(SUBMIT_SELECTOR, SUBMIT_NAVIGATION_TIMEOUT_MS),
                SUBMIT_NAVIGATION_TIMEOUT_MS,
            )
            if clicked:
                self._transition(LoginState.SUCCEEDED)
                return

            try:
                challenge = self.browser.has_element(CHALLENGE_SELECTOR)
            except PlaywrightError as e:
                # The page was torn down mid-query: the submit went through after the wait gave up
                logger.debug(f"Page changed while looking for a CAPTCHA: {e}")
                if self._page_ready():
                    self._transition(LoginState.SUCCEEDED)
                    return
                challenge = False

            if challenge:
                self._wait_for_manual_challenge()
                return

            if attempt == MAX_SUBMIT_ATTEMPTS:
                logger.warning(f"Attempt {attempt} to click login button failed. Navigation did not happen.")
                raise LoginNavigationFailedError(attempt)

            logger.warning(f"Attempt {attempt} to click login button failed. Navigation did not happen. Retrying...")

    def _page_ready(self) -> bool:
        try:
            self.browser.wait_until_ready()
        except PlaywrightError as e:
            logger.warning(f"Page did not finish loading after login submit: {e}")
            return False
        return True

    def _wait_for_manual_challenge(self) -> None:
        if self.headless:
            raise ChallengeRequiresHeadfulError(
                "CAPTCHA detected during login. Run with --no-headless to solve it manually."
            )

        self._transition(LoginState.CHALLENGE_PENDING_MANUAL)
        logger.warning(
            "CAPTCHA detected during login attempt. Please solve it manually in the browser, "
            "then click login (you might have to click it even if you don't see the CAPTCHA)."
        )
        if not self.browser.wait_for_navigation(MANUAL_CHALLENGE_TIMEOUT_MS):
            raise ChallengeTimeoutError(
                f"CAPTCHA was not solved in time ({MANUAL_CHALLENGE_TIMEOUT_MS // 1000}s timeout)"
            )
        logger.info("CAPTCHA solved manually")
        self._transition(LoginState.SUCCEEDED)


def tokens_from_cookies(cookies: list[dict[str, Any]]) -> list[SessionToken]:
    """Convert browser cookie records into session tokens."""
    tokens = []
    for cookie in cookies:
        expires = cookie.get("expires")
        # Browsers report session cookies with expires == -1
        if expires is not None and expires < 0:
            expires = None
        tokens.append(
            SessionToken(
                name=cookie["name"],
                value=cookie["value"],
                domain=cookie.get("domain", ""),
                path=cookie.get("path", "/"),
                http_only=bool(cookie.get("httpOnly", False)),
                secure=bool(cookie.get("secure", False)),
                expires=expires,
            )
        )
    return tokens
