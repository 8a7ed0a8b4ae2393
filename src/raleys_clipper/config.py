import argparse
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import CredentialsMissingError
from .models import Credentials

DEFAULT_COOKIES_FILE = "./cookies.json"


@dataclass(frozen=True)
class Config:
    """Run configuration. All delays are in milliseconds."""

    email: str | None = None
    password: str | None = None
    headless: bool = True
    min_start_delay: int = 0
    max_start_delay: int = 0
    min_request_delay: int = 1000
    max_request_delay: int = 5000
    concurrent: bool = False
    legacy_categories: bool = False
    save_cookies: bool = False
    load_cookies: bool = False
    cookies_file: Path = Path(DEFAULT_COOKIES_FILE)
    verbose: bool = False

    def validate(self) -> None:
        if (not self.email or not self.password) and not self.load_cookies:
            raise CredentialsMissingError(
                "Missing credentials: provide --email and --password or set RALEYS_EMAIL and "
                "RALEYS_PASSWORD in .env, or use --load-cookies to load cookies from file"
            )

    @property
    def credentials(self) -> Credentials:
        self.validate()
        if not self.email or not self.password:
            raise CredentialsMissingError("Credentials are required to log in")
        return Credentials(email=self.email, password=self.password)


def _env_int(key: str, fallback: int) -> int:
    value = os.environ.get(key)
    if value is None or value == "":
        return fallback
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{key} must be an integer number of milliseconds, got {value!r}")


def _env_bool(key: str, fallback: bool = False) -> bool:
    value = os.environ.get(key)
    if value is None:
        return fallback
    return value.strip().lower() in ("true", "1", "yes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Raley's offer clipper")
    parser.add_argument("--email", help="Raley's account email address (env: RALEYS_EMAIL)")
    parser.add_argument("--password", help="Raley's account password (env: RALEYS_PASSWORD)")
    parser.add_argument(
        "--headless",
        dest="headless",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Run browser in headless mode (default: headless)",
    )
    parser.add_argument(
        "--min-start-delay", type=int, help="Minimum random delay before starting, in ms (default 0)"
    )
    parser.add_argument(
        "--max-start-delay", type=int, help="Maximum random delay before starting, in ms (default 0)"
    )
    parser.add_argument(
        "--min-request-delay", type=int, help="Minimum random delay between clip requests, in ms (default 1000)"
    )
    parser.add_argument(
        "--max-request-delay", type=int, help="Maximum random delay between clip requests, in ms (default 5000)"
    )
    parser.add_argument(
        "--concurrent",
        dest="concurrent",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Clip all offers at once instead of one at a time (default: sequential)",
    )
    parser.add_argument(
        "--legacy-categories",
        dest="legacy_categories",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="List offers per category (SomethingExtra, WeeklyExclusive, DigitalCoupons) instead of in bulk",
    )
    parser.add_argument(
        "--save-cookies",
        dest="save_cookies",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Save cookies to disk after login (default: no)",
    )
    parser.add_argument(
        "--load-cookies",
        dest="load_cookies",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Load cookies from disk instead of logging in (default: no)",
    )
    parser.add_argument("--cookies-file", help=f"Path to cookies JSON file (default {DEFAULT_COOKIES_FILE})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def load_config(argv: list[str] | None = None) -> Config:
    """Build a Config from command line flags, falling back to environment variables (and .env)."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config(
            email=args.email or os.environ.get("RALEYS_EMAIL"),
            password=args.password or os.environ.get("RALEYS_PASSWORD"),
            headless=args.headless,
            min_start_delay=_pick(args.min_start_delay, _env_int("MIN_START_DELAY", 0)),
            max_start_delay=_pick(args.max_start_delay, _env_int("MAX_START_DELAY", 0)),
            min_request_delay=_pick(args.min_request_delay, _env_int("MIN_REQUEST_DELAY", 1000)),
            max_request_delay=_pick(args.max_request_delay, _env_int("MAX_REQUEST_DELAY", 5000)),
            concurrent=_pick(args.concurrent, _env_bool("CONCURRENT")),
            legacy_categories=_pick(args.legacy_categories, _env_bool("LEGACY_CATEGORIES")),
            save_cookies=_pick(args.save_cookies, _env_bool("SAVE_COOKIES")),
            load_cookies=_pick(args.load_cookies, _env_bool("LOAD_COOKIES")),
            cookies_file=Path(args.cookies_file or os.environ.get("COOKIES_FILE") or DEFAULT_COOKIES_FILE),
            verbose=args.verbose,
        )
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    for name in ("start", "request"):
        low, high = getattr(config, f"min_{name}_delay"), getattr(config, f"max_{name}_delay")
        if low < 0 or high < low:
            parser.error(f"invalid {name} delay range: min={low}, max={high}")

    return config


def _pick(cli_value, env_value):
    return env_value if cli_value is None else cli_value
