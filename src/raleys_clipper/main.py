import logging
import os
import sys
from pathlib import Path

from .client import RaleysClient
from .clipper import run, tally, wait_before_start
from .config import Config, load_config
from .errors import ClipperError
from .models import SessionToken
from .pacing import Pacer
from .report import log_outcome, log_report
from .session import acquire_session
from .storage import load_tokens, save_tokens

logger = logging.getLogger(__name__)

# Log directory - can be overridden via RALEYS_LOG_DIR env var
LOG_DIR = Path(os.environ.get("RALEYS_LOG_DIR", "logs"))


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with console and file handlers."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    root_level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setLevel(root_level)
    console_handler.setFormatter(formatter)

    # File handler for all logs
    file_handler = logging.FileHandler(LOG_DIR / "raleys_clipper.log")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Report logger with its own file, kept off the console
    report_logger = logging.getLogger("raleys_clipper.reports")
    report_logger.propagate = False
    report_handler = logging.FileHandler(LOG_DIR / "reports.log")
    report_handler.setLevel(logging.INFO)
    report_handler.setFormatter(logging.Formatter("%(asctime)s\n%(message)s\n"))
    report_logger.addHandler(report_handler)


def get_session_tokens(config: Config, pacer: Pacer) -> list[SessionToken]:
    """Load a saved session, or log in through the browser (saving the session if asked)."""
    if config.load_cookies:
        return load_tokens(config.cookies_file)

    tokens = acquire_session(config.credentials, headless=config.headless, pacer=pacer)
    if config.save_cookies:
        save_tokens(tokens, config.cookies_file)
    return tokens


def main(argv: list[str] | None = None) -> int:
    config = load_config(argv)
    setup_logging(verbose=config.verbose)
    pacer = Pacer()

    try:
        config.validate()
        wait_before_start(config, pacer)

        tokens = get_session_tokens(config, pacer)
        client = RaleysClient(tokens)

        outcomes = run(client, config, pacer, on_outcome=log_outcome)
        log_report(tally(outcomes), outcomes)
        return 0

    except ClipperError as e:
        logger.error(f"[{type(e).__name__}] {e}")
        return 1
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
