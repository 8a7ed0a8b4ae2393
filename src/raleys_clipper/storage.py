import json
import logging
from pathlib import Path

from .errors import SessionLoadFailedError
from .models import SessionToken
from .session import tokens_from_cookies

logger = logging.getLogger(__name__)


def save_tokens(tokens: list[SessionToken], path: str | Path) -> None:
    """Write session tokens as a flat JSON array of cookie records."""
    records = [
        {
            "name": token.name,
            "value": token.value,
            "domain": token.domain,
            "path": token.path,
            "expires": token.expires if token.expires is not None else -1,
            "httpOnly": token.http_only,
            "secure": token.secure,
        }
        for token in tokens
    ]
    Path(path).write_text(json.dumps(records, indent=2))
    logger.info(f"Saved cookies to {path}")


def load_tokens(path: str | Path) -> list[SessionToken]:
    """Read session tokens previously written by `save_tokens` (or exported by a browser)."""
    try:
        records = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SessionLoadFailedError(f"Failed to load cookies from {path}: {e}") from e

    if not isinstance(records, list):
        raise SessionLoadFailedError(f"Failed to load cookies from {path}: expected a list of cookies")
    for i, record in enumerate(records):
        if not _is_cookie_record(record):
            raise SessionLoadFailedError(f"Failed to load cookies from {path}: entry {i} is not a cookie")

    tokens = tokens_from_cookies(records)
    logger.info(f"Loaded {len(tokens)} cookies from {path}")
    return tokens


def _is_cookie_record(record: object) -> bool:
    if not isinstance(record, dict) or not isinstance(record.get("name"), str) or not record["name"]:
        return False
    if not isinstance(record.get("value"), str):
        return False
    if any(key in record and not isinstance(record[key], str) for key in ("domain", "path")):
        return False
    expires = record.get("expires")
    # bool is an int subclass but never a valid timestamp
    return expires is None or (isinstance(expires, (int, float)) and not isinstance(expires, bool))
