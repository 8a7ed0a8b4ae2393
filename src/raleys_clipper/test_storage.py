import json

import pytest

from raleys_clipper.errors import SessionLoadFailedError
from raleys_clipper.models import SessionToken
from raleys_clipper.storage import load_tokens, save_tokens


@pytest.fixture
def tokens() -> list[SessionToken]:
    return [
        SessionToken(name="sid", value="abc", domain=".raleys.com", path="/", http_only=True, secure=True, expires=1.9e9),
        SessionToken(name="visitor", value="v1", domain="www.raleys.com"),
    ]


@pytest.mark.unit_build
class TestSessionStorage:
    """Test saving and loading session cookies."""

    def test_saved_file_is_flat_cookie_array(self, tokens: list[SessionToken], tmp_path) -> None:
        path = tmp_path / "cookies.json"
        save_tokens(tokens, path)

        records = json.loads(path.read_text())
        assert records[0] == {
            "name": "sid",
            "value": "abc",
            "domain": ".raleys.com",
            "path": "/",
            "expires": 1.9e9,
            "httpOnly": True,
            "secure": True,
        }
        assert records[1]["expires"] == -1

    def test_load_returns_saved_tokens(self, tokens: list[SessionToken], tmp_path) -> None:
        path = tmp_path / "cookies.json"
        save_tokens(tokens, path)

        assert load_tokens(path) == tokens

    def test_load_accepts_browser_exported_cookies(self, tmp_path) -> None:
        path = tmp_path / "cookies.json"
        path.write_text(
            json.dumps([{"name": "sid", "value": "abc", "domain": ".raleys.com", "sameSite": "Lax", "size": 6}])
        )

        [token] = load_tokens(path)
        assert token.name == "sid"
        assert token.path == "/"

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(SessionLoadFailedError, match="Failed to load cookies"):
            load_tokens(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "cookies.json"
        path.write_text("not json")

        with pytest.raises(SessionLoadFailedError):
            load_tokens(path)

    @pytest.mark.parametrize(
        "content",
        [
            {"name": "sid"},
            [{"value": "abc"}],
            ["sid=abc"],
            [{"name": "sid", "value": "abc", "expires": "Fri, 01 Jan 2027"}],
            [{"name": "sid", "value": "abc", "expires": True}],
            [{"name": "sid", "value": 123}],
            [{"name": "sid", "value": "abc", "domain": None}],
        ],
    )
    def test_malformed_records(self, content, tmp_path) -> None:
        path = tmp_path / "cookies.json"
        path.write_text(json.dumps(content))

        with pytest.raises(SessionLoadFailedError):
            load_tokens(path)
