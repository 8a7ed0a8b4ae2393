from pathlib import Path

import pytest

from raleys_clipper.config import Config, load_config
from raleys_clipper.errors import CredentialsMissingError

ENV_VARS = [
    "RALEYS_EMAIL",
    "RALEYS_PASSWORD",
    "MIN_START_DELAY",
    "MAX_START_DELAY",
    "MIN_REQUEST_DELAY",
    "MAX_REQUEST_DELAY",
    "CONCURRENT",
    "LEGACY_CATEGORIES",
    "SAVE_COOKIES",
    "LOAD_COOKIES",
    "COOKIES_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the real environment and any .env file."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("raleys_clipper.config.load_dotenv", lambda: None)


@pytest.mark.unit_build
class TestLoadConfig:
    """Test building configuration from flags and environment."""

    def test_defaults(self) -> None:
        config = load_config([])

        assert config == Config()
        assert config.headless is True
        assert config.min_request_delay == 1000
        assert config.max_request_delay == 5000
        assert config.concurrent is False
        assert config.cookies_file == Path("./cookies.json")

    def test_environment_fallback(self, monkeypatch) -> None:
        monkeypatch.setenv("RALEYS_EMAIL", "env@example.com")
        monkeypatch.setenv("RALEYS_PASSWORD", "secret")
        monkeypatch.setenv("MAX_START_DELAY", "60000")
        monkeypatch.setenv("CONCURRENT", "Yes")
        monkeypatch.setenv("LOAD_COOKIES", "1")
        monkeypatch.setenv("COOKIES_FILE", "/tmp/session.json")

        config = load_config([])

        assert config.email == "env@example.com"
        assert config.password == "secret"
        assert config.max_start_delay == 60000
        assert config.concurrent is True
        assert config.load_cookies is True
        assert config.cookies_file == Path("/tmp/session.json")

    def test_flags_override_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("RALEYS_EMAIL", "env@example.com")
        monkeypatch.setenv("MIN_REQUEST_DELAY", "10")
        monkeypatch.setenv("CONCURRENT", "true")

        config = load_config(
            ["--email", "cli@example.com", "--min-request-delay", "0", "--no-concurrent", "--no-headless"]
        )

        assert config.email == "cli@example.com"
        assert config.min_request_delay == 0
        assert config.concurrent is False
        assert config.headless is False

    def test_boolean_toggles(self) -> None:
        config = load_config(["--save-cookies", "--legacy-categories", "--concurrent", "-v"])

        assert config.save_cookies is True
        assert config.legacy_categories is True
        assert config.concurrent is True
        assert config.verbose is True

    def test_environment_toggle_can_be_turned_off_by_flag(self, monkeypatch) -> None:
        monkeypatch.setenv("LEGACY_CATEGORIES", "true")

        assert load_config([]).legacy_categories is True
        assert load_config(["--no-legacy-categories"]).legacy_categories is False

    def test_inverted_delay_range_is_usage_error(self) -> None:
        with pytest.raises(SystemExit):
            load_config(["--min-request-delay", "500", "--max-request-delay", "100"])

    def test_non_numeric_env_delay_is_usage_error(self, monkeypatch) -> None:
        monkeypatch.setenv("MIN_START_DELAY", "soon")
        with pytest.raises(SystemExit):
            load_config([])


@pytest.mark.unit_build
class TestValidate:
    def test_missing_credentials(self) -> None:
        with pytest.raises(CredentialsMissingError):
            Config(email="a@example.com").validate()

    def test_loaded_session_needs_no_credentials(self) -> None:
        Config(load_cookies=True).validate()

    def test_credentials(self) -> None:
        creds = Config(email="a@example.com", password="pw").credentials
        assert creds.email == "a@example.com"
        assert "pw" not in repr(creds)
