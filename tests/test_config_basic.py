"""
Basic tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from cfpreview.config import ConfigError, Credentials, Settings, load_credentials, load_settings


class TestCredentials:
    """Test credential validation."""

    def test_load_valid(self):
        creds = load_credentials({"CLOUDFLARE_ACCOUNT_ID": "acct", "CLOUDFLARE_API_TOKEN": "tok"})

        assert creds.account_id == "acct"
        assert creds.api_token == "tok"

    def test_whitespace_is_stripped(self):
        creds = load_credentials({"CLOUDFLARE_ACCOUNT_ID": " acct \n", "CLOUDFLARE_API_TOKEN": "tok "})

        assert creds.account_id == "acct"
        assert creds.api_token == "tok"

    def test_missing_lists_every_problem(self):
        with pytest.raises(ConfigError) as exc_info:
            load_credentials({})

        message = str(exc_info.value)
        assert "CLOUDFLARE_ACCOUNT_ID" in message
        assert "CLOUDFLARE_API_TOKEN" in message
        assert "create a .env file" in message

    def test_blank_token_is_rejected(self):
        with pytest.raises(ConfigError, match="CLOUDFLARE_API_TOKEN"):
            load_credentials({"CLOUDFLARE_ACCOUNT_ID": "acct", "CLOUDFLARE_API_TOKEN": "   "})

    def test_repr_hides_token(self):
        creds = Credentials(account_id="acct", api_token="super-secret-token")

        assert "super-secret-token" not in repr(creds)

    def test_credentials_are_frozen(self):
        creds = Credentials(account_id="acct", api_token="tok")

        with pytest.raises(ValidationError):
            creds.api_token = "other"


class TestSettings:
    """Test engine tunables."""

    def test_defaults(self):
        assert load_settings({}) == Settings(request_delay=0.2, default_retry_after=60)

    def test_overrides(self):
        settings = load_settings({"CWC_REQUEST_DELAY_MS": "500", "CWC_DEFAULT_RETRY_AFTER": "30"})

        assert settings.request_delay == 0.5
        assert settings.default_retry_after == 30

    def test_invalid_values_fall_back(self):
        settings = load_settings({"CWC_REQUEST_DELAY_MS": "fast", "CWC_DEFAULT_RETRY_AFTER": "never"})

        assert settings == Settings()
