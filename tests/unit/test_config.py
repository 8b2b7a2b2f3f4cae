import pytest

from conftest import ENTITY_SECRET
from src.walletfarm.config import DEFAULT_API_URL, PlatformSettings, RunConfig
from src.walletfarm.errors import ConfigurationError

ENV = {"API_KEY": "TEST_API_KEY:abc:def", "ENTITY_SECRET": ENTITY_SECRET.hex()}


def test_run_config_defaults():
    config = RunConfig.build(destination_address="0xDEST", blockchain="ETH-SEPOLIA")

    assert config.wallet_count == 1
    assert config.native_fee_reserve_percent == 20
    assert config.balance_poll_interval_seconds == 5
    assert config.max_poll_attempts is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"destination_address": ""},
        {"destination_address": "   "},
        {"blockchain": ""},
        {"wallet_count": 0},
        {"native_fee_reserve_percent": 101},
        {"native_fee_reserve_percent": -5},
        {"balance_poll_interval_seconds": 0},
    ],
)
def test_run_config_rejects_bad_values(overrides):
    values = {"destination_address": "0xDEST", "blockchain": "ETH-SEPOLIA"}
    values.update(overrides)

    with pytest.raises(ConfigurationError):
        RunConfig.build(**values)


def test_run_config_is_immutable():
    config = RunConfig.build(destination_address="0xDEST", blockchain="ETH-SEPOLIA")

    with pytest.raises(Exception):
        config.wallet_count = 5


def test_platform_settings_from_env():
    settings = PlatformSettings.from_env({**ENV, "CIRCLE_API_URL": "https://example.test/v1/"})

    assert settings.api_url == "https://example.test/v1"
    assert settings.public_key_pem is None
    assert settings.http_timeout_seconds == 30.0


def test_platform_settings_default_url():
    assert PlatformSettings.from_env(ENV).api_url == DEFAULT_API_URL


@pytest.mark.parametrize("missing", ["API_KEY", "ENTITY_SECRET"])
def test_platform_settings_require_credentials(missing):
    env = {k: v for k, v in ENV.items() if k != missing}

    with pytest.raises(ConfigurationError, match=missing):
        PlatformSettings.from_env(env)


def test_platform_settings_hide_secrets():
    settings = PlatformSettings.from_env(ENV)

    assert ENTITY_SECRET.hex() not in repr(settings)
    assert ENV["API_KEY"] not in repr(settings)


def test_invalid_settings_error_does_not_leak_secret():
    env = {**ENV, "HTTP_TIMEOUT_SECONDS": "soon"}

    with pytest.raises(ConfigurationError) as exc_info:
        PlatformSettings.from_env(env)

    assert ENTITY_SECRET.hex() not in str(exc_info.value)


def test_escaped_pem_newlines_are_restored():
    pem = "-----BEGIN PUBLIC KEY-----\\nABC\\n-----END PUBLIC KEY-----"

    settings = PlatformSettings.from_env({**ENV, "PUBLIC_KEY": pem})

    assert settings.public_key_pem == "-----BEGIN PUBLIC KEY-----\nABC\n-----END PUBLIC KEY-----"


@pytest.mark.parametrize("secret", ["abcd", "ab" * 31, "ab" * 33, "zz" * 32])
def test_platform_settings_reject_malformed_entity_secret(secret):
    with pytest.raises(ConfigurationError, match="entity_secret_hex") as exc_info:
        PlatformSettings.from_env({**ENV, "ENTITY_SECRET": secret})

    assert secret not in str(exc_info.value)
