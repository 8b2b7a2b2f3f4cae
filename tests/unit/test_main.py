"""CLI wiring: configuration errors abort before any network call."""
import pytest
from loguru import logger

import main
from conftest import FakePlatformClient


@pytest.fixture(autouse=True)
def isolated_run(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("API_KEY", "ENTITY_SECRET", "PUBLIC_KEY", "CIRCLE_API_URL"):
        monkeypatch.delenv(name, raising=False)
    yield
    logger.remove()


def test_parser_defaults():
    args = main.build_parser().parse_args(["--dest", "0xDEST", "--blockchain", "ETH-SEPOLIA"])

    assert args.wallets == 1
    assert args.fee_reserve == 20
    assert args.poll_interval == 5
    assert args.max_poll_attempts is None
    assert args.log_level == "INFO"


def test_missing_destination_exits_non_zero(tmp_path):
    assert main.main(["--blockchain", "ETH-SEPOLIA", "--log-dir", str(tmp_path)]) == 1


def test_missing_credentials_exit_non_zero(tmp_path, monkeypatch):
    built = []
    monkeypatch.setattr(
        main.CirclePlatformClient, "from_settings",
        lambda *args, **kwargs: built.append(args),
    )

    code = main.main([
        "--dest", "0xDEST", "--blockchain", "ETH-SEPOLIA", "--log-dir", str(tmp_path),
    ])

    assert code == 1
    assert built == []


def test_bad_entity_secret_fails_before_any_platform_call(tmp_path, monkeypatch):
    monkeypatch.setenv("API_KEY", "TEST_KEY")
    monkeypatch.setenv("ENTITY_SECRET", "abcd")
    client = FakePlatformClient()
    built = []

    def from_settings(*args, **kwargs):
        built.append(args)
        return client

    monkeypatch.setattr(main.CirclePlatformClient, "from_settings", from_settings)

    code = main.main([
        "--dest", "0xDEST", "--blockchain", "ETH-SEPOLIA", "--log-dir", str(tmp_path),
    ])

    assert code == 1
    assert built == []
    assert client.calls == []


def test_log_level_flag_is_case_insensitive():
    args = main.build_parser().parse_args(["--log-level", "debug"])

    assert args.log_level == "DEBUG"
