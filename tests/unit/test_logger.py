"""Log redaction and sink levels."""
import pytest
from loguru import logger

from conftest import ENTITY_SECRET
from src.walletfarm.utils import logger as log_setup
from src.walletfarm.utils.logger import REDACTED, redact, register_secret, setup_logger


@pytest.fixture(autouse=True)
def fresh_secrets(monkeypatch):
    monkeypatch.setattr(log_setup, "_registered_secrets", set())
    yield
    logger.remove()


def test_ciphertext_field_is_redacted():
    body = '{"idempotencyKey":"k-1","entitySecretCipherText":"QUJD==","name":"x"}'

    assert redact(body) == (
        '{"idempotencyKey":"k-1","entitySecretCipherText":"<redacted>","name":"x"}'
    )


def test_envelope_text_is_redacted(encryptor):
    envelope = encryptor.generate_envelope()

    assert redact(f"sent {envelope} upstream") == f"sent {REDACTED} upstream"


def test_registered_secret_is_redacted():
    register_secret(ENTITY_SECRET.hex())

    assert ENTITY_SECRET.hex() not in redact(f"secret={ENTITY_SECRET.hex()}")


def test_ordinary_messages_are_untouched():
    message = "Sending 0.800000 : ETH-SEPOLIA to 0xDEST. Success: True"

    assert redact(message) == message


def test_sinks_receive_redacted_messages(tmp_path):
    setup_logger(str(tmp_path))
    register_secret("TEST_API_KEY:abc:def")
    messages = []
    logger.add(messages.append, format="{message}")

    logger.info("auth header Bearer TEST_API_KEY:abc:def")

    assert messages == [f"auth header Bearer {REDACTED}\n"]


def test_terminal_level_is_configurable(tmp_path, capsys):
    setup_logger(str(tmp_path), level="WARNING")

    logger.info("routine progress")
    logger.warning("something odd")

    err = capsys.readouterr().err
    assert "something odd" in err
    assert "routine progress" not in err
