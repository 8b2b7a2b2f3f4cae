"""
Loguru setup with secret redaction.

Two sinks are configured:
  - **stderr**: ``--log-level`` and above, compact and coloured.
  - **File** ``logs/walletfarm_YYYY-MM-DD.log``: DEBUG and above with
    source location, 10 MB rotation, zip compression, 30-day retention.

Both sinks see messages only after a patcher has scrubbed them: the
``entitySecretCipherText`` JSON field, any base64 run long enough to be an
RSA envelope, and every value passed to ``register_secret()`` (the entity
secret hex and the API key) are replaced with ``<redacted>``.
"""
import re
import sys
from pathlib import Path
from typing import Set

from loguru import logger

REDACTED = "<redacted>"

# 2048-bit RSA ciphertext is 344 base64 characters.
_ENVELOPE_RE = re.compile(r"[A-Za-z0-9+/]{340,}={0,2}")
_CIPHERTEXT_FIELD_RE = re.compile(r'("entitySecretCipherText"\s*:\s*")[^"]*(")')

_registered_secrets: Set[str] = set()


def register_secret(value: str) -> None:
    """Redact *value* from every log message from now on."""
    if value:
        _registered_secrets.add(value)


def redact(text: str) -> str:
    text = _CIPHERTEXT_FIELD_RE.sub(rf"\g<1>{REDACTED}\g<2>", text)
    text = _ENVELOPE_RE.sub(REDACTED, text)
    for secret in _registered_secrets:
        text = text.replace(secret, REDACTED)
    return text


def _redact_record(record) -> None:
    record["message"] = redact(record["message"])


def setup_logger(log_dir: str = "logs", level: str = "INFO") -> logger:
    """Configure and return the global Loguru logger.

    Args:
        log_dir: Directory for rotated log files, created if missing.
        level: Minimum level for the terminal sink.
    """
    logger.remove()
    logger.configure(patcher=_redact_record)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    logger.add(
        log_path / "walletfarm_{time:YYYY-MM-DD}.log",
        level="DEBUG",
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
            "{name}:{function}:{line} - {message}"
        ),
        enqueue=True,
        encoding="utf-8",
    )

    return logger
