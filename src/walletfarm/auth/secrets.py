"""
Entity-secret access.

The envelope encryptor never reads the secret from the environment itself;
it asks a ``SecretHandle`` for the raw bytes.  Swapping where the secret
lives (environment variable, secret manager, HSM-backed service) only needs
a new handle implementation.
"""
import binascii
from abc import ABC, abstractmethod

from src.walletfarm.errors import EntitySecretError

ENTITY_SECRET_LENGTH = 32


class SecretHandle(ABC):
    """Narrow accessor for the long-lived entity secret."""

    @abstractmethod
    def reveal(self) -> bytes:
        """Return the raw secret bytes.

        Raises:
            EntitySecretError: If the stored secret cannot be decoded.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(<redacted>)"


class HexSecretHandle(SecretHandle):
    """Secret held as a hex string, e.g. from the ``ENTITY_SECRET`` variable."""

    def __init__(self, secret_hex: str):
        self._secret_hex = secret_hex.strip()

    def reveal(self) -> bytes:
        try:
            return binascii.unhexlify(self._secret_hex)
        except (binascii.Error, ValueError):
            raise EntitySecretError("Entity secret is not valid hex") from None


class BytesSecretHandle(SecretHandle):
    """Secret already available as raw bytes."""

    def __init__(self, secret: bytes):
        self._secret = bytes(secret)

    def reveal(self) -> bytes:
        return self._secret


def validate_entity_secret(secret: bytes) -> bytes:
    """Ensure *secret* has the exact length the platform expects.

    Raises:
        EntitySecretError: If the secret is not exactly 32 bytes long.
    """
    if len(secret) != ENTITY_SECRET_LENGTH:
        raise EntitySecretError(
            f"Entity secret must be {ENTITY_SECRET_LENGTH} bytes, got {len(secret)}"
        )
    return secret
