"""
Public key provider.

The platform's RSA public key either comes from configuration
(``PUBLIC_KEY``) or is fetched once from the platform at startup.  Either
way the pipeline treats it as an opaque PEM string handed to the
``EnvelopeEncryptor``.
"""
from typing import Optional

from loguru import logger

from src.walletfarm.platform.base import WalletPlatformClient


class PublicKeyProvider:
    """Resolves the platform public key, preferring the configured value."""

    def __init__(
        self,
        client: WalletPlatformClient,
        configured_pem: Optional[str] = None,
    ):
        self._client = client
        self._configured_pem = configured_pem

    def get_public_key(self) -> str:
        """Return the PEM-encoded key.

        Raises:
            PlatformError: If the key has to be fetched and the call fails.
        """
        if self._configured_pem:
            logger.debug("Using configured platform public key")
            return self._configured_pem

        logger.info("No PUBLIC_KEY configured. Fetching it from the platform...")
        pem = self._client.get_public_key()
        logger.success("Platform public key fetched.")
        return pem
