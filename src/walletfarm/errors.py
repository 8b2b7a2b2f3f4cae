"""
Error taxonomy for a wallet-farm run.

Every failure the pipeline can raise derives from ``WalletFarmError`` and
carries a ``retryable`` flag.  The current policy treats everything as fatal
(``retryable = False`` throughout); callers that want to retry specific
platform failures only need to flip the flag on a subtype.
"""
from typing import Optional


class WalletFarmError(Exception):
    """Base class for all errors raised by the wallet-farm pipeline."""

    retryable: bool = False


class ConfigurationError(WalletFarmError):
    """A mandatory setting is missing or malformed."""


class CryptoError(WalletFarmError):
    """Public-key parsing or envelope encryption failed."""


class EntitySecretError(ConfigurationError, CryptoError):
    """The entity secret is not valid hex or is not exactly 32 bytes long."""


class PlatformError(WalletFarmError):
    """The wallet platform answered with a non-success response.

    ``status_code`` is ``None`` when the request never produced a response
    (DNS failure, connection reset, timeout).
    """

    def __init__(
        self,
        operation: str,
        status_code: Optional[int],
        body: str,
    ):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        super().__init__(f"{operation} failed ({status}): {body}")

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 500


class DecodeError(WalletFarmError):
    """A response body did not match the expected shape."""

    def __init__(self, operation: str, body: str, reason: str = ""):
        self.operation = operation
        self.body = body
        message = f"Unexpected response from {operation}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class BalanceTimeoutError(WalletFarmError, TimeoutError):
    """Balances did not appear within the configured attempt or time budget."""


class PollCancelledError(WalletFarmError):
    """Balance polling was cancelled before any balance arrived."""
