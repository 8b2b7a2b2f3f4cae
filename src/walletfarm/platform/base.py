"""
Abstract contract for the wallet-as-a-service platform.

The pipeline stages only ever talk to a ``WalletPlatformClient``; the HTTP
implementation lives in ``circle_client.py`` and tests substitute in-memory
fakes.  Mutating operations receive the idempotency key and envelope from
the caller, so the client itself never decides when a fresh one is needed.
"""
from abc import ABC, abstractmethod
from typing import List

from src.walletfarm.platform.schemas import TokenBalance, Wallet, WalletSet


class WalletPlatformClient(ABC):
    """Operations the pipeline needs from the wallet platform.

    Every method raises ``PlatformError`` on a non-success response and
    ``DecodeError`` when a success response has an unexpected shape.
    """

    @abstractmethod
    def create_wallet_set(
        self,
        idempotency_key: str,
        cipher_text: str,
        name: str,
    ) -> WalletSet:
        """Create a named wallet set."""

    @abstractmethod
    def create_wallets(
        self,
        idempotency_key: str,
        cipher_text: str,
        wallet_set_id: str,
        blockchain: str,
        count: int,
    ) -> List[Wallet]:
        """Create *count* wallets on *blockchain* inside *wallet_set_id*."""

    @abstractmethod
    def fund_address(self, address: str, blockchain: str) -> bool:
        """Ask the testnet faucet to drip native and stablecoin tokens."""

    @abstractmethod
    def get_wallet_balances(self, wallet_id: str) -> List[TokenBalance]:
        """Return the wallet's current, possibly empty, token balances."""

    @abstractmethod
    def make_transfer(
        self,
        idempotency_key: str,
        cipher_text: str,
        wallet_id: str,
        token_id: str,
        amount: str,
        destination: str,
    ) -> bool:
        """Transfer *amount* of *token_id* from *wallet_id* to *destination*."""

    @abstractmethod
    def get_public_key(self) -> str:
        """Return the platform's current PEM-encoded RSA public key."""
