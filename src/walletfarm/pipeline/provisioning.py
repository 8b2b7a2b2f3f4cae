"""
Wallet provisioning.

Creates one wallet set per run and derives the requested number of wallets
on a single blockchain inside it.  Each call is a mutating request and
therefore gets its own fresh idempotency key and envelope.
"""
from typing import Callable, List

from loguru import logger

from src.walletfarm.auth.envelope import EnvelopeEncryptor
from src.walletfarm.auth.idempotency import new_idempotency_key
from src.walletfarm.platform.base import WalletPlatformClient
from src.walletfarm.platform.schemas import Wallet, WalletSet

WALLET_SET_NAME_LENGTH = 8


class WalletProvisioner:
    """Creates the wallet set and its wallets."""

    def __init__(
        self,
        client: WalletPlatformClient,
        encryptor: EnvelopeEncryptor,
        key_factory: Callable[[], str] = new_idempotency_key,
    ):
        self.client = client
        self.encryptor = encryptor
        self.key_factory = key_factory

    def create_wallet_set(self) -> WalletSet:
        """Create a wallet set named after a prefix of its idempotency key.

        Raises:
            PlatformError: If the platform rejects the request.
        """
        idempotency_key = self.key_factory()
        name = idempotency_key[:WALLET_SET_NAME_LENGTH]

        wallet_set = self.client.create_wallet_set(
            idempotency_key=idempotency_key,
            cipher_text=self.encryptor.generate_envelope(),
            name=name,
        )
        logger.success(f"WalletSet created: id={wallet_set.id} name={name}")
        return wallet_set

    def create_wallets(
        self,
        wallet_set_id: str,
        count: int,
        blockchain: str,
    ) -> List[Wallet]:
        """Create exactly *count* wallets on *blockchain*.

        Raises:
            PlatformError: If the platform rejects the request.
        """
        logger.info(f"Creating {count} wallet(s) on {blockchain}...")

        wallets = self.client.create_wallets(
            idempotency_key=self.key_factory(),
            cipher_text=self.encryptor.generate_envelope(),
            wallet_set_id=wallet_set_id,
            blockchain=blockchain,
            count=count,
        )

        if len(wallets) != count:
            logger.warning(
                f"Requested {count} wallet(s) but platform returned {len(wallets)}"
            )
        for wallet in wallets:
            logger.info(f"Wallet {wallet.id} -> {wallet.address} ({wallet.blockchain})")

        return wallets
