"""Testnet faucet funding."""
from loguru import logger

from src.walletfarm.platform.base import WalletPlatformClient


class FaucetFunder:
    """Requests a faucet drip for a wallet address.

    A successful call only means the drip was accepted; the balance shows up
    later and is picked up by ``BalanceObserver``.
    """

    def __init__(self, client: WalletPlatformClient):
        self.client = client

    def fund(self, address: str, blockchain: str) -> bool:
        """Ask the faucet for native currency and stablecoins.

        Raises:
            PlatformError: If the faucet rejects the request.
        """
        logger.info(f"Requesting faucet drip for {address} on {blockchain}...")
        accepted = self.client.fund_address(address, blockchain)
        logger.success(f"Faucet drip accepted for {address}")
        return accepted
