"""
End-to-end wallet-farm run.

    create wallet set -> create N wallets -> for each wallet, one at a time:
        faucet drip -> wait for balances -> plan sweep -> execute transfers

Every error aborts the whole run; nothing already done is rolled back.
"""
import threading
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict

from src.walletfarm.auth.envelope import EnvelopeEncryptor
from src.walletfarm.config import RunConfig
from src.walletfarm.pipeline.balances import BalanceObserver
from src.walletfarm.pipeline.faucet import FaucetFunder
from src.walletfarm.pipeline.provisioning import WalletProvisioner
from src.walletfarm.pipeline.sweep import SweepExecutor, SweepPlanner, TransferRecord
from src.walletfarm.platform.base import WalletPlatformClient
from src.walletfarm.platform.schemas import Wallet, WalletSet


class RunReport(BaseModel):
    """What a completed run created and moved."""

    model_config = ConfigDict(frozen=True)

    wallet_set: WalletSet
    wallets: List[Wallet]
    transfers: List[TransferRecord]


class FarmRunner:
    """Wires the pipeline stages for a single run."""

    def __init__(
        self,
        config: RunConfig,
        client: WalletPlatformClient,
        encryptor: EnvelopeEncryptor,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.config = config
        self.provisioner = WalletProvisioner(client, encryptor)
        self.funder = FaucetFunder(client)
        self.observer = BalanceObserver.from_config(client, config, cancel_event)
        self.planner = SweepPlanner(config.native_fee_reserve_percent)
        self.executor = SweepExecutor(client, encryptor)

    def run(self) -> RunReport:
        """Provision, fund and sweep every wallet.

        Raises:
            WalletFarmError: Whatever stage failed first.
        """
        cfg = self.config
        logger.info(
            f"Starting run: {cfg.wallet_count} wallet(s) on {cfg.blockchain}, "
            f"sweeping to {cfg.destination_address} "
            f"(native fee reserve {cfg.native_fee_reserve_percent}%)"
        )

        wallet_set = self.provisioner.create_wallet_set()
        wallets = self.provisioner.create_wallets(
            wallet_set.id, cfg.wallet_count, cfg.blockchain,
        )

        transfers: List[TransferRecord] = []
        for index, wallet in enumerate(wallets, start=1):
            logger.info(f"[{index}/{len(wallets)}] Funding wallet: {wallet.id}")
            transfers.extend(self.process_wallet(wallet))

        logger.success(
            f"Run complete: {len(wallets)} wallet(s), {len(transfers)} transfer(s)"
        )
        return RunReport(wallet_set=wallet_set, wallets=wallets, transfers=transfers)

    def process_wallet(self, wallet: Wallet) -> List[TransferRecord]:
        """Fund one wallet, wait for the drip and sweep it."""
        self.funder.fund(wallet.address, wallet.blockchain)
        balances = self.observer.await_balances(wallet)
        plan = self.planner.plan(balances, self.config.destination_address)
        return self.executor.execute(wallet, plan)
