"""
Wallet-farm entry point.

Runs a single provisioning and sweep cycle:
  1. Create a wallet set and N wallets on the chosen testnet.
  2. Request a faucet drip for every wallet.
  3. Wait for each wallet's balances to arrive.
  4. Sweep every token to the destination address, keeping a share of the
     native balance behind for fees.

Credentials come from the environment (``.env`` is loaded automatically):
``API_KEY``, ``ENTITY_SECRET``, optional ``PUBLIC_KEY`` and ``CIRCLE_API_URL``.

Usage::

    uv run main.py --dest 0xDEST --blockchain ETH-SEPOLIA
    uv run main.py --dest 0xDEST --blockchain MATIC-AMOY -n 5 --fee-reserve 30
"""
import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from src.walletfarm.auth.envelope import EnvelopeEncryptor
from src.walletfarm.auth.secrets import HexSecretHandle
from src.walletfarm.config import PlatformSettings, RunConfig
from src.walletfarm.errors import WalletFarmError
from src.walletfarm.pipeline.runner import FarmRunner
from src.walletfarm.platform.circle_client import CirclePlatformClient
from src.walletfarm.platform.public_key import PublicKeyProvider
from src.walletfarm.utils.logger import register_secret, setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Provision testnet wallets, fund them from the faucet "
                    "and sweep the balances to one address.",
    )
    parser.add_argument(
        "--dest", type=str, default="",
        help="Destination address where to send crypto (mandatory)",
    )
    parser.add_argument(
        "-n", "--wallets", type=int, default=1,
        help="Number of intermediate wallets to create. Directly affects "
             "how much crypto is farmed in a single run",
    )
    parser.add_argument(
        "--blockchain", type=str, default="",
        help="Blockchain tag (mandatory). Examples: MATIC-AMOY, ETH-SEPOLIA",
    )
    parser.add_argument(
        "--fee-reserve", type=int, default=20,
        help="Percent of the native balance kept in each wallet for fees",
    )
    parser.add_argument(
        "--poll-interval", type=float, default=5,
        help="Seconds between balance checks",
    )
    parser.add_argument(
        "--max-poll-attempts", type=int, default=None,
        help="Give up on a wallet after this many balance checks "
             "(default: wait forever)",
    )
    parser.add_argument(
        "--balance-timeout", type=float, default=None,
        help="Give up on a wallet after waiting this many seconds "
             "(default: wait forever)",
    )
    parser.add_argument(
        "--log-dir", type=str, default="logs",
        help="Directory for rotated log files",
    )
    parser.add_argument(
        "--log-level", type=str.upper, default="INFO",
        choices=["DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"],
        help="Minimum level printed to the terminal",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logger(args.log_dir, args.log_level)
    load_dotenv()

    try:
        config = RunConfig.build(
            destination_address=args.dest,
            wallet_count=args.wallets,
            blockchain=args.blockchain,
            native_fee_reserve_percent=args.fee_reserve,
            balance_poll_interval_seconds=args.poll_interval,
            max_poll_attempts=args.max_poll_attempts,
            balance_timeout_seconds=args.balance_timeout,
        )
        settings = PlatformSettings.from_env()
        register_secret(settings.entity_secret_hex)
        register_secret(settings.api_key)

        with CirclePlatformClient.from_settings(settings) as client:
            public_key = PublicKeyProvider(
                client, settings.public_key_pem,
            ).get_public_key()
            encryptor = EnvelopeEncryptor(
                HexSecretHandle(settings.entity_secret_hex), public_key,
            )

            report = FarmRunner(config, client, encryptor).run()

        logger.success("-" * 30)
        logger.success(f"WalletSet id: {report.wallet_set.id}")
        for transfer in report.transfers:
            logger.success(
                f"{transfer.wallet_id}: {transfer.amount} {transfer.symbol} "
                f"-> {transfer.destination}"
            )
        logger.success("-" * 30)
        return 0

    except WalletFarmError as e:
        logger.critical(f"Run aborted: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Wallets already funded are not swept.")
        return 130
    except Exception as e:
        logger.exception(f"Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
