"""
Balance observation.

Faucet drips land asynchronously, so after funding a wallet the pipeline
polls its balances until the list is non-empty:

    POLLING --(empty list)--> sleep --> POLLING
    POLLING --(non-empty)---> READY

A failed balance query propagates immediately.  By default polling is
unbounded, exactly like the run always behaved; ``max_attempts``,
``timeout_seconds`` and a ``threading.Event`` cancellation signal can bound
it, surfacing ``BalanceTimeoutError`` / ``PollCancelledError``.
"""
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

from loguru import logger

from src.walletfarm.config import RunConfig
from src.walletfarm.errors import BalanceTimeoutError, PollCancelledError
from src.walletfarm.platform.base import WalletPlatformClient
from src.walletfarm.platform.schemas import TokenBalance, Wallet


class PollState(str, Enum):
    POLLING = "POLLING"
    READY = "READY"


class BalanceObserver:
    """Blocks until a wallet reports at least one token balance."""

    def __init__(
        self,
        client: WalletPlatformClient,
        poll_interval_seconds: float,
        max_attempts: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            client: Platform client used for balance queries.
            poll_interval_seconds: Sleep between two empty queries.
            max_attempts: Maximum number of queries, ``None`` for unbounded.
            timeout_seconds: Wall-clock budget per wallet, ``None`` for
                             unbounded.
            cancel_event: Setting this event aborts the wait promptly.
            clock: Monotonic time source (injectable for tests).
        """
        self.client = client
        self.poll_interval = poll_interval_seconds
        self.max_attempts = max_attempts
        self.timeout_seconds = timeout_seconds
        self.cancel_event = cancel_event or threading.Event()
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        client: WalletPlatformClient,
        config: RunConfig,
        cancel_event: Optional[threading.Event] = None,
    ) -> "BalanceObserver":
        return cls(
            client=client,
            poll_interval_seconds=config.balance_poll_interval_seconds,
            max_attempts=config.max_poll_attempts,
            timeout_seconds=config.balance_timeout_seconds,
            cancel_event=cancel_event,
        )

    def await_balances(self, wallet: Wallet) -> List[TokenBalance]:
        """Poll *wallet* until its balance list is non-empty and return it.

        Raises:
            PlatformError: If a balance query fails.
            BalanceTimeoutError: If the attempt or time budget runs out.
            PollCancelledError: If ``cancel_event`` is set while waiting.
        """
        deadline = None
        if self.timeout_seconds is not None:
            deadline = self._clock() + self.timeout_seconds

        state = PollState.POLLING
        attempts = 0
        balances: List[TokenBalance] = []

        while state is PollState.POLLING:
            if self.cancel_event.is_set():
                raise PollCancelledError(
                    f"Balance polling for wallet {wallet.id} was cancelled"
                )

            attempts += 1
            balances = self.client.get_wallet_balances(wallet.id)

            if balances:
                state = PollState.READY
                continue

            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise BalanceTimeoutError(
                    f"No balance for wallet {wallet.id} after {attempts} attempts"
                )
            if deadline is not None and self._clock() + self.poll_interval > deadline:
                raise BalanceTimeoutError(
                    f"No balance for wallet {wallet.id} within "
                    f"{self.timeout_seconds}s"
                )

            logger.info(
                f"Waiting {self.poll_interval:g}s for wallet {wallet.id} "
                f"balance to update (attempt {attempts})"
            )
            # Event.wait doubles as an interruptible sleep.
            self.cancel_event.wait(self.poll_interval)

        logger.success(
            f"Wallet {wallet.id} funded with {len(balances)} token(s) "
            f"after {attempts} attempt(s)"
        )
        return balances
