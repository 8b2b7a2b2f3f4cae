"""
Sweep planning and execution.

Balances are first partitioned into native and non-native tokens, then each
class gets its own amount rule:

  - **Native** (pays the transaction fees): send
    ``amount − amount × reserve% / 100`` and leave the rest behind as a fee
    buffer.  The result is rounded toward zero at the observed balance's
    precision (or the token's ``decimals`` if coarser), so the buffer is
    never undercut.
  - **Non-native**: send the observed amount string unchanged.

Non-native tokens are transferred before the native one so that fees for
their transfers are still covered by the full native balance.  Amounts are
handled with ``decimal.Decimal``; floats never touch a balance.
"""
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict

from src.walletfarm.auth.envelope import EnvelopeEncryptor
from src.walletfarm.auth.idempotency import new_idempotency_key
from src.walletfarm.errors import ConfigurationError, DecodeError
from src.walletfarm.platform.base import WalletPlatformClient
from src.walletfarm.platform.schemas import TokenBalance, Wallet

HUNDRED = Decimal(100)


class SweepPlanItem(BaseModel):
    """A single planned transfer."""

    model_config = ConfigDict(frozen=True)

    token_id: str
    symbol: str
    is_native: bool
    observed_amount: str
    amount: str
    destination: str

    @property
    def is_empty(self) -> bool:
        return Decimal(self.amount) == 0


class TransferRecord(BaseModel):
    """Outcome of an executed transfer, for the run report."""

    model_config = ConfigDict(frozen=True)

    wallet_id: str
    token_id: str
    symbol: str
    amount: str
    destination: str
    accepted: bool


def _check_amount(balance: TokenBalance) -> None:
    """Reject amounts that are not finite, non-negative decimals."""
    try:
        value = Decimal(balance.amount)
    except InvalidOperation:
        raise DecodeError(
            "get_wallet_balances", balance.amount,
            f"token {balance.label} has a non-decimal amount",
        ) from None
    if not value.is_finite() or value < 0:
        raise DecodeError(
            "get_wallet_balances", balance.amount,
            f"token {balance.label} has an invalid amount",
        )


def _format_amount(value: Decimal) -> str:
    # Fixed-point only: the platform does not accept exponent notation.
    return format(value, "f")


def native_send_amount(
    observed: str,
    fee_reserve_percent: int,
    decimals: Optional[int] = None,
) -> str:
    """Native amount to sweep once *fee_reserve_percent* is kept back.

    The result is rounded toward zero at the observed balance's own
    precision, or at the token's *decimals* when that is coarser, so the
    fee buffer is never undercut.

    >>> native_send_amount("1.000000", 20)
    '0.800000'
    """
    balance = Decimal(observed)
    places = max(-balance.as_tuple().exponent, 0)
    if decimals is not None:
        places = min(places, decimals)
    send = balance - balance * Decimal(fee_reserve_percent) / HUNDRED
    send = send.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)
    return _format_amount(send)


def partition_balances(
    balances: Sequence[TokenBalance],
) -> Tuple[List[TokenBalance], List[TokenBalance]]:
    """Split *balances* into ``(native, non_native)`` preserving input order."""
    native = [b for b in balances if b.token.is_native]
    non_native = [b for b in balances if not b.token.is_native]
    return native, non_native


class SweepPlanner:
    """Turns observed balances into transfer plans."""

    def __init__(self, fee_reserve_percent: int):
        if not 0 <= fee_reserve_percent <= 100:
            raise ConfigurationError(
                f"fee_reserve_percent must be within [0, 100], got {fee_reserve_percent}"
            )
        self.fee_reserve_percent = fee_reserve_percent

    def plan(
        self,
        balances: Sequence[TokenBalance],
        destination: str,
    ) -> List[SweepPlanItem]:
        """Return one plan item per balance, non-native tokens first.

        Raises:
            DecodeError: If a balance amount is not a non-negative decimal.
        """
        native, non_native = partition_balances(balances)

        if len(native) != 1:
            logger.warning(
                f"Expected exactly one native token balance, got {len(native)}"
            )

        items: List[SweepPlanItem] = []
        seen = set()

        for balance in non_native + native:
            if balance.token.id in seen:
                logger.warning(f"Duplicate balance for token {balance.label}, skipped")
                continue
            seen.add(balance.token.id)

            _check_amount(balance)
            if balance.token.is_native:
                amount = native_send_amount(
                    balance.amount,
                    self.fee_reserve_percent,
                    balance.token.decimals,
                )
            else:
                amount = balance.amount

            items.append(SweepPlanItem(
                token_id=balance.token.id,
                symbol=balance.label,
                is_native=balance.token.is_native,
                observed_amount=balance.amount,
                amount=amount,
                destination=destination,
            ))

        return items


class SweepExecutor:
    """Issues one transfer per plan item, each with a fresh key and envelope."""

    def __init__(
        self,
        client: WalletPlatformClient,
        encryptor: EnvelopeEncryptor,
        key_factory: Callable[[], str] = new_idempotency_key,
    ):
        self.client = client
        self.encryptor = encryptor
        self.key_factory = key_factory

    def execute(
        self,
        wallet: Wallet,
        plan: Sequence[SweepPlanItem],
    ) -> List[TransferRecord]:
        """Execute *plan* for *wallet* in order.

        Zero amounts are skipped (a 100 % reserve leaves nothing to send).

        Raises:
            PlatformError: On the first rejected transfer; earlier transfers
                           are not rolled back.
        """
        records: List[TransferRecord] = []

        for item in plan:
            if item.is_empty:
                logger.warning(
                    f"Nothing to send for {item.symbol} in wallet {wallet.id}, skipped"
                )
                continue

            accepted = self.client.make_transfer(
                idempotency_key=self.key_factory(),
                cipher_text=self.encryptor.generate_envelope(),
                wallet_id=wallet.id,
                token_id=item.token_id,
                amount=item.amount,
                destination=item.destination,
            )
            logger.success(
                f"Sending {item.amount} : {item.symbol} to {item.destination}. "
                f"Success: {accepted}"
            )
            records.append(TransferRecord(
                wallet_id=wallet.id,
                token_id=item.token_id,
                symbol=item.symbol,
                amount=item.amount,
                destination=item.destination,
                accepted=accepted,
            ))

        return records
