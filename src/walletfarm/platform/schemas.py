"""
Pydantic records exchanged with the wallet platform.

Field names are snake_case in Python and camelCase on the wire
(``alias_generator=to_camel``).  All records are frozen: once a stage has
produced a ``Wallet`` or ``TokenBalance`` nobody mutates it, later stages
derive new values instead.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlatformModel(BaseModel):
    """Common config: camelCase aliases, unknown fields ignored, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class WalletSet(PlatformModel):
    """Named group of wallets created together in one run."""

    id: str
    name: Optional[str] = None
    custody_type: Optional[str] = None
    create_date: Optional[str] = None
    update_date: Optional[str] = None


class Wallet(PlatformModel):
    """A custodial wallet on a single blockchain."""

    id: str
    address: str
    blockchain: str
    state: Optional[str] = None
    wallet_set_id: Optional[str] = None
    custody_type: Optional[str] = None
    account_type: Optional[str] = None
    create_date: Optional[str] = None
    update_date: Optional[str] = None


class Token(PlatformModel):
    id: str
    symbol: Optional[str] = None
    name: Optional[str] = None
    blockchain: Optional[str] = None
    decimals: Optional[int] = None
    is_native: bool = False


class TokenBalance(PlatformModel):
    """Balance of one token, as a decimal string exactly as the platform sent it."""

    token: Token
    amount: str = Field(..., description="Decimal string, e.g. '1.000000'")

    @property
    def label(self) -> str:
        return self.token.symbol or self.token.id


# ---------------------------------------------------------------------------
# Response envelopes ({"data": {...}})
# ---------------------------------------------------------------------------

class _WalletSetData(PlatformModel):
    wallet_set: WalletSet


class WalletSetResponse(PlatformModel):
    data: _WalletSetData


class _WalletsData(PlatformModel):
    wallets: List[Wallet]


class WalletsResponse(PlatformModel):
    data: _WalletsData


class _BalancesData(PlatformModel):
    token_balances: List[TokenBalance] = Field(default_factory=list)


class BalancesResponse(PlatformModel):
    data: _BalancesData


class _PublicKeyData(PlatformModel):
    public_key: str


class PublicKeyResponse(PlatformModel):
    data: _PublicKeyData
