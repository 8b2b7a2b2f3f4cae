"""Shared fixtures: a throwaway RSA key pair and an in-memory platform."""
from typing import Dict, List, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from src.walletfarm.auth.envelope import EnvelopeEncryptor
from src.walletfarm.auth.secrets import BytesSecretHandle
from src.walletfarm.errors import PlatformError
from src.walletfarm.platform.base import WalletPlatformClient
from src.walletfarm.platform.schemas import Token, TokenBalance, Wallet, WalletSet

ENTITY_SECRET = bytes(range(32))


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_key_pem(rsa_private_key) -> str:
    return rsa_private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


@pytest.fixture
def encryptor(public_key_pem) -> EnvelopeEncryptor:
    return EnvelopeEncryptor(BytesSecretHandle(ENTITY_SECRET), public_key_pem)


def make_balance(
    token_id: str,
    amount: str,
    is_native: bool = False,
    symbol: Optional[str] = None,
    decimals: Optional[int] = None,
) -> TokenBalance:
    return TokenBalance(
        token=Token(
            id=token_id,
            symbol=symbol or token_id,
            is_native=is_native,
            decimals=decimals,
        ),
        amount=amount,
    )


class FakePlatformClient(WalletPlatformClient):
    """Records every call; balance answers are scripted per wallet."""

    def __init__(
        self,
        wallets: Optional[List[Wallet]] = None,
        balance_script: Optional[Dict[str, List[List[TokenBalance]]]] = None,
        fail_transfer_for: Optional[str] = None,
    ):
        self.wallets = wallets or []
        self.balance_script = balance_script or {}
        self.fail_transfer_for = fail_transfer_for
        self.calls: List[tuple] = []
        self.transfers: List[dict] = []
        self.balance_queries: Dict[str, int] = {}

    def create_wallet_set(self, idempotency_key, cipher_text, name):
        self.calls.append(("create_wallet_set", idempotency_key, cipher_text, name))
        return WalletSet(id="ws-1", name=name)

    def create_wallets(self, idempotency_key, cipher_text, wallet_set_id, blockchain, count):
        self.calls.append(
            ("create_wallets", idempotency_key, cipher_text, wallet_set_id, blockchain, count)
        )
        return list(self.wallets[:count])

    def fund_address(self, address, blockchain):
        self.calls.append(("fund_address", address, blockchain))
        return True

    def get_wallet_balances(self, wallet_id):
        self.balance_queries[wallet_id] = self.balance_queries.get(wallet_id, 0) + 1
        script = self.balance_script.get(wallet_id, [])
        index = self.balance_queries[wallet_id] - 1
        return script[min(index, len(script) - 1)] if script else []

    def make_transfer(self, idempotency_key, cipher_text, wallet_id, token_id, amount, destination):
        if token_id == self.fail_transfer_for:
            raise PlatformError("make_transfer", 400, '{"message":"insufficient funds"}')
        transfer = {
            "idempotency_key": idempotency_key,
            "cipher_text": cipher_text,
            "wallet_id": wallet_id,
            "token_id": token_id,
            "amount": amount,
            "destination": destination,
        }
        self.transfers.append(transfer)
        self.calls.append(("make_transfer", transfer))
        return True

    def get_public_key(self):
        self.calls.append(("get_public_key",))
        return "-----BEGIN PUBLIC KEY-----\nfetched\n-----END PUBLIC KEY-----\n"
