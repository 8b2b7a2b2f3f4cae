"""
HTTP/JSON client for Circle's developer-controlled wallets API.

Thin synchronous wrapper over ``httpx.Client``: builds the request bodies,
checks the status code, and validates the JSON body against the Pydantic
response models.  Non-2xx responses and transport failures become
``PlatformError`` (carrying the raw body), malformed bodies become
``DecodeError``.  No retries are attempted here.
"""
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from src.walletfarm.config import PlatformSettings
from src.walletfarm.errors import DecodeError, PlatformError
from src.walletfarm.platform.base import WalletPlatformClient
from src.walletfarm.platform.schemas import (
    BalancesResponse,
    PublicKeyResponse,
    TokenBalance,
    Wallet,
    WalletSet,
    WalletSetResponse,
    WalletsResponse,
)

T = TypeVar("T", bound=BaseModel)

TRANSFER_FEE_LEVEL = "MEDIUM"


class CirclePlatformClient(WalletPlatformClient):
    """``WalletPlatformClient`` backed by the Circle REST API."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            api_url: Base URL including the version prefix,
                     e.g. ``https://api.circle.com/v1``.
            api_key: Bearer token for the ``Authorization`` header.
            timeout: Per-request timeout in seconds.
            transport: Optional custom transport (tests pass
                       ``httpx.MockTransport``).
        """
        self._http = httpx.Client(
            base_url=api_url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: PlatformSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "CirclePlatformClient":
        return cls(
            api_url=settings.api_url,
            api_key=settings.api_key,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CirclePlatformClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request and fail with ``PlatformError`` unless it is 2xx."""
        logger.debug(f"{operation}: {method} {path}")
        try:
            response = self._http.request(method, path, json=json_body)
        except httpx.HTTPError as e:
            raise PlatformError(operation, None, str(e)) from e

        if not response.is_success:
            logger.error(
                f"{operation} rejected with HTTP {response.status_code}: "
                f"{response.text}"
            )
            raise PlatformError(operation, response.status_code, response.text)

        return response

    @staticmethod
    def _decode(operation: str, response: httpx.Response, model: Type[T]) -> T:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise DecodeError(operation, response.text, str(e)) from e

    # ------------------------------------------------------------------
    # WalletPlatformClient
    # ------------------------------------------------------------------

    def get_public_key(self) -> str:
        operation = "get_public_key"
        response = self._request(operation, "GET", "/w3s/config/entity/publicKey")
        return self._decode(operation, response, PublicKeyResponse).data.public_key

    def create_wallet_set(
        self,
        idempotency_key: str,
        cipher_text: str,
        name: str,
    ) -> WalletSet:
        operation = "create_wallet_set"
        response = self._request(
            operation, "POST", "/w3s/developer/walletSets",
            json_body={
                "idempotencyKey": idempotency_key,
                "entitySecretCipherText": cipher_text,
                "name": name,
            },
        )
        return self._decode(operation, response, WalletSetResponse).data.wallet_set

    def create_wallets(
        self,
        idempotency_key: str,
        cipher_text: str,
        wallet_set_id: str,
        blockchain: str,
        count: int,
    ) -> List[Wallet]:
        operation = "create_wallets"
        response = self._request(
            operation, "POST", "/w3s/developer/wallets",
            json_body={
                "idempotencyKey": idempotency_key,
                "entitySecretCipherText": cipher_text,
                "blockchains": [blockchain],
                "count": count,
                "walletSetId": wallet_set_id,
            },
        )
        return self._decode(operation, response, WalletsResponse).data.wallets

    def fund_address(self, address: str, blockchain: str) -> bool:
        # The faucet answers 204 No Content; any 2xx counts as accepted.
        self._request(
            "fund_address", "POST", "/faucet/drips",
            json_body={
                "address": address,
                "blockchain": blockchain,
                "native": True,
                "usdc": True,
                "eurc": True,
            },
        )
        return True

    def get_wallet_balances(self, wallet_id: str) -> List[TokenBalance]:
        operation = "get_wallet_balances"
        response = self._request(
            operation, "GET", f"/w3s/wallets/{wallet_id}/balances",
        )
        return self._decode(operation, response, BalancesResponse).data.token_balances

    def make_transfer(
        self,
        idempotency_key: str,
        cipher_text: str,
        wallet_id: str,
        token_id: str,
        amount: str,
        destination: str,
    ) -> bool:
        self._request(
            "make_transfer", "POST", "/w3s/developer/transactions/transfer",
            json_body={
                "idempotencyKey": idempotency_key,
                "entitySecretCipherText": cipher_text,
                "amounts": [amount],
                "feeLevel": TRANSFER_FEE_LEVEL,
                "tokenId": token_id,
                "walletId": wallet_id,
                "destinationAddress": destination,
            },
        )
        return True
