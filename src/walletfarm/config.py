"""
Run configuration and platform credentials.

Two immutable Pydantic models are built once at startup and passed
explicitly to every component that needs them:

  - ``RunConfig``: what this run should do (destination, wallet count,
    chain, fee reserve, polling budget).
  - ``PlatformSettings``: how to reach and authenticate against the wallet
    platform, read from the process environment (``.env`` is loaded by
    ``main.py`` through python-dotenv).

Validation failures, including an entity secret that is not 32 hex-encoded
bytes, are re-raised as ``ConfigurationError`` so the run aborts before
any network call.
"""
import os
from typing import Mapping, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.walletfarm.auth.secrets import HexSecretHandle, validate_entity_secret
from src.walletfarm.errors import ConfigurationError, EntitySecretError

DEFAULT_API_URL = "https://api.circle.com/v1"


class RunConfig(BaseModel):
    """Options for a single provisioning/funding/sweep run."""

    model_config = ConfigDict(frozen=True)

    destination_address: str = Field(
        ..., description="Address that receives every swept balance",
    )
    wallet_count: int = Field(
        1, ge=1,
        description="Number of intermediate wallets to create",
    )
    blockchain: str = Field(
        ..., description="Platform blockchain tag, e.g. ETH-SEPOLIA",
    )
    native_fee_reserve_percent: int = Field(
        20, ge=0, le=100,
        description="Share of the native balance left behind for fees",
    )
    balance_poll_interval_seconds: float = Field(
        5, gt=0,
        description="Sleep between two balance queries",
    )
    max_poll_attempts: Optional[int] = Field(
        None, ge=1,
        description="Give up after this many balance queries (None = never)",
    )
    balance_timeout_seconds: Optional[float] = Field(
        None, gt=0,
        description="Give up after waiting this long for balances (None = never)",
    )

    @field_validator("destination_address", "blockchain")
    @classmethod
    def must_not_be_blank(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            raise ValueError(
                f"{info.field_name} is a mandatory parameter and can't be empty"
            )
        return v

    @classmethod
    def build(cls, **values) -> "RunConfig":
        """Validate *values* into a ``RunConfig``.

        Raises:
            ConfigurationError: If a mandatory option is missing or any
                                option is out of range.
        """
        try:
            return cls(**values)
        except ValidationError as e:
            logger.critical(f"Invalid run configuration: {e}")
            raise ConfigurationError(str(e)) from e


class PlatformSettings(BaseModel):
    """Credentials and endpoint of the wallet-as-a-service platform.

    ``entity_secret_hex`` is excluded from ``repr`` so it never ends up in a
    log line or traceback.
    """

    model_config = ConfigDict(frozen=True)

    api_url: str = DEFAULT_API_URL
    api_key: str = Field(..., min_length=1, repr=False)
    entity_secret_hex: str = Field(..., min_length=1, repr=False)
    public_key_pem: Optional[str] = Field(None, repr=False)
    http_timeout_seconds: float = Field(30.0, gt=0)

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("entity_secret_hex")
    @classmethod
    def entity_secret_must_be_32_bytes(cls, v: str) -> str:
        try:
            validate_entity_secret(HexSecretHandle(v).reveal())
        except EntitySecretError as e:
            raise ValueError(str(e)) from None
        return v.strip()

    @field_validator("public_key_pem")
    @classmethod
    def unescape_newlines(cls, v: Optional[str]) -> Optional[str]:
        # Single-line .env values carry the PEM with literal "\n" escapes.
        return v.replace("\\n", "\n") if v else v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PlatformSettings":
        """Read settings from *environ* (defaults to ``os.environ``).

        Recognised variables: ``CIRCLE_API_URL``, ``API_KEY``,
        ``ENTITY_SECRET``, ``PUBLIC_KEY``, ``HTTP_TIMEOUT_SECONDS``.

        Raises:
            ConfigurationError: If ``API_KEY`` or ``ENTITY_SECRET`` is unset.
        """
        env = os.environ if environ is None else environ

        missing = [name for name in ("API_KEY", "ENTITY_SECRET") if not env.get(name)]
        if missing:
            logger.critical(f"Missing mandatory environment variables: {missing}")
            raise ConfigurationError(
                f"Missing mandatory environment variables: {', '.join(missing)}"
            )

        values = {
            "api_url": env.get("CIRCLE_API_URL") or DEFAULT_API_URL,
            "api_key": env["API_KEY"],
            "entity_secret_hex": env["ENTITY_SECRET"],
            "public_key_pem": env.get("PUBLIC_KEY") or None,
        }
        if env.get("HTTP_TIMEOUT_SECONDS"):
            values["http_timeout_seconds"] = env["HTTP_TIMEOUT_SECONDS"]

        try:
            return cls(**values)
        except ValidationError as e:
            # Error text is built from locations only; inputs may hold secrets.
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid platform settings: {problems}") from None
