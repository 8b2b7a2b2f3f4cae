"""
Entity-secret envelope encryption.

Every state-mutating platform call carries ``entitySecretCipherText``: the
32-byte entity secret encrypted with RSA-OAEP (SHA-256 for both the digest
and MGF1, no label) under the platform's public key, then base64-encoded.

OAEP draws fresh random padding from the OS CSPRNG on every call, so two
envelopes for the same secret and key are never bit-identical.  An envelope
must be generated immediately before the request that carries it and never
cached: the platform treats envelope + idempotency key as one distinct
authorised intent.
"""
import base64
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from loguru import logger

from src.walletfarm.auth.secrets import SecretHandle, validate_entity_secret
from src.walletfarm.errors import CryptoError

OAEP_SHA256 = padding.OAEP(
    mgf=padding.MGF1(algorithm=hashes.SHA256()),
    algorithm=hashes.SHA256(),
    label=None,
)


def parse_rsa_public_key(public_key_pem: Union[str, bytes]) -> rsa.RSAPublicKey:
    """Load a PEM-encoded SubjectPublicKeyInfo and require it to be RSA.

    Raises:
        CryptoError: If the PEM is malformed or holds a non-RSA key.
    """
    if isinstance(public_key_pem, str):
        public_key_pem = public_key_pem.encode("utf-8")

    try:
        key = serialization.load_pem_public_key(public_key_pem)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"Failed to parse PEM block containing the key: {e}") from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise CryptoError(f"Key type is not RSA: {type(key).__name__}")

    return key


class EnvelopeEncryptor:
    """Produces one-time ``entitySecretCipherText`` values."""

    def __init__(self, secret: SecretHandle, public_key_pem: Union[str, bytes]):
        """
        Args:
            secret: Handle to the long-lived 32-byte entity secret.
            public_key_pem: Platform RSA public key, PEM-encoded.

        Raises:
            EntitySecretError: If the secret is undecodable or not 32 bytes.
            CryptoError: If the public key cannot be parsed as RSA.
        """
        validate_entity_secret(secret.reveal())
        self._secret = secret
        self._public_key = parse_rsa_public_key(public_key_pem)
        logger.debug(
            f"Envelope encryptor ready (RSA-{self._public_key.key_size})"
        )

    def generate_envelope(self) -> str:
        """Encrypt the entity secret into a fresh base64 ciphertext.

        Returns:
            Base64 (standard alphabet, padded) RSA-OAEP ciphertext.

        Raises:
            EntitySecretError: If the secret is undecodable or not 32 bytes.
            CryptoError: If encryption itself fails.
        """
        plaintext = validate_entity_secret(self._secret.reveal())

        try:
            ciphertext = self._public_key.encrypt(plaintext, OAEP_SHA256)
        except ValueError as e:
            raise CryptoError(f"Envelope encryption failed: {e}") from e

        return base64.b64encode(ciphertext).decode("ascii")
