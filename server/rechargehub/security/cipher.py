from __future__ import annotations
import base64
import binascii
import hashlib
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..errors import ConfigurationError, DecryptionError, EncryptionError


logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 12
TAG_LENGTH = 16
SALT_LENGTH = 16
ITERATIONS = 100000
# Shared by encrypt and decrypt; changing it orphans every stored envelope
AAD = b"bravive-token"


def derive_key(master_secret: Optional[str]) -> bytes:
    """PBKDF2-HMAC-SHA256 with a salt taken from the secret's own SHA-256.

    The salt is deterministic so the same secret always yields the same key
    and nothing besides the secret has to be stored.
    """
    if not master_secret:
        raise ConfigurationError("ENCRYPTION_KEY is not configured")
    secret = master_secret.encode("utf-8")
    salt = hashlib.sha256(secret).digest()[:SALT_LENGTH]
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=KEY_LENGTH, salt=salt, iterations=ITERATIONS)
    return kdf.derive(secret)


class CryptoService:
    """AES-256-GCM protection for provider tokens stored at rest.

    Envelope layout is ``base64(iv[12] || tag[16] || ciphertext)``. ``None`` and
    ``""`` pass through both directions untouched.
    """

    def __init__(self, master_secret: Optional[str], cache_key: bool = False):
        self._master_secret = master_secret
        self._cache_key = cache_key
        self._key: Optional[bytes] = None

    def _get_key(self) -> bytes:
        if self._key is not None:
            return self._key
        key = derive_key(self._master_secret)
        if self._cache_key:
            self._key = key
        return key

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        if not plaintext:
            return plaintext
        if not isinstance(plaintext, str):
            raise EncryptionError("Failed to encrypt data: plaintext must be a string")
        key = self._get_key()
        try:
            iv = os.urandom(IV_LENGTH)
            sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), AAD)
        except Exception as e:
            logger.error("Encryption failed: %s", e)
            raise EncryptionError(f"Failed to encrypt data: {e}") from e
        # AESGCM appends the tag; stored layout puts it right after the IV
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return base64.b64encode(iv + tag + ciphertext).decode("ascii")

    def decrypt(self, envelope: Optional[str]) -> Optional[str]:
        if not envelope:
            return envelope
        try:
            combined = base64.b64decode(envelope, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error("Decryption failed: malformed envelope")
            raise DecryptionError(
                f"Failed to decrypt data: envelope is not valid base64 ({e})",
                reason=DecryptionError.MALFORMED,
            ) from e
        if len(combined) < IV_LENGTH + TAG_LENGTH:
            logger.error("Decryption failed: envelope too short (%d bytes)", len(combined))
            raise DecryptionError(
                f"Failed to decrypt data: envelope is {len(combined)} bytes, "
                f"expected at least {IV_LENGTH + TAG_LENGTH}",
                reason=DecryptionError.MALFORMED,
            )
        iv = combined[:IV_LENGTH]
        tag = combined[IV_LENGTH:IV_LENGTH + TAG_LENGTH]
        ciphertext = combined[IV_LENGTH + TAG_LENGTH:]
        key = self._get_key()
        try:
            plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, AAD)
            return plaintext.decode("utf-8")
        except InvalidTag as e:
            logger.error("Decryption failed: authentication tag mismatch")
            raise DecryptionError(
                "Failed to decrypt data: authentication failed. "
                "Token may be corrupted or encrypted with different key.",
                reason=DecryptionError.AUTHENTICATION,
            ) from e
        except Exception as e:
            logger.error("Decryption failed: %s", e)
            raise DecryptionError(f"Failed to decrypt data: {e}") from e
