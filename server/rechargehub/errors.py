from __future__ import annotations
from typing import Optional


class CryptoError(Exception):
    """Base class for signing and credential cipher failures."""


class ConfigurationError(CryptoError):
    """Key material, client id or master secret is missing or unusable.

    Fatal for the calling operation; retrying will not help until the
    deployment configuration is fixed.
    """


class SigningError(CryptoError):
    pass


class EncryptionError(CryptoError):
    pass


class DecryptionError(CryptoError):
    MALFORMED = "malformed"
    AUTHENTICATION = "authentication"

    def __init__(self, msg: str, reason: Optional[str] = None):
        super().__init__(msg)
        self.reason = reason
