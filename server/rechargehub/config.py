from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


MIN_ENCRYPTION_KEY_LENGTH = 32
DEFAULT_BIGO_HOST = "https://oauth.bigolive.tv"
DEFAULT_BRAVIVE_BASE_URL = "https://app.bravive.com/api/v1"


def load_env_file() -> None:
    # Load server/.env explicitly so startup does not depend on the working directory
    base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    env_path = os.path.join(base_dir, ".env")
    if os.path.exists(env_path):
        load_dotenv(env_path)
    else:
        load_dotenv()


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    encryption_key: Optional[str] = None
    bigo_client_id: Optional[str] = None
    bigo_private_key: Optional[str] = None
    bigo_client_version: str = "0"
    bigo_host_domain: str = DEFAULT_BIGO_HOST
    bigo_host_backup_domain: Optional[str] = None
    bravive_base_url: str = DEFAULT_BRAVIVE_BASE_URL
    http_timeout: float = 10.0
    http_retries: int = 2
    http_backoff_ms: float = 200.0

    @classmethod
    def from_env(cls, load_file: bool = True) -> "Settings":
        """Read process-wide settings once at startup.

        Values are copied out of the environment; nothing downstream reads
        ``os.environ`` again.
        """
        if load_file:
            load_env_file()
        return cls(
            encryption_key=os.getenv("ENCRYPTION_KEY") or None,
            bigo_client_id=os.getenv("BIGO_CLIENT_ID") or None,
            bigo_private_key=os.getenv("BIGO_PRIVATE_KEY") or None,
            bigo_client_version=os.getenv("BIGO_CLIENT_VERSION") or "0",
            bigo_host_domain=os.getenv("BIGO_HOST_DOMAIN") or DEFAULT_BIGO_HOST,
            bigo_host_backup_domain=os.getenv("BIGO_HOST_BACKUP_DOMAIN") or None,
            bravive_base_url=os.getenv("BRAVIVE_BASE_URL") or DEFAULT_BRAVIVE_BASE_URL,
            http_timeout=_float_env("PROVIDER_HTTP_TIMEOUT", 10.0),
            http_retries=_int_env("PROVIDER_HTTP_RETRIES", 2),
            http_backoff_ms=_float_env("PROVIDER_HTTP_BACKOFF_MS", 200.0),
        )

    def require_encryption_key(self) -> str:
        key = self.encryption_key
        if not key:
            raise ConfigurationError("ENCRYPTION_KEY is not configured")
        if len(key) < MIN_ENCRYPTION_KEY_LENGTH:
            raise ConfigurationError(
                f"ENCRYPTION_KEY must be at least {MIN_ENCRYPTION_KEY_LENGTH} characters"
            )
        return key

    def signature_service(self):
        from .security.signature import BigoSignatureService

        return BigoSignatureService(
            client_id=self.bigo_client_id,
            private_key=self.bigo_private_key,
            client_version=self.bigo_client_version,
        )

    def crypto_service(self):
        from .security.cipher import CryptoService

        return CryptoService(self.require_encryption_key())
