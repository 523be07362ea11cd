from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import DEFAULT_BRAVIVE_BASE_URL
from ..security.cipher import CryptoService
from .errors import ProviderError


logger = logging.getLogger(__name__)


class BraviveHTTP:
    """Bearer-token transport for the payment provider.

    Stores keep their API token encrypted; it is decrypted per call and never
    held on the instance.
    """

    def __init__(self, cipher: CryptoService, base_url: str = DEFAULT_BRAVIVE_BASE_URL, timeout: float = 10.0):
        self.cipher = cipher
        self.base_url = (base_url or DEFAULT_BRAVIVE_BASE_URL).rstrip("/")
        self._client = httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings) -> "BraviveHTTP":
        return cls(settings.crypto_service(), base_url=settings.bravive_base_url, timeout=settings.http_timeout)

    def close(self) -> None:
        self._client.close()

    def seal_token(self, token: str) -> str:
        """Encrypt a raw API token for storage."""
        if not token:
            raise ValueError("Bravive API token must not be empty")
        return self.cipher.encrypt(token)

    def _headers(self, encrypted_token: str) -> Dict[str, str]:
        token = self.cipher.decrypt(encrypted_token)
        if not token:
            raise ProviderError(code=-1, msg="Bravive API token is not configured for this store", http_status=400)
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def post(self, endpoint: str, data: Dict[str, Any], encrypted_token: str) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = self._headers(encrypted_token)
        logger.debug("POST %s", url)
        try:
            resp = self._client.post(url, json=data, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            self._raise(e, "POST", url)
        return self._json(resp, url)

    def get(self, endpoint: str, encrypted_token: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = self._headers(encrypted_token)
        logger.debug("GET %s", url)
        try:
            resp = self._client.get(url, headers=headers, params=params)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            self._raise(e, "GET", url)
        return self._json(resp, url)

    def _json(self, resp: httpx.Response, url: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            logger.error("%s returned a non-JSON body", url)
            raise ProviderError(code=-1, msg="Bravive API Error: invalid response", http_status=502) from e

    def _raise(self, error: httpx.HTTPError, method: str, url: str):
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            reason = error.response.reason_phrase or str(error)
            logger.error("%s %s failed: %s %s", method, url, status, reason)
            raise ProviderError(code=status, msg=f"Bravive API Error ({status}): {reason}", http_status=502) from error
        logger.error("%s %s failed: %s", method, url, error)
        raise ProviderError(code=-1, msg=f"Bravive network error: {error}", http_status=503) from error
