from __future__ import annotations
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..models.dto import BigoEnvelope
from ..security.signature import BigoSignatureService, to_json
from .errors import ProviderError, bigo_error_message, raise_for_provider


logger = logging.getLogger(__name__)


class UpstreamUnavailable(ProviderError):
    """Transport-level failure (network, 5xx, unreadable body) after retries."""

    def __init__(self, msg: str):
        super().__init__(code=-1, msg=msg, http_status=503)


def normalize_base_url(base: str) -> str:
    base = (base or "").strip().rstrip("/")
    if not base:
        return ""
    if base.startswith("http://") or base.startswith("https://"):
        return base
    return f"https://{base}"


class BigoHTTP:
    """Signed POST transport for the recharge provider.

    Each call is signed once; the exact signed JSON bytes are sent as the body.
    Transport failures are retried with backoff, then the backup domain (if any)
    is tried once. Business errors (non-zero ``rescode``) are never failed over.
    """

    def __init__(
        self,
        signer: BigoSignatureService,
        base_url: str,
        backup_url: Optional[str] = None,
        timeout: float = 10.0,
        retries: int = 2,
        backoff_ms: float = 200.0,
        now: Callable[[], float] = time.time,
    ):
        self.signer = signer
        self.base_url = normalize_base_url(base_url)
        self.backup_url = normalize_base_url(backup_url or "")
        self.retries = max(0, retries)
        self.backoff_ms = max(0.0, backoff_ms)
        self._now = now
        self._client = httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings) -> "BigoHTTP":
        return cls(
            signer=settings.signature_service(),
            base_url=settings.bigo_host_domain,
            backup_url=settings.bigo_host_backup_domain,
            timeout=settings.http_timeout,
            retries=settings.http_retries,
            backoff_ms=settings.http_backoff_ms,
        )

    def close(self) -> None:
        self._client.close()

    def timestamp(self) -> str:
        return str(int(self._now()))

    def post(self, endpoint: str, payload: Any) -> Dict[str, Any]:
        if not self.base_url:
            raise ConfigurationError("BIGO_HOST_DOMAIN is not configured")
        timestamp = self.timestamp()
        headers = self.signer.generate_headers(payload, endpoint, timestamp)
        body = to_json(payload).encode("utf-8")

        bases: List[str] = [self.base_url]
        if self.backup_url and self.backup_url != self.base_url:
            bases.append(self.backup_url)
        last_error = UpstreamUnavailable("no Bigo domain reachable")
        for i, base in enumerate(bases):
            url = base + endpoint
            logger.debug("POST %s", url)
            try:
                envelope = self._send(url, body, headers)
            except UpstreamUnavailable as e:
                logger.warning("Bigo request to %s failed: %s", base, e.msg)
                last_error = e
                continue
            if i > 0:
                logger.info("Backup domain request successful")
            return self._check_envelope(envelope)
        raise last_error

    def _sleep(self, attempt: int) -> None:
        delay = (self.backoff_ms / 1000.0) * (2 ** attempt) + (random.random() * 0.05)
        time.sleep(delay)

    def _send(self, url: str, body: bytes, headers: Dict[str, str]) -> Dict[str, Any]:
        attempt = 0
        while True:
            try:
                resp = self._client.post(url, content=body, headers=headers)
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code if e.response is not None else None
                if status_code and status_code >= 500:
                    if attempt < self.retries:
                        self._sleep(attempt)
                        attempt += 1
                        continue
                    raise UpstreamUnavailable(f"upstream http error {status_code}")
                raise_for_provider(-1, f"upstream http error {status_code}")
            except httpx.RequestError as e:
                if attempt < self.retries:
                    self._sleep(attempt)
                    attempt += 1
                    continue
                raise UpstreamUnavailable(f"network error: {e}")
            try:
                envelope = resp.json()
            except ValueError:
                if attempt < self.retries:
                    self._sleep(attempt)
                    attempt += 1
                    continue
                raise UpstreamUnavailable("invalid response")
            if not isinstance(envelope, dict):
                raise UpstreamUnavailable("invalid response")
            return envelope

    def _check_envelope(self, envelope: Dict[str, Any]) -> Dict[str, Any]:
        try:
            parsed = BigoEnvelope.model_validate(envelope)
        except ValidationError:
            raise_for_provider(-1, "invalid response: missing rescode")
        if parsed.rescode != 0:
            msg = bigo_error_message(parsed.rescode, parsed.message)
            logger.error(msg)
            raise_for_provider(parsed.rescode, msg)
        return envelope
