from __future__ import annotations
import base64
import json
import logging
from typing import Any, Dict, Optional

import rsa

from ..errors import ConfigurationError, SigningError
from ..models.dto import SignedHeaders
from .keys import load_private_key, load_public_key


logger = logging.getLogger(__name__)

SIGN_HASH = "SHA-256"

# Example published in the provider's signing guide
EXAMPLE_PAYLOAD = {"msg": "hello"}
EXAMPLE_ENDPOINT = "/oauth2/test_sign"
EXAMPLE_TIMESTAMP = "1688701573"


def to_json(payload: Any) -> str:
    """Compact JSON with key insertion order kept and non-ASCII left unescaped.

    The provider verifies the signature over these exact bytes, so key order
    must not be sorted or otherwise canonicalized.
    """
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def build_message(payload: Any, endpoint: str, timestamp: str) -> str:
    if not isinstance(timestamp, str):
        raise TypeError("timestamp must be passed as a string")
    try:
        json_data = to_json(payload)
    except (TypeError, ValueError) as e:
        raise SigningError(f"Payload is not JSON-serializable: {e}") from e
    return f"{json_data}{endpoint}{timestamp}"


def sign(message: str, private_key: str | None) -> str:
    """RSASSA-PKCS1-v1_5 over SHA-256 of ``message``, base64 without line breaks."""
    key = load_private_key(private_key)
    try:
        sig_bytes = rsa.sign(message.encode("utf-8"), key, SIGN_HASH)
    except Exception as e:
        logger.error("Failed to sign with private key: %s", e)
        raise SigningError(f"Private key signing failed: {e}") from e
    return base64.b64encode(sig_bytes).decode("ascii")


def verify(message: str, signature: str, public_key_pem: str) -> bool:
    pub = load_public_key(public_key_pem)
    try:
        sig_bytes = base64.b64decode(signature, validate=True)
        rsa.verify(message.encode("utf-8"), sig_bytes, pub)
        return True
    except Exception:
        return False


class BigoSignatureService:
    """Builds the signed headers the recharge provider expects on every call.

    Configuration is injected once; the service itself holds no mutable state and
    can be shared between threads.
    """

    def __init__(
        self,
        client_id: Optional[str],
        private_key: Optional[str],
        client_version: str = "0",
        header_prefix: str = "bigo",
    ):
        self.client_id = client_id
        self.private_key = private_key
        self.client_version = client_version or "0"
        self.header_prefix = header_prefix

    def build_message(self, payload: Any, endpoint: str, timestamp: str) -> str:
        return build_message(payload, endpoint, timestamp)

    def sign(self, message: str) -> str:
        return sign(message, self.private_key)

    def generate_signature(self, payload: Any, endpoint: str, timestamp: str) -> str:
        try:
            return self.sign(self.build_message(payload, endpoint, timestamp))
        except SigningError as e:
            logger.error("Failed to generate signature for %s: %s", endpoint, e)
            raise

    def generate_headers(self, payload: Any, endpoint: str, timestamp: str) -> Dict[str, str]:
        if not self.client_id:
            raise ConfigurationError("BIGO_CLIENT_ID is required")
        signature = self.generate_signature(payload, endpoint, timestamp)
        headers = SignedHeaders(
            client_id=self.client_id,
            timestamp=timestamp,
            client_version=self.client_version,
            signature=signature,
        )
        return headers.as_http(self.header_prefix)

    def test_signature_generation(self) -> Dict[str, str]:
        """Sign the documented example so operators can compare with the provider's tool."""
        message = self.build_message(EXAMPLE_PAYLOAD, EXAMPLE_ENDPOINT, EXAMPLE_TIMESTAMP)
        return {
            "message": message,
            "signature": self.sign(message),
            "timestamp": EXAMPLE_TIMESTAMP,
        }
