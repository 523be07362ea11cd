import unittest
from typing import Any, Dict, List, Optional

import httpx

from server.rechargehub.errors import DecryptionError
from server.rechargehub.provider.bravive import BraviveHTTP
from server.rechargehub.provider.errors import ProviderError
from server.rechargehub.security.cipher import CryptoService


SECRET = "test-encryption-key-minimum-32-characters-long-for-testing"
TOKEN = "AV_654786478236497832569874329748326497812"


class RecordingClient:
    def __init__(self, status: int = 200, body: Any = None):
        self.status = status
        self.body = body if body is not None else {"ok": True}
        self.calls: List[Dict[str, Any]] = []

    def _respond(self, method: str, url: str) -> httpx.Response:
        return httpx.Response(self.status, request=httpx.Request(method, url), json=self.body)

    def post(self, url: str, json: Any = None, headers: Optional[Dict[str, str]] = None):
        self.calls.append({"method": "POST", "url": url, "json": json, "headers": headers})
        return self._respond("POST", url)

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, params: Any = None):
        self.calls.append({"method": "GET", "url": url, "params": params, "headers": headers})
        return self._respond("GET", url)


class TestBraviveHTTP(unittest.TestCase):
    def setUp(self):
        self.http = BraviveHTTP(CryptoService(SECRET), base_url="https://bravive.example/api/v1/")
        self.sealed = self.http.seal_token(TOKEN)

    def test_seal_token_is_encrypted(self):
        self.assertNotEqual(self.sealed, TOKEN)
        self.assertEqual(self.http.cipher.decrypt(self.sealed), TOKEN)
        with self.assertRaises(ValueError):
            self.http.seal_token("")

    def test_post_uses_decrypted_bearer_token(self):
        client = RecordingClient(body={"id": "pay_1"})
        self.http._client = client  # type: ignore
        out = self.http.post("/payments", {"amount": 10}, self.sealed)
        self.assertEqual(out, {"id": "pay_1"})
        call = client.calls[0]
        self.assertEqual(call["url"], "https://bravive.example/api/v1/payments")
        self.assertEqual(call["headers"]["Authorization"], f"Bearer {TOKEN}")
        self.assertEqual(call["json"], {"amount": 10})

    def test_get_passes_params(self):
        client = RecordingClient()
        self.http._client = client  # type: ignore
        self.http.get("/payments/1", self.sealed, params={"expand": "all"})
        self.assertEqual(client.calls[0]["params"], {"expand": "all"})

    def test_status_error(self):
        self.http._client = RecordingClient(status=401, body={"error": "unauthorized"})  # type: ignore
        with self.assertRaises(ProviderError) as ctx:
            self.http.post("/payments", {}, self.sealed)
        self.assertEqual(ctx.exception.code, 401)
        self.assertTrue(ctx.exception.msg.startswith("Bravive API Error (401)"))

    def test_network_error(self):
        class Down:
            def post(self, url, json=None, headers=None):
                raise httpx.ConnectError("down", request=httpx.Request("POST", url))

        self.http._client = Down()  # type: ignore
        with self.assertRaises(ProviderError) as ctx:
            self.http.post("/payments", {}, self.sealed)
        self.assertEqual(ctx.exception.http_status, 503)

    def test_non_json_body(self):
        class Html:
            def post(self, url, json=None, headers=None):
                return httpx.Response(200, request=httpx.Request("POST", url), text="<html>ok</html>")

        self.http._client = Html()  # type: ignore
        with self.assertRaises(ProviderError) as ctx:
            self.http.post("/payments", {}, self.sealed)
        self.assertEqual(ctx.exception.http_status, 502)

    def test_corrupted_token_is_not_sent(self):
        client = RecordingClient()
        self.http._client = client  # type: ignore
        with self.assertRaises(DecryptionError):
            self.http.post("/payments", {}, self.sealed[:-8] + "AAAAAAAA")
        self.assertEqual(client.calls, [])

    def test_missing_token(self):
        client = RecordingClient()
        self.http._client = client  # type: ignore
        with self.assertRaises(ProviderError) as ctx:
            self.http.post("/payments", {}, "")
        self.assertEqual(ctx.exception.http_status, 400)
        self.assertEqual(client.calls, [])
