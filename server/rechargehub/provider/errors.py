from __future__ import annotations
from typing import Optional


class ProviderError(Exception):
    def __init__(self, code: int, msg: str, http_status: int = 500):
        super().__init__(msg)
        self.code = code
        self.msg = msg
        self.http_status = http_status


BIGO_ERROR_MESSAGES = {
    400001: "Invalid request parameters",
    7212001: "Recharge API disabled by Bigo",
    7212002: "Recharge API disabled by third-party website",
    7212003: "IP not authorized to make requests",
    7212004: "Bigo user does not exist",
    7212005: "User cannot be recharged",
    7212006: "Reseller not linked to client_id",
    7212008: "Diamond amount exceeds upper limit",
    7212009: "Currency not supported",
    7212010: "Order ID duplicated",
    7212011: "Insufficient balance",
    7212012: "Request too frequent, please wait a moment",
    7212013: "Diamond pricing outside specified range",
    7212014: "User area not eligible",
    7212015: "Recharge not supported in your area",
    500001: "Internal error, contact Bigo team",
}


def bigo_error_message(code: int, original: Optional[str] = None) -> str:
    text = BIGO_ERROR_MESSAGES.get(code) or original or "Unknown error"
    return f"Bigo API Error ({code}): {text}"


def map_provider_code_to_http(code: int) -> int:
    mapping = {
        400001: 400,
        7212003: 403,
        7212004: 404,
        7212005: 422,
        7212008: 422,
        7212009: 422,
        7212010: 409,
        7212011: 402,
        7212012: 429,
        7212013: 422,
        7212014: 422,
        7212015: 422,
        7212001: 503,
        7212002: 503,
    }
    return mapping.get(code, 502)


def raise_for_provider(code: int, msg: str):
    status = map_provider_code_to_http(code)
    raise ProviderError(code=code, msg=msg, http_status=status)
