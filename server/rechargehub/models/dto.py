from __future__ import annotations
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer, field_validator


# ===== Signed request headers =====
class SignedHeaders(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_type: str = "application/json"
    client_id: str
    timestamp: str
    client_version: str = "0"
    signature: str

    def as_http(self, prefix: str = "bigo") -> Dict[str, str]:
        return {
            "Content-Type": self.content_type,
            f"{prefix}-client-id": self.client_id,
            f"{prefix}-timestamp": self.timestamp,
            f"{prefix}-client-version": self.client_version,
            f"{prefix}-oauth-signature": self.signature,
        }


# ===== Recharge provider request bodies =====
# Field declaration order is the JSON key order, which is part of the signed message.
SUPPORTED_CURRENCIES = (
    "USD", "CNY", "TWD", "MYR", "THB", "TRY", "PHP", "AUD", "IDR", "KRW", "INR",
    "HKD", "SGD", "MMK", "JPY", "EUR", "NGN", "DKK", "UAH", "ILS", "IQD", "RUB",
    "BGN", "HRK", "CHF", "CAD", "GHS", "HUF", "ZAR", "QAR", "KZT", "COP", "CRC",
    "TZS", "EGP", "RSD", "MXN", "BDT", "PKR", "PYG", "BRL", "NOK", "CZK", "MAD",
    "LKR", "NZD", "CLP", "GEL", "SAR", "PLN", "MOP", "BOB", "SEK", "GBP", "PEN",
    "JOD", "RON", "KES", "VND", "DZD", "AED", "LBP",
)

SEQID_PATTERN = r"^[a-z0-9]{13,32}$"
BU_ORDERID_PATTERN = r"^[A-Za-z0-9_]{1,40}$"


class RechargePrecheckBody(BaseModel):
    recharge_bigoid: str = Field(min_length=1, description="bigo_id of the user to recharge (not the client_id)")
    seqid: str = Field(pattern=SEQID_PATTERN)


class DiamondRechargeBody(BaseModel):
    recharge_bigoid: str = Field(min_length=1)
    seqid: str = Field(pattern=SEQID_PATTERN, description="Unique request serial number")
    bu_orderid: str = Field(pattern=BU_ORDERID_PATTERN, description="Unique business order id")
    value: int = Field(ge=1, description="Diamond amount")
    total_cost: float = Field(ge=0.01, le=99999999999.00)
    currency: str

    @field_validator("total_cost")
    @classmethod
    def _two_decimals(cls, v: float) -> float:
        if round(v, 2) != v:
            raise ValueError("total_cost allows at most two decimal places")
        return v

    @field_serializer("total_cost")
    def _integral_cost(self, v: float):
        # Integral amounts serialize as 712, never 712.0
        return int(v) if float(v).is_integer() else v

    @field_validator("currency")
    @classmethod
    def _supported_currency(cls, v: str) -> str:
        if v not in SUPPORTED_CURRENCIES:
            raise ValueError(f"currency {v!r} is not supported")
        return v


class DisableRechargeBody(BaseModel):
    seqid: str = Field(pattern=SEQID_PATTERN)


class BigoEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    rescode: int
    message: Optional[str] = None
    data: Optional[Any] = None
