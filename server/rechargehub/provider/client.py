from __future__ import annotations
import logging
from typing import Any, Dict

from ..models.dto import DiamondRechargeBody, DisableRechargeBody, RechargePrecheckBody
from .http import BigoHTTP


logger = logging.getLogger(__name__)

PRECHECK_PATH = "/sign/agent/recharge_pre_check"
RECHARGE_PATH = "/sign/agent/rs_recharge"
DISABLE_PATH = "/sign/agent/disable"


class BigoClient:
    """Recharge operations exposed by the provider's reseller API."""

    def __init__(self, http: BigoHTTP):
        self.http = http

    @classmethod
    def from_settings(cls, settings) -> "BigoClient":
        return cls(BigoHTTP.from_settings(settings))

    # Upstream: POST /sign/agent/recharge_pre_check
    def recharge_precheck(self, recharge_bigoid: str, seqid: str) -> Dict[str, Any]:
        body = RechargePrecheckBody(recharge_bigoid=recharge_bigoid, seqid=seqid)
        logger.info("Recharge precheck for bigoid: %s", body.recharge_bigoid)
        return self.http.post(PRECHECK_PATH, body.model_dump())

    # Upstream: POST /sign/agent/rs_recharge
    def diamond_recharge(
        self,
        recharge_bigoid: str,
        seqid: str,
        bu_orderid: str,
        value: int,
        total_cost: float,
        currency: str,
    ) -> Dict[str, Any]:
        """Credit ``value`` diamonds to a user.

        ``seqid`` and ``bu_orderid`` must be unique per request; the provider
        rejects reuse with rescode 7212010.
        """
        body = DiamondRechargeBody(
            recharge_bigoid=recharge_bigoid,
            seqid=seqid,
            bu_orderid=bu_orderid,
            value=value,
            total_cost=total_cost,
            currency=currency,
        )
        logger.info("Diamond recharge for bigoid: %s, value: %s", body.recharge_bigoid, body.value)
        return self.http.post(RECHARGE_PATH, body.model_dump())

    # Upstream: POST /sign/agent/disable
    def disable_recharge(self, seqid: str) -> Dict[str, Any]:
        body = DisableRechargeBody(seqid=seqid)
        logger.info("Disabling recharge APIs")
        return self.http.post(DISABLE_PATH, body.model_dump())

    def test_signature(self) -> Dict[str, str]:
        return self.http.signer.test_signature_generation()
