"""
MTN and Airtel Rwanda mobile-money gateway.

Placeholder until the operator APIs are integrated: every charge succeeds
and receives a locally generated transaction id.
"""

import logging
import secrets
import string
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class PaymentMethod(str, Enum):
    MTN_MOBILE_MONEY = "MTN_MOBILE_MONEY"
    AIRTEL_MONEY = "AIRTEL_MONEY"


@dataclass
class ChargeResult:
    success: bool
    message: str
    transaction_id: Optional[str] = None


def _transaction_id() -> str:
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(9))
    return f"TXN{int(time.time() * 1000)}{suffix}"


def charge(phone: str, amount: int, method: PaymentMethod, reference: str) -> ChargeResult:
    """Request `amount` RWF from `phone` for the given booking reference"""
    transaction_id = _transaction_id()
    logger.info("Mobile money charge %s: RWF %s via %s for %s", transaction_id, amount, method.value, reference)
    return ChargeResult(
        success=True,
        transaction_id=transaction_id,
        message=f"Payment of RWF {amount:,} processed successfully via {method.value}",
    )


def verify(transaction_id: str) -> bool:
    """Whether the operator recognises the transaction as settled"""
    return transaction_id.startswith("TXN")
