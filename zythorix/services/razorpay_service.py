"""
Razorpay gateway client for the Zythorix360 API.
Opens checkout orders over the REST API and verifies the signature the
checkout widget returns after payment.
"""

import hashlib
import hmac
import secrets
import time
from typing import Dict, Any, Optional

import httpx

from zythorix.core.logging import get_logger

logger = get_logger(__name__)

# Razorpay rejects receipts longer than this
RECEIPT_MAX_LENGTH = 40


class RazorpayError(Exception):
    """Gateway call failed or returned an unusable response"""


class RazorpayService:
    """Client for the Razorpay Orders API"""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id
        self._key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def build_receipt() -> str:
        """Receipt id of the form rcpt_<epoch ms>_<random>"""
        receipt = f"rcpt_{int(time.time() * 1000)}_{secrets.token_hex(4)}"
        return receipt[:RECEIPT_MAX_LENGTH]

    async def create_order(
        self,
        amount_minor: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a gateway order

        Args:
            amount_minor: Amount in the currency's minor unit (paise for INR)
            currency: ISO currency code
            receipt: Merchant receipt reference
            notes: Free-form key/value notes stored with the order

        Returns:
            The order object returned by the gateway (id, amount, currency, ...)

        Raises:
            RazorpayError: on timeout, transport failure or non-2xx response
        """
        payload = {
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }

        try:
            async with httpx.AsyncClient(
                auth=(self.key_id, self._key_secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(f"{self.base_url}/orders", json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout while creating Razorpay order {receipt}")
            raise RazorpayError("Payment gateway timeout") from e
        except httpx.HTTPError as e:
            logger.error(f"Transport error while creating Razorpay order: {str(e)}")
            raise RazorpayError("Payment gateway unavailable") from e

        if response.status_code >= 400:
            logger.error(f"Razorpay order failed: {response.status_code} - {response.text}")
            raise RazorpayError(f"Payment gateway returned {response.status_code}")

        order = response.json()
        if not order.get("id"):
            raise RazorpayError("Payment gateway returned an order without id")

        logger.info(f"Razorpay order created: {order['id']} ({amount_minor} {currency})")
        return order

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self._key_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """
        Check the checkout signature: hex HMAC-SHA256 of "order_id|payment_id"
        keyed with the API secret. Compared in constant time.
        """
        if not signature:
            return False
        expected = self.expected_signature(order_id, payment_id)
        is_valid = hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
        if not is_valid:
            logger.warning(f"Signature mismatch for order {order_id}, payment {payment_id}")
        return is_valid
