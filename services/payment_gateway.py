import hmac
import hashlib
from decimal import Decimal, ROUND_HALF_UP
import httpx
from core.exceptions import PaymentGatewayError
from utils.logger import get_logger

logger = get_logger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Gateway amounts are integers in the smallest currency unit (paise, cents)."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentGateway:
    """
    Client for a Razorpay compatible payment gateway.

    Two operations are used by checkout:
    - create_intent: POST /orders, returns the remote order id
    - verify_signature: HMAC-SHA256 of "<order_id>|<payment_id>" keyed with
      the shared secret, compared in constant time
    """

    def __init__(self, base_url: str, key_id: str, key_secret: str,
                 timeout: float = 10.0, transport: httpx.BaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.key_id = key_id
        self._key_secret = key_secret
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            auth=(self.key_id, self._key_secret),
            timeout=self.timeout,
            transport=self._transport
        )

    def create_intent(self, amount: Decimal, currency: str, receipt: str) -> str:
        """
        Creates a remote payment order for amount.

        Raises:
            PaymentGatewayError: on transport errors, non 2xx responses or a
            response without an id
        """
        payload = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt
        }

        try:
            with self._client() as client:
                response = client.post("/orders", json=payload)
                response.raise_for_status()
                gateway_order_id = response.json().get("id")

        except httpx.HTTPStatusError as e:
            logger.error(
                "Payment gateway rejected order creation",
                extra={"status_code": e.response.status_code, "receipt": receipt}
            )
            raise PaymentGatewayError("Payment gateway rejected the order") from e

        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                f"Payment gateway call failed: {str(e)}",
                extra={"error_type": type(e).__name__, "receipt": receipt}
            )
            raise PaymentGatewayError() from e

        if not gateway_order_id:
            logger.error("Payment gateway response carried no order id", extra={"receipt": receipt})
            raise PaymentGatewayError("Payment gateway returned an invalid response")

        logger.info(
            "Payment intent created",
            extra={"gateway_order_id": gateway_order_id, "amount": str(amount), "currency": currency}
        )

        return gateway_order_id

    def compute_signature(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self._key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        expected = self.compute_signature(order_id, payment_id)
        return hmac.compare_digest(expected.encode(), signature.encode())
