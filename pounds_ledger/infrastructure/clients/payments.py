"""Payment verification HTTP client"""

import httpx
from dataclasses import dataclass
from typing import Optional
from pounds_ledger.domain.exceptions import PaymentGatewayError
from pounds_ledger.config import settings
from pounds_ledger.infrastructure.observability.metrics import gateway_latency_histogram, gateway_failure_counter


@dataclass
class PaymentVerification:
    """Gateway verdict for a funding reference"""

    success: bool
    transaction_id: Optional[str] = None


class PaymentClient:
    """Client for the payment verification endpoint"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.payment_api_base
        self.timeout = settings.http_timeout_seconds if timeout is None else timeout
        self.transport = transport

    async def verify_payment(self, tx_ref: str, user_id: str) -> PaymentVerification:
        """
        Ask the gateway whether a payment reference completed.

        Single attempt, no retry. A `success: false` answer is returned, not raised;
        the caller decides what an unverified payment means.

        Raises:
            PaymentGatewayError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with gateway_latency_histogram.labels(gateway="payment").time():
                    response = await client.post(
                        f"{self.base_url}/api/verify-payment",
                        json={"txRef": tx_ref, "userId": user_id},
                    )
                response.raise_for_status()
                data = response.json()

                success = data["success"]
                if not isinstance(success, bool):
                    raise ValueError(f"success must be a boolean, got {success!r}")
                return PaymentVerification(success=success, transaction_id=data.get("transactionId"))

            except httpx.TimeoutException as e:
                gateway_failure_counter.labels(gateway="payment").inc()
                raise PaymentGatewayError(f"Payment API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                gateway_failure_counter.labels(gateway="payment").inc()
                raise PaymentGatewayError(f"Payment API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                gateway_failure_counter.labels(gateway="payment").inc()
                raise PaymentGatewayError(f"Payment API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                gateway_failure_counter.labels(gateway="payment").inc()
                raise PaymentGatewayError(f"Invalid verification response: {e}") from e
