"""Bank account name resolution client"""

import httpx
from dataclasses import dataclass
from pounds_ledger.domain.exceptions import BankResolutionError, ValidationError
from pounds_ledger.config import settings
from pounds_ledger.infrastructure.observability.metrics import gateway_latency_histogram, gateway_failure_counter


@dataclass
class ResolvedAccount:
    account_number: str
    bank_code: str
    bank_name: str
    account_name: str


class BankResolverClient:
    """Client for the external account-name lookup"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.bank_resolver_api_base
        self.timeout = settings.http_timeout_seconds if timeout is None else timeout
        self.transport = transport

    async def resolve(self, account_number: str, bank_code: str) -> ResolvedAccount:
        """
        Resolve the holder name of a bank account.

        Raises:
            BankResolutionError: Resolver unreachable or returned garbage
            ValidationError: Resolver answered but could not name the holder
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with gateway_latency_histogram.labels(gateway="bank_resolver").time():
                    response = await client.post(
                        f"{self.base_url}/api/resolve-account",
                        json={"accountNumber": account_number, "bankCode": bank_code},
                    )
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                gateway_failure_counter.labels(gateway="bank_resolver").inc()
                raise BankResolutionError(f"Bank resolver timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                gateway_failure_counter.labels(gateway="bank_resolver").inc()
                raise BankResolutionError(f"Bank resolver error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                gateway_failure_counter.labels(gateway="bank_resolver").inc()
                raise BankResolutionError(f"Bank resolver unreachable: {e}") from e
            except ValueError as e:
                gateway_failure_counter.labels(gateway="bank_resolver").inc()
                raise BankResolutionError(f"Invalid resolver response: {e}") from e

        if not isinstance(data, dict):
            gateway_failure_counter.labels(gateway="bank_resolver").inc()
            raise BankResolutionError("Invalid resolver response: expected an object")

        account_name = (data.get("accountName") or "").strip()
        if not data.get("success") or not account_name:
            raise ValidationError("Account name verification failed. Please check the account details.")

        return ResolvedAccount(
            account_number=account_number,
            bank_code=bank_code,
            bank_name=data.get("bankName") or "",
            account_name=account_name,
        )
