"""Integration tests for API endpoints"""

from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from sqlalchemy.orm import Session

from pounds_ledger.domain.exceptions import BankResolutionError, PaymentGatewayError, ValidationError
from pounds_ledger.infrastructure.clients.bank_resolver import ResolvedAccount
from pounds_ledger.infrastructure.clients.payments import PaymentVerification
from pounds_ledger.infrastructure.database.models import WithdrawalQueueEntry

PIN = "1234"
STARTING_FUNDS_KOBO = 1_000_000

VERIFY = "pounds_ledger.infrastructure.clients.payments.PaymentClient.verify_payment"
RESOLVE = "pounds_ledger.infrastructure.clients.bank_resolver.BankResolverClient.resolve"


def test_health_endpoint(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "pounds_funding_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"
    assert client.get("/health").headers["X-Request-ID"]


def test_unmatched_path_uses_constant_metric_label(client: TestClient):
    assert client.get("/no/such/route/user_ada").status_code == 404

    labels = {"method": "GET", "status": "404"}
    assert REGISTRY.get_sample_value("http_request_duration_seconds_count", {**labels, "endpoint": "unmatched"}) >= 1
    assert REGISTRY.get_sample_value("http_request_duration_seconds_count", {**labels, "endpoint": "/no/such/route/user_ada"}) is None


# Accounts


def test_open_and_get_account(client: TestClient):
    response = client.post("/v1/accounts", json={"user_id": "u_new"})
    assert response.status_code == 201

    data = client.get("/v1/accounts/u_new").json()
    assert data["user_id"] == "u_new"
    assert data["balance"]["available_for_withdrawal_kobo"] == 0
    assert data["balance"]["display"]["available_for_withdrawal"] == "₦0"
    assert data["has_transaction_pin"] is False


def test_open_account_twice_conflicts(client: TestClient):
    client.post("/v1/accounts", json={"user_id": "u_dup"})
    assert client.post("/v1/accounts", json={"user_id": "u_dup"}).status_code == 409


def test_unknown_account_404(client: TestClient):
    assert client.get("/v1/accounts/nobody").status_code == 404
    assert client.get("/v1/accounts/nobody/transactions").status_code == 404


def test_set_pin(client: TestClient):
    client.post("/v1/accounts", json={"user_id": "u_pin"})

    assert client.put("/v1/accounts/u_pin/pin", json={"pin": "12a4"}).status_code == 422

    response = client.put("/v1/accounts/u_pin/pin", json={"pin": "1234"})
    assert response.status_code == 200
    assert response.json()["has_transaction_pin"] is True

    assert client.put("/v1/accounts/u_pin/pin", json={"pin": "5678"}).status_code == 403
    assert client.put("/v1/accounts/u_pin/pin", json={"pin": "5678", "current_pin": "1234"}).status_code == 200


# Funding


def test_funding_reference(client: TestClient, funded_user: str):
    response = client.post(f"/v1/accounts/{funded_user}/funding/reference", json={"amount_kobo": 500_000})

    assert response.status_code == 200
    assert response.json()["tx_ref"].startswith("PB-")
    assert response.json()["currency"] == "NGN"


def test_funding_reference_below_minimum(client: TestClient, funded_user: str):
    response = client.post(f"/v1/accounts/{funded_user}/funding/reference", json={"amount_kobo": 5_000})

    assert response.status_code == 422
    assert response.json()["detail"] == "Minimum funding amount is ₦100"


@patch(VERIFY)
def test_fund_after_verified_payment(mock_verify: AsyncMock, client: TestClient, funded_user: str):
    mock_verify.return_value = PaymentVerification(success=True, transaction_id="FLW-9")

    response = client.post(f"/v1/accounts/{funded_user}/funding", json={"tx_ref": "PB-9", "amount_kobo": 500_000})

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Your account has been funded with ₦5,000."
    assert data["account"]["balance"]["available_for_withdrawal_kobo"] == STARTING_FUNDS_KOBO + 500_000
    assert data["account"]["balance"]["display"]["available_for_withdrawal"] == "₦15,000"
    mock_verify.assert_awaited_once_with("PB-9", funded_user)

    latest = client.get(f"/v1/accounts/{funded_user}/transactions").json()["transactions"][0]
    assert latest["id"] == "FLW-9"
    assert latest["type"] == "deposit"
    assert latest["status"] == "completed"
    assert latest["reference"] == "PB-9"
    assert latest["amount_display"] == "₦5,000"


@patch(VERIFY)
def test_fund_unverified_payment_is_not_credited(mock_verify: AsyncMock, client: TestClient, funded_user: str):
    mock_verify.return_value = PaymentVerification(success=False)

    response = client.post(f"/v1/accounts/{funded_user}/funding", json={"tx_ref": "PB-no", "amount_kobo": 500_000})

    assert response.status_code == 402
    balance = client.get(f"/v1/accounts/{funded_user}").json()["balance"]
    assert balance["available_for_withdrawal_kobo"] == STARTING_FUNDS_KOBO


@patch(VERIFY)
def test_fund_gateway_down(mock_verify: AsyncMock, client: TestClient, funded_user: str):
    mock_verify.side_effect = PaymentGatewayError("Payment API timeout after 5.0s")

    response = client.post(f"/v1/accounts/{funded_user}/funding", json={"tx_ref": "PB-x", "amount_kobo": 500_000})

    assert response.status_code == 503
    assert "timeout" not in response.json()["detail"]


@patch(VERIFY)
def test_fund_below_minimum_skips_gateway(mock_verify: AsyncMock, client: TestClient, funded_user: str):
    response = client.post(f"/v1/accounts/{funded_user}/funding", json={"tx_ref": "PB-x", "amount_kobo": 9_000})

    assert response.status_code == 422
    mock_verify.assert_not_called()


# Withdrawals


def test_withdrawal_accepted(client: TestClient, funded_user: str, gtbank, db: Session):
    response = client.post(
        f"/v1/accounts/{funded_user}/withdrawals",
        json={"amount_kobo": 200_000, "bank_account_id": gtbank.id, "pin": PIN},
    )

    assert response.status_code == 202
    data = response.json()
    assert data["status"] == "pending"
    assert data["account"]["balance"]["available_for_withdrawal_kobo"] == STARTING_FUNDS_KOBO - 200_000
    assert db.query(WithdrawalQueueEntry).count() == 1

    latest = client.get(f"/v1/accounts/{funded_user}/transactions").json()["transactions"][0]
    assert latest["type"] == "withdrawal"
    assert latest["status"] == "pending"


def test_withdrawal_wrong_pin(client: TestClient, funded_user: str, gtbank, db: Session):
    response = client.post(
        f"/v1/accounts/{funded_user}/withdrawals",
        json={"amount_kobo": 200_000, "bank_account_id": gtbank.id, "pin": "0000"},
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Invalid transaction PIN"
    assert db.query(WithdrawalQueueEntry).count() == 0


def test_withdrawal_validation_errors(client: TestClient, funded_user: str, gtbank):
    url = f"/v1/accounts/{funded_user}/withdrawals"

    below = client.post(url, json={"amount_kobo": 50_000, "bank_account_id": gtbank.id, "pin": PIN})
    assert below.status_code == 422
    assert below.json()["detail"] == "Minimum withdrawal amount is ₦1,000"

    over = client.post(url, json={"amount_kobo": STARTING_FUNDS_KOBO + 100, "bank_account_id": gtbank.id, "pin": PIN})
    assert over.status_code == 422
    assert over.json()["detail"] == "Insufficient balance"

    missing_bank = client.post(url, json={"amount_kobo": 200_000, "bank_account_id": "gone", "pin": PIN})
    assert missing_bank.status_code == 404


def test_withdrawal_requires_pin_setup(client: TestClient):
    client.post("/v1/accounts", json={"user_id": "u_nopin"})

    # Balance is checked before the PIN, so fund the account first
    with patch(VERIFY, new_callable=AsyncMock) as mock_verify:
        mock_verify.return_value = PaymentVerification(success=True, transaction_id="FLW-1")
        client.post("/v1/accounts/u_nopin/funding", json={"tx_ref": "PB-1", "amount_kobo": 500_000})

    response = client.post(
        "/v1/accounts/u_nopin/withdrawals",
        json={"amount_kobo": 200_000, "bank_account_id": "any", "pin": "1234"},
    )
    assert response.status_code == 409
    assert "transaction PIN" in response.json()["detail"]


def test_withdrawal_precheck_before_pin_prompt(client: TestClient, funded_user: str, gtbank, db: Session):
    url = f"/v1/accounts/{funded_user}/withdrawals/precheck"

    ready = client.post(url, json={"amount_kobo": 200_000, "bank_account_id": gtbank.id})
    assert ready.status_code == 200
    assert ready.json()["status"] == "pin_required"
    assert ready.json()["amount_display"] == "₦2,000"

    over = client.post(url, json={"amount_kobo": STARTING_FUNDS_KOBO + 100, "bank_account_id": gtbank.id})
    assert over.status_code == 422
    assert over.json()["detail"] == "Insufficient balance"

    assert client.post(url, json={"amount_kobo": 200_000, "bank_account_id": "gone"}).status_code == 404

    balance = client.get(f"/v1/accounts/{funded_user}").json()["balance"]
    assert balance["available_for_withdrawal_kobo"] == STARTING_FUNDS_KOBO
    assert db.query(WithdrawalQueueEntry).count() == 0


def test_withdrawal_precheck_directs_to_pin_setup(client: TestClient):
    client.post("/v1/accounts", json={"user_id": "u_precheck"})
    with patch(VERIFY, new_callable=AsyncMock) as mock_verify:
        mock_verify.return_value = PaymentVerification(success=True, transaction_id="FLW-2")
        client.post("/v1/accounts/u_precheck/funding", json={"tx_ref": "PB-2", "amount_kobo": 500_000})

    response = client.post(
        "/v1/accounts/u_precheck/withdrawals/precheck",
        json={"amount_kobo": 200_000, "bank_account_id": "any"},
    )

    assert response.status_code == 409


# Bank accounts


@patch(RESOLVE)
def test_add_list_delete_bank_account(mock_resolve: AsyncMock, client: TestClient, funded_user: str):
    mock_resolve.return_value = ResolvedAccount(
        account_number="0987654321", bank_code="044", bank_name="Access Bank", account_name="TUNDE BAKARE"
    )
    url = f"/v1/accounts/{funded_user}/bank-accounts"

    created = client.post(url, json={"bank_name": "Access", "bank_code": "044", "account_number": "0987654321"})
    assert created.status_code == 201
    assert created.json()["account_name"] == "TUNDE BAKARE"
    new_id = created.json()["id"]

    listed = client.get(url).json()["bank_accounts"]
    assert [b["bank_code"] for b in listed] == ["058", "044"]

    duplicate = client.post(url, json={"bank_name": "Access", "bank_code": "044", "account_number": "0987654321"})
    assert duplicate.status_code == 409

    assert client.delete(f"{url}/{new_id}").status_code == 204
    assert client.delete(f"{url}/{new_id}").status_code == 404
    assert len(client.get(url).json()["bank_accounts"]) == 1


@patch(RESOLVE)
def test_unresolvable_bank_account_not_saved(mock_resolve: AsyncMock, client: TestClient, funded_user: str):
    mock_resolve.side_effect = ValidationError("Account name verification failed. Please check the account details.")
    url = f"/v1/accounts/{funded_user}/bank-accounts"

    response = client.post(url, json={"bank_name": "UBA", "bank_code": "033", "account_number": "1122334455"})

    assert response.status_code == 422
    assert len(client.get(url).json()["bank_accounts"]) == 1


@patch(RESOLVE)
def test_resolver_down(mock_resolve: AsyncMock, client: TestClient, funded_user: str):
    mock_resolve.side_effect = BankResolutionError("Bank resolver unreachable")

    response = client.post(
        f"/v1/accounts/{funded_user}/bank-accounts",
        json={"bank_name": "UBA", "bank_code": "033", "account_number": "1122334455"},
    )

    assert response.status_code == 503


def test_bank_account_number_must_be_ten_digits(client: TestClient, funded_user: str):
    response = client.post(
        f"/v1/accounts/{funded_user}/bank-accounts",
        json={"bank_name": "UBA", "bank_code": "033", "account_number": "12345"},
    )
    assert response.status_code == 422
