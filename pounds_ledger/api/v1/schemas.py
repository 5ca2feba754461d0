"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from pounds_ledger.domain.models import Account, BankAccount, TransactionRecord
from pounds_ledger.domain.money import format_naira


class OpenAccountRequest(BaseModel):
    """Request body for POST /v1/accounts"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class SetPinRequest(BaseModel):
    """Request body for PUT /v1/accounts/{user_id}/pin"""

    pin: str = Field(..., pattern=r"^[0-9]{4}$", description="New 4-digit transaction PIN")
    current_pin: Optional[str] = Field(None, pattern=r"^[0-9]{4}$", description="Required when changing an existing PIN")


class FundingReferenceRequest(BaseModel):
    """Request body for POST /v1/accounts/{user_id}/funding/reference"""

    amount_kobo: int = Field(..., gt=0, description="Amount to fund in kobo")


class FundingReferenceResponse(BaseModel):
    tx_ref: str
    amount_kobo: int
    currency: str = "NGN"


class FundRequest(BaseModel):
    """Request body for POST /v1/accounts/{user_id}/funding"""

    tx_ref: str = Field(..., min_length=1, description="Reference returned by the payment widget")
    amount_kobo: int = Field(..., gt=0, description="Funded amount in kobo")


class WithdrawalRequest(BaseModel):
    """Request body for POST /v1/accounts/{user_id}/withdrawals"""

    amount_kobo: int = Field(..., gt=0, description="Amount to withdraw in kobo")
    bank_account_id: str = Field(..., min_length=1, description="Saved bank account to pay out to")
    pin: str = Field(..., description="4-digit transaction PIN")


class WithdrawalPrecheckRequest(BaseModel):
    """Request body for POST /v1/accounts/{user_id}/withdrawals/precheck"""

    amount_kobo: int = Field(..., gt=0)
    bank_account_id: str = Field(..., min_length=1)


class AddBankAccountRequest(BaseModel):
    """Request body for POST /v1/accounts/{user_id}/bank-accounts"""

    bank_name: str = Field(..., min_length=1)
    bank_code: str = Field(..., min_length=1, max_length=16)
    account_number: str = Field(..., pattern=r"^[0-9]{10}$", description="10-digit NUBAN")


class BankAccountSchema(BaseModel):
    id: str
    bank_name: str
    bank_code: str
    account_number: str
    account_name: str

    @classmethod
    def from_domain(cls, bank: BankAccount) -> "BankAccountSchema":
        return cls(
            id=bank.id,
            bank_name=bank.bank_name,
            bank_code=bank.bank_code,
            account_number=bank.account_number,
            account_name=bank.account_name,
        )


class BankAccountsResponse(BaseModel):
    user_id: str
    bank_accounts: List[BankAccountSchema]


class TransactionSchema(BaseModel):
    id: str
    type: str
    amount_kobo: int
    amount_display: str
    date: datetime
    status: str
    description: str
    reference: Optional[str] = None

    @classmethod
    def from_domain(cls, txn: TransactionRecord) -> "TransactionSchema":
        return cls(
            id=txn.id,
            type=txn.type,
            amount_kobo=txn.amount_kobo,
            amount_display=format_naira(txn.amount_kobo),
            date=txn.date,
            status=txn.status,
            description=txn.description,
            reference=txn.reference,
        )


class TransactionsResponse(BaseModel):
    user_id: str
    transactions: List[TransactionSchema]


class BalanceSchema(BaseModel):
    available_for_withdrawal_kobo: int
    total_earnings_kobo: int
    pending_earnings_kobo: int
    bonus_earnings_kobo: int
    total_funded_kobo: int
    display: Dict[str, str]


class AccountResponse(BaseModel):
    """Account summary; returned fresh after every mutation"""

    user_id: str
    balance: BalanceSchema
    has_transaction_pin: bool
    bank_accounts: List[BankAccountSchema]

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        amounts = {
            "available_for_withdrawal": account.available_for_withdrawal_kobo,
            "total_earnings": account.total_earnings_kobo,
            "pending_earnings": account.pending_earnings_kobo,
            "bonus_earnings": account.bonus_earnings_kobo,
            "total_funded": account.total_funded_kobo,
        }
        return cls(
            user_id=account.user_id,
            balance=BalanceSchema(
                available_for_withdrawal_kobo=account.available_for_withdrawal_kobo,
                total_earnings_kobo=account.total_earnings_kobo,
                pending_earnings_kobo=account.pending_earnings_kobo,
                bonus_earnings_kobo=account.bonus_earnings_kobo,
                total_funded_kobo=account.total_funded_kobo,
                display={name: format_naira(kobo) for name, kobo in amounts.items()},
            ),
            has_transaction_pin=account.has_transaction_pin,
            bank_accounts=[BankAccountSchema.from_domain(b) for b in account.bank_accounts],
        )


class WithdrawalResponse(BaseModel):
    status: str = "pending"
    message: str = "Withdrawal request submitted successfully. Your request is pending admin approval."
    account: AccountResponse


class WithdrawalPrecheckResponse(BaseModel):
    status: str = "pin_required"
    message: str = "Enter your transaction PIN to confirm the withdrawal."
    amount_display: str


class FundResponse(BaseModel):
    message: str
    account: AccountResponse
