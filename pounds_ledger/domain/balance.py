"""Balance rules for funding and withdrawals"""

import uuid
from datetime import datetime
from typing import Optional

from pounds_ledger.domain.exceptions import (
    InsufficientBalanceError,
    PinNotSetError,
    ValidationError,
)
from pounds_ledger.domain.models import (
    COMPLETED,
    DEPOSIT,
    PENDING,
    WITHDRAWAL,
    Account,
    BalanceChange,
    BankAccount,
    TransactionRecord,
    WithdrawalQueueItem,
)
from pounds_ledger.domain.money import format_naira

FUNDING_DESCRIPTION = "Account funding via Flutterwave"


def generate_funding_reference(prefix: str = "PB") -> str:
    """Unique reference handed to the payment widget, e.g. PB-1f0c..."""
    return f"{prefix}-{uuid.uuid4()}"


def validate_funding_amount(amount_kobo: Optional[int], minimum_kobo: int) -> int:
    if amount_kobo is None or amount_kobo <= 0:
        raise ValidationError("Please enter a valid amount")
    if amount_kobo < minimum_kobo:
        raise ValidationError(f"Minimum funding amount is {format_naira(minimum_kobo)}")
    return amount_kobo


def funding_change(amount_kobo: int) -> BalanceChange:
    """A verified deposit counts toward available balance, earnings and total funded"""
    return BalanceChange(
        available_for_withdrawal_kobo=amount_kobo,
        total_earnings_kobo=amount_kobo,
        total_funded_kobo=amount_kobo,
    )


def build_deposit_record(
    amount_kobo: int,
    reference: str,
    transaction_id: Optional[str],
    now: datetime,
) -> TransactionRecord:
    return TransactionRecord(
        id=transaction_id or reference,
        type=DEPOSIT,
        amount_kobo=amount_kobo,
        date=now,
        status=COMPLETED,
        description=FUNDING_DESCRIPTION,
        reference=reference,
    )


def check_withdrawal(
    account: Account,
    amount_kobo: Optional[int],
    bank_account_id: Optional[str],
    minimum_kobo: int,
) -> int:
    """
    Pre-checks run before any PIN prompt or store write.

    Order matters for the user-facing message: missing fields, invalid amount,
    insufficient balance, minimum amount, then PIN presence.

    Raises:
        ValidationError: Missing field, non-positive or below-minimum amount
        InsufficientBalanceError: Amount exceeds available balance
        PinNotSetError: Account has no transaction PIN yet
    """
    if amount_kobo is None or not bank_account_id:
        raise ValidationError("Please fill in all fields")
    if amount_kobo <= 0:
        raise ValidationError("Please enter a valid amount")
    if amount_kobo > account.available_for_withdrawal_kobo:
        raise InsufficientBalanceError("Insufficient balance")
    if amount_kobo < minimum_kobo:
        raise ValidationError(f"Minimum withdrawal amount is {format_naira(minimum_kobo)}")
    if not account.has_transaction_pin:
        raise PinNotSetError("You need to set up a transaction PIN before making withdrawals")
    return amount_kobo


def withdrawal_change(amount_kobo: int) -> BalanceChange:
    """Funds leave the available balance as soon as the request is accepted"""
    return BalanceChange(available_for_withdrawal_kobo=-amount_kobo)


def build_withdrawal_record(amount_kobo: int, bank: BankAccount, now: datetime) -> TransactionRecord:
    return TransactionRecord(
        id=f"w-{int(now.timestamp() * 1000)}",
        type=WITHDRAWAL,
        amount_kobo=amount_kobo,
        date=now,
        status=PENDING,
        description=f"Withdrawal to {bank.bank_name} - {bank.account_number}",
    )


def build_queue_item(user_id: str, amount_kobo: int, bank: BankAccount, now: datetime) -> WithdrawalQueueItem:
    return WithdrawalQueueItem(
        user_id=user_id,
        amount_kobo=amount_kobo,
        bank_name=bank.bank_name,
        bank_code=bank.bank_code,
        account_number=bank.account_number,
        account_name=bank.account_name,
        timestamp=now,
    )
