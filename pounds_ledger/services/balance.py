"""Balance update service: funding and withdrawal requests"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from pounds_ledger.config import settings
from pounds_ledger.domain.authorization import PinAuthorization, validate_pin_format
from pounds_ledger.domain.balance import (
    build_deposit_record,
    build_queue_item,
    build_withdrawal_record,
    check_withdrawal,
    funding_change,
    validate_funding_amount,
    withdrawal_change,
)
from pounds_ledger.domain.exceptions import BankAccountNotFoundError, ValidationError
from pounds_ledger.domain.models import Account
from pounds_ledger.infrastructure.database.repositories import (
    AccountRepository,
    WithdrawalQueueRepository,
    to_account,
)
from pounds_ledger.services.store import StoreService

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BalanceService(StoreService):
    """Applies funding and withdrawal events to an account record"""

    def __init__(
        self,
        db: Session,
        min_funding_kobo: int | None = None,
        min_withdrawal_kobo: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
        **store_options,
    ):
        super().__init__(db, **store_options)
        self.min_funding_kobo = settings.min_funding_kobo if min_funding_kobo is None else min_funding_kobo
        self.min_withdrawal_kobo = settings.min_withdrawal_kobo if min_withdrawal_kobo is None else min_withdrawal_kobo
        self.clock = clock
        self.accounts = AccountRepository(db)
        self.queue = WithdrawalQueueRepository(db)

    def check_funding(self, user_id: str, amount_kobo: Optional[int]) -> int:
        """Validate a funding amount for an existing account before the payment widget opens"""
        self.accounts.require(user_id)
        return validate_funding_amount(amount_kobo, self.min_funding_kobo)

    def fund(
        self,
        user_id: str,
        amount_kobo: int,
        reference: str,
        transaction_id: Optional[str] = None,
    ) -> Account:
        """
        Credit a verified payment.

        The caller must have confirmed `reference` with the payment gateway.
        The same reference is credited again if funded twice.

        Returns:
            Fresh snapshot of the account after commit
        """
        validate_funding_amount(amount_kobo, self.min_funding_kobo)
        if not reference:
            raise ValidationError("Payment reference is required")

        def mutate() -> None:
            row = self.accounts.require(user_id)
            self.accounts.apply_change(row, funding_change(amount_kobo))
            self.accounts.append_transaction(
                row, build_deposit_record(amount_kobo, reference, transaction_id, self.clock())
            )

        self.run_in_transaction(mutate)
        logger.info("Account funded", extra={"user_id": user_id, "reference": reference, "amount_kobo": amount_kobo})
        return self.get_account(user_id)

    def precheck_withdrawal(self, user_id: str, amount_kobo: Optional[int], bank_account_id: Optional[str]) -> Account:
        """Run the checks that gate the PIN prompt, without touching the store"""
        account = to_account(self.accounts.require(user_id))
        check_withdrawal(account, amount_kobo, bank_account_id, self.min_withdrawal_kobo)
        if account.find_bank_account(bank_account_id) is None:
            raise BankAccountNotFoundError("Selected bank account not found")
        return account

    def request_withdrawal(
        self,
        user_id: str,
        amount_kobo: Optional[int],
        bank_account_id: Optional[str],
        pin: Optional[str],
    ) -> Account:
        """
        Accept a withdrawal request.

        Flow:
        1. Pre-checks on a fresh read (fields, balance, minimum, PIN set, PIN format)
        2. PIN authorization against the stored hash
        3. Resolve the selected bank account
        4. Deduct available balance, log a pending withdrawal, enqueue for admin review

        The deduction happens on acceptance; a later admin rejection has to credit it back.

        Raises:
            ValidationError, InsufficientBalanceError, PinNotSetError: Pre-check failed
            AuthorizationError: PIN mismatch, nothing written
            BankAccountNotFoundError: Selected bank account is no longer saved
        """

        def mutate() -> None:
            row = self.accounts.require(user_id)
            account = to_account(row)
            amount = check_withdrawal(account, amount_kobo, bank_account_id, self.min_withdrawal_kobo)
            validate_pin_format(pin)

            PinAuthorization(row.transaction_pin_hash).verify(pin)

            bank = account.find_bank_account(bank_account_id)
            if bank is None:
                raise BankAccountNotFoundError("Selected bank account not found")

            now = self.clock()
            self.queue.enqueue(build_queue_item(user_id, amount, bank, now))
            self.accounts.apply_change(row, withdrawal_change(amount))
            self.accounts.append_transaction(row, build_withdrawal_record(amount, bank, now))

        self.run_in_transaction(mutate)
        logger.info(
            "Withdrawal accepted, pending admin approval",
            extra={"user_id": user_id, "amount_kobo": amount_kobo, "bank_account_id": bank_account_id},
        )
        return self.get_account(user_id)

    def get_account(self, user_id: str) -> Account:
        return to_account(self.accounts.require(user_id))
