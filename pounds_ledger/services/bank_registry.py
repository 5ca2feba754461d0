"""Bank account registry: saved payout destinations per account"""

import uuid
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pounds_ledger.domain.exceptions import (
    BankAccountNotFoundError,
    DomainException,
    DuplicateBankAccountError,
    ValidationError,
)
from pounds_ledger.domain.models import BankAccount
from pounds_ledger.infrastructure.clients.bank_resolver import ResolvedAccount
from pounds_ledger.infrastructure.database.repositories import (
    AccountRepository,
    BankAccountRepository,
    to_bank_account,
)
from pounds_ledger.services.store import StoreService


def candidate_from_resolution(resolved: ResolvedAccount, bank_name: str) -> BankAccount:
    """Build a new registry entry from a successful name resolution"""
    return BankAccount(
        id=str(uuid.uuid4()),
        bank_name=resolved.bank_name or bank_name,
        bank_code=resolved.bank_code,
        account_number=resolved.account_number,
        account_name=resolved.account_name,
    )


class BankRegistry(StoreService):
    """Add, remove and list bank accounts attached to an account record"""

    def __init__(self, db: Session, **store_options):
        super().__init__(db, **store_options)
        self.accounts = AccountRepository(db)
        self.banks = BankAccountRepository(db)

    def list_accounts(self, user_id: str) -> List[BankAccount]:
        row = self.accounts.require(user_id)
        return [to_bank_account(b) for b in row.bank_accounts]

    def add_account(self, user_id: str, candidate: BankAccount) -> BankAccount:
        """
        Save a validated bank account.

        Raises:
            ValidationError: Holder name missing (resolution did not succeed)
            DuplicateBankAccountError: Same bank code and account number already saved
        """
        if not candidate.account_name or not candidate.account_name.strip():
            raise ValidationError("Please validate a bank account first")

        def mutate() -> BankAccount:
            row = self.accounts.require(user_id)
            exists = any(
                b.account_number == candidate.account_number and b.bank_code == candidate.bank_code
                for b in row.bank_accounts
            )
            if exists:
                raise DuplicateBankAccountError("This bank account is already saved")

            self.banks.add(row, candidate)
            return candidate

        return self.run_in_transaction(mutate)

    def remove_account(self, user_id: str, bank_account_id: str) -> bool:
        """Remove a saved bank account by id"""

        def mutate() -> bool:
            row = self.accounts.require(user_id)
            db_bank = self.banks.find(row, bank_account_id)
            if db_bank is None:
                raise BankAccountNotFoundError("Bank account not found")
            self.banks.remove(row, db_bank)
            return True

        return self.run_in_transaction(mutate)

    def integrity_error(self, error: IntegrityError) -> DomainException:
        # Unique (user_id, bank_code, account_number): lost a race with a concurrent add
        return DuplicateBankAccountError("This bank account is already saved")
