"""Account lifecycle, read views and transaction PIN setup"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pounds_ledger.domain.authorization import hash_pin, pin_matches, validate_pin_format
from pounds_ledger.domain.exceptions import (
    AuthorizationError,
    DomainException,
    DuplicateAccountError,
    ValidationError,
)
from pounds_ledger.domain.models import Account, TransactionRecord
from pounds_ledger.infrastructure.database.repositories import (
    AccountRepository,
    to_account,
    to_transaction,
)
from pounds_ledger.services.store import StoreService


class AccountService(StoreService):

    def __init__(self, db: Session, **store_options):
        super().__init__(db, **store_options)
        self.accounts = AccountRepository(db)

    def open_account(self, user_id: str) -> Account:
        """Create an empty account record for a user"""
        if not user_id or not user_id.strip():
            raise ValidationError("User id is required")

        def mutate() -> None:
            if self.accounts.get(user_id) is not None:
                raise DuplicateAccountError(f"Account {user_id} already exists")
            self.accounts.create(user_id)

        self.run_in_transaction(mutate)
        return self.get_account(user_id)

    def get_account(self, user_id: str) -> Account:
        return to_account(self.accounts.require(user_id))

    def list_transactions(self, user_id: str, limit: int = 50) -> List[TransactionRecord]:
        self.accounts.require(user_id)
        return [to_transaction(t) for t in self.accounts.list_transactions(user_id, limit=limit)]

    def set_transaction_pin(self, user_id: str, pin: str, current_pin: Optional[str] = None) -> Account:
        """
        Set or change the transaction PIN.

        Changing an existing PIN requires the current one.

        Raises:
            ValidationError: PIN is not four digits
            AuthorizationError: Current PIN missing or wrong
        """
        new_hash = hash_pin(pin)

        def mutate() -> None:
            row = self.accounts.require(user_id)
            if row.transaction_pin_hash is not None:
                if current_pin is None:
                    raise AuthorizationError("Current transaction PIN is required")
                if not pin_matches(row.transaction_pin_hash, validate_pin_format(current_pin)):
                    raise AuthorizationError("Invalid transaction PIN")
            row.transaction_pin_hash = new_hash

        self.run_in_transaction(mutate)
        return self.get_account(user_id)

    def integrity_error(self, error: IntegrityError) -> DomainException:
        # Primary key collision: another request opened the same account first
        return DuplicateAccountError("Account already exists")
