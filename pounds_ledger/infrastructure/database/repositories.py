"""Data access layer for accounts, bank accounts and the withdrawal queue"""

from typing import List, Optional
from sqlalchemy.orm import Session
from pounds_ledger.infrastructure.database.models import (
    AccountRecord,
    BankAccountRecord,
    LedgerTransaction,
    WithdrawalQueueEntry,
)
from pounds_ledger.domain.exceptions import AccountNotFoundError
from pounds_ledger.domain.models import (
    Account,
    BalanceChange,
    BankAccount,
    TransactionRecord,
    WithdrawalQueueItem,
)


def to_bank_account(row: BankAccountRecord) -> BankAccount:
    return BankAccount(
        id=row.id,
        bank_name=row.bank_name,
        bank_code=row.bank_code,
        account_number=row.account_number,
        account_name=row.account_name,
    )


def to_transaction(row: LedgerTransaction) -> TransactionRecord:
    return TransactionRecord(
        id=row.txn_id,
        type=row.type,
        amount_kobo=row.amount_kobo,
        date=row.date,
        status=row.status,
        description=row.description,
        reference=row.reference,
    )


def to_account(row: AccountRecord) -> Account:
    """Detached snapshot of an account row and its child collections"""
    return Account(
        user_id=row.user_id,
        available_for_withdrawal_kobo=row.available_for_withdrawal_kobo,
        total_earnings_kobo=row.total_earnings_kobo,
        pending_earnings_kobo=row.pending_earnings_kobo,
        bonus_earnings_kobo=row.bonus_earnings_kobo,
        total_funded_kobo=row.total_funded_kobo,
        has_transaction_pin=row.transaction_pin_hash is not None,
        bank_accounts=[to_bank_account(b) for b in row.bank_accounts],
        transactions=[to_transaction(t) for t in row.transactions],
    )


class AccountRepository:
    """Repository for account records"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[AccountRecord]:
        return self.db.get(AccountRecord, user_id)

    def require(self, user_id: str) -> AccountRecord:
        """Fetch account or raise AccountNotFoundError"""
        row = self.get(user_id)
        if row is None:
            raise AccountNotFoundError(f"Account {user_id} not found")
        return row

    def create(self, user_id: str) -> AccountRecord:
        row = AccountRecord(
            user_id=user_id,
            available_for_withdrawal_kobo=0,
            total_earnings_kobo=0,
            pending_earnings_kobo=0,
            bonus_earnings_kobo=0,
            total_funded_kobo=0,
        )
        self.db.add(row)
        return row

    def apply_change(self, row: AccountRecord, change: BalanceChange) -> None:
        """Add balance deltas; flushing bumps the row version"""
        row.available_for_withdrawal_kobo += change.available_for_withdrawal_kobo
        row.total_earnings_kobo += change.total_earnings_kobo
        row.total_funded_kobo += change.total_funded_kobo

    def append_transaction(self, row: AccountRecord, record: TransactionRecord) -> LedgerTransaction:
        db_txn = LedgerTransaction(
            txn_id=record.id,
            type=record.type,
            amount_kobo=record.amount_kobo,
            date=record.date,
            status=record.status,
            description=record.description,
            reference=record.reference,
        )
        row.transactions.append(db_txn)
        return db_txn

    def list_transactions(self, user_id: str, limit: int = 50) -> List[LedgerTransaction]:
        """Most recent transactions first"""
        return (
            self.db.query(LedgerTransaction)
            .filter(LedgerTransaction.user_id == user_id)
            .order_by(LedgerTransaction.pk.desc())
            .limit(limit)
            .all()
        )


class BankAccountRepository:
    """Repository for saved payout bank accounts"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, row: AccountRecord, bank: BankAccount) -> BankAccountRecord:
        db_bank = BankAccountRecord(
            id=bank.id,
            bank_name=bank.bank_name,
            bank_code=bank.bank_code,
            account_number=bank.account_number,
            account_name=bank.account_name,
        )
        row.bank_accounts.append(db_bank)
        return db_bank

    def find(self, row: AccountRecord, bank_account_id: str) -> Optional[BankAccountRecord]:
        return next((b for b in row.bank_accounts if b.id == bank_account_id), None)

    def remove(self, row: AccountRecord, db_bank: BankAccountRecord) -> None:
        # delete-orphan cascade deletes the row on flush
        row.bank_accounts.remove(db_bank)


class WithdrawalQueueRepository:
    """Write side of the admin withdrawal queue"""

    def __init__(self, db: Session):
        self.db = db

    def enqueue(self, item: WithdrawalQueueItem) -> WithdrawalQueueEntry:
        entry = WithdrawalQueueEntry(
            user_id=item.user_id,
            amount_kobo=item.amount_kobo,
            bank_name=item.bank_name,
            bank_code=item.bank_code,
            account_number=item.account_number,
            account_name=item.account_name,
            timestamp=item.timestamp,
            status=item.status,
        )
        self.db.add(entry)
        return entry
