"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

DEPOSIT = "deposit"
WITHDRAWAL = "withdrawal"

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"


@dataclass
class BankAccount:
    """Validated payout destination"""

    id: str
    bank_name: str
    bank_code: str
    account_number: str
    account_name: str  # Holder name returned by bank resolution


@dataclass
class TransactionRecord:
    """Entry in an account's transaction log"""

    id: str
    type: str  # "deposit" or "withdrawal"
    amount_kobo: int
    date: datetime
    status: str  # "pending" | "completed" | "failed"
    description: str
    reference: Optional[str] = None


@dataclass
class Account:
    """Snapshot of a user's ledger record"""

    user_id: str
    available_for_withdrawal_kobo: int = 0
    total_earnings_kobo: int = 0
    pending_earnings_kobo: int = 0
    bonus_earnings_kobo: int = 0
    total_funded_kobo: int = 0
    has_transaction_pin: bool = False
    bank_accounts: List[BankAccount] = field(default_factory=list)
    transactions: List[TransactionRecord] = field(default_factory=list)

    def find_bank_account(self, bank_account_id: str) -> Optional[BankAccount]:
        return next((b for b in self.bank_accounts if b.id == bank_account_id), None)


@dataclass
class BalanceChange:
    """Deltas to apply to an account's balance fields"""

    available_for_withdrawal_kobo: int = 0
    total_earnings_kobo: int = 0
    total_funded_kobo: int = 0


@dataclass
class WithdrawalQueueItem:
    """Pending payout request for admin review"""

    user_id: str
    amount_kobo: int
    bank_name: str
    bank_code: str
    account_number: str
    account_name: str
    timestamp: datetime
    status: str = PENDING
