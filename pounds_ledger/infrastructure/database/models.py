"""SQLAlchemy ORM models for the account record store"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountRecord(Base):
    """One ledger record per user"""

    __tablename__ = "account"

    user_id = Column(Text, primary_key=True)
    available_for_withdrawal_kobo = Column(BigInteger, nullable=False, default=0)
    total_earnings_kobo = Column(BigInteger, nullable=False, default=0)
    pending_earnings_kobo = Column(BigInteger, nullable=False, default=0)
    bonus_earnings_kobo = Column(BigInteger, nullable=False, default=0)
    total_funded_kobo = Column(BigInteger, nullable=False, default=0)
    transaction_pin_hash = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # UPDATEs carry "WHERE version = :old"; a concurrent writer raises StaleDataError on flush
    __mapper_args__ = {"version_id_col": version}

    bank_accounts = relationship(
        "BankAccountRecord",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="BankAccountRecord.created_at",
    )
    transactions = relationship(
        "LedgerTransaction",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="LedgerTransaction.pk",
    )


class BankAccountRecord(Base):
    """Saved payout destination"""

    __tablename__ = "bank_account"
    __table_args__ = (UniqueConstraint("user_id", "bank_code", "account_number", name="uq_bank_account_per_user"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, ForeignKey("account.user_id", ondelete="CASCADE"), nullable=False, index=True)
    bank_name = Column(Text, nullable=False)
    bank_code = Column(String(16), nullable=False)
    account_number = Column(String(20), nullable=False)
    account_name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    account = relationship("AccountRecord", back_populates="bank_accounts")


class LedgerTransaction(Base):
    """Transaction log entry. txn_id is not unique: duplicate funding references are stored as-is."""

    __tablename__ = "ledger_transaction"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    txn_id = Column(Text, nullable=False)
    user_id = Column(Text, ForeignKey("account.user_id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(16), nullable=False)
    amount_kobo = Column(BigInteger, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    status = Column(String(16), nullable=False)
    description = Column(Text, nullable=False)
    reference = Column(Text, nullable=True, index=True)

    account = relationship("AccountRecord", back_populates="transactions")


class WithdrawalQueueEntry(Base):
    """Withdrawal awaiting admin review; consumed by the admin process"""

    __tablename__ = "withdrawal_request"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount_kobo = Column(BigInteger, nullable=False)
    bank_name = Column(Text, nullable=False)
    bank_code = Column(String(16), nullable=False)
    account_number = Column(String(20), nullable=False)
    account_name = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    status = Column(String(16), nullable=False, default="pending", index=True)
