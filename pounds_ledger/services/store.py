"""Commit helper shared by the ledger services"""

import logging
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from pounds_ledger.config import settings
from pounds_ledger.domain.exceptions import DomainException, StaleAccountError, StoreError
from pounds_ledger.infrastructure.observability.metrics import stale_write_counter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreService:
    """Base for services that read-modify-write account records"""

    def __init__(
        self,
        db: Session,
        max_retries: int | None = None,
        backoff_base: float | None = None,
    ):
        self.db = db
        self.max_retries = settings.store_max_retries if max_retries is None else max_retries
        self.backoff_base = settings.store_backoff_base if backoff_base is None else backoff_base

    def run_in_transaction(self, mutate: Callable[[], T]) -> T:
        """
        Run `mutate` and commit, retrying when the account changed concurrently.

        `mutate` must re-read everything it depends on: after a stale write the
        session is rolled back and every loaded object is expired.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base ...
        - Only StaleDataError (version mismatch) is retried
        - Domain errors roll back and propagate unchanged

        Raises:
            StaleAccountError: Version conflict persisted through every attempt
            StoreError: Any other database failure (see integrity_error for constraint violations)
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                result = mutate()
                self.db.commit()
                return result

            except StaleDataError as e:
                self.db.rollback()
                stale_write_counter.inc()
                if attempt >= self.max_retries:
                    raise StaleAccountError("Account was updated concurrently, please try again") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                logger.warning(
                    f"Stale account write, retrying in {backoff}s",
                    extra={"attempt": attempt},
                )
                time.sleep(backoff)

            except DomainException:
                self.db.rollback()
                raise

            except IntegrityError as e:
                self.db.rollback()
                raise self.integrity_error(e) from e

            except SQLAlchemyError as e:
                self.db.rollback()
                raise StoreError(f"Account store write failed: {e}") from e

    def integrity_error(self, error: IntegrityError) -> DomainException:
        """Map a constraint violation to a domain error"""
        return StoreError(f"Account store rejected the write: {error.orig}")
