"""Transaction Coordinator.

Runs a unit of work inside one store transaction: commit on success,
abort and re-raise on failure, and always release the session. The retrying
variant repeats the whole cycle for failures the store classifies as
transient.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from bookstore.domain.exceptions import ValidationError
from bookstore.domain.repository.store import Transaction, TransactionalStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
Work = Callable[[Transaction], T]


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    retry_delay: float = 0.5  # seconds, multiplied by the attempt number

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValidationError("max_retries must be at least 1")
        if self.retry_delay < 0:
            raise ValidationError("retry_delay cannot be negative")


class TransactionCoordinator:

    def __init__(
        self,
        store: TransactionalStore,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store = store
        self._sleep = sleep

    def run_in_transaction(self, work: Work[T]) -> T:
        """Run *work* in a single transaction and return its result."""
        tx = self._store.begin()
        logger.debug("Transaction started")
        try:
            result = work(tx)
            tx.commit()
            logger.debug("Transaction committed")
            return result
        except BaseException:
            tx.abort()
            logger.debug("Transaction aborted")
            raise
        finally:
            tx.close()

    def run_in_transaction_with_retry(
        self,
        work: Work[T],
        policy: RetryPolicy | None = None,
    ) -> T:
        """Like ``run_in_transaction`` but retries transient store failures.

        The delay before attempt ``n + 1`` is ``retry_delay * n``. Non-transient
        errors propagate immediately; after the last attempt the last error
        propagates.
        """
        policy = policy or RetryPolicy()

        attempt = 1
        while True:
            try:
                return self.run_in_transaction(work)
            except Exception as exc:
                if not self._store.is_transient(exc) or attempt >= policy.max_retries:
                    raise
                logger.warning(
                    "Transaction attempt %d/%d failed with transient error: %s. Retrying...",
                    attempt,
                    policy.max_retries,
                    exc,
                )
                self._sleep(policy.retry_delay * attempt)
                attempt += 1
