import logging
from functools import wraps

from django.conf import settings
from django.db import OperationalError, transaction
from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from .exceptions import TransactionConflictError

logger = logging.getLogger(__name__)


def ledger_transaction(func):
    """Run ``func`` as one atomic block, retrying on database conflicts.

    Lock timeouts and serialization failures surface as ``OperationalError``;
    each retry starts a fresh transaction so balances are re-read. When the
    attempts run out the caller gets ``TransactionConflictError``.
    """
    atomic_func = transaction.atomic(func)

    @wraps(func)
    def wrapper(*args, **kwargs):
        attempts = max(int(getattr(settings, 'LEDGER_TRANSACTION_ATTEMPTS', 3)), 1)
        retrying = Retrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(getattr(settings, 'LEDGER_TRANSACTION_RETRY_WAIT_SECONDS', 0.05)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        try:
            return retrying(atomic_func, *args, **kwargs)
        except RetryError as exc:
            last_error = exc.last_attempt.exception()
            raise TransactionConflictError(
                f'{func.__name__} failed after {attempts} attempts: {last_error}',
                attempts=attempts,
            ) from last_error

    return wrapper
