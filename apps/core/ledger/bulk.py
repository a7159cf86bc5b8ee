"""Bulk payment entry.

Each payment is recorded in its own ledger transaction, in input order. A
failing item is collected as a ``BatchItemError`` and the run carries on.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import NamedTuple, Optional

from django.core.exceptions import ValidationError

from .exceptions import BatchItemError
from .models import Payment
from .services import record_payment

logger = logging.getLogger(__name__)


class BulkPaymentProgress(NamedTuple):
    index: int
    completed: int
    total: int
    percent: int
    payment: Optional[Payment] = None
    error: Optional[BatchItemError] = None


def _failure_reason(exc):
    if isinstance(exc, ValidationError):
        return '; '.join(exc.messages)
    return str(exc)


def iter_bulk_payments(payments, *, recorded_by=None):
    """Record ``payments`` one by one, yielding progress after each item."""
    payments = list(payments)
    total = len(payments)

    for index, payment_data in enumerate(payments):
        payment = None
        error = None
        try:
            payment = record_payment(payment_data, recorded_by=recorded_by)
        except Exception as exc:
            item = payment_data if isinstance(payment_data, Mapping) else {}
            error = BatchItemError(
                _failure_reason(exc),
                index=index,
                member_id=item.get('member_id'),
                member_name=item.get('member_name') or '',
            )
            logger.warning('Bulk payment item %s failed: %s', index, error.reason)

        completed = index + 1
        yield BulkPaymentProgress(
            index=index,
            completed=completed,
            total=total,
            percent=completed * 100 // total,
            payment=payment,
            error=error,
        )


def record_bulk_payments(payments, *, recorded_by=None, on_progress=None):
    results = {'successful': [], 'failed': []}

    for progress in iter_bulk_payments(payments, recorded_by=recorded_by):
        if progress.error is not None:
            results['failed'].append(progress.error)
        else:
            results['successful'].append(progress.payment)
        if on_progress is not None:
            on_progress(progress.percent)

    return results
