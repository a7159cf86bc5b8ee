"""Year-scoped receipt numbers such as ``R2025-001``.

The per-year sequence lives in ``ReceiptCounter``. Reserving a number
locks that row, so calling ``generate_receipt_number`` inside a ledger
transaction ties the number to the payment: a rollback releases it and
concurrent payments queue on the lock instead of sharing a number.
"""
import logging
import time

from django.db import DatabaseError, transaction
from django.utils import timezone

from .models import Payment, ReceiptCounter

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 3
# Longer suffixes are timestamp fallbacks, not sequence numbers.
MAX_SEQUENCE_DIGITS = 9


def format_receipt_number(year, sequence):
    return f"R{year}-{sequence:0{SEQUENCE_WIDTH}d}"


def _receipt_prefix(year):
    return f"R{year}-"


def _highest_issued_sequence(year):
    issued = Payment.objects.filter(
        receipt_number__gte=_receipt_prefix(year),
        receipt_number__lt=_receipt_prefix(year + 1),
    ).values_list('receipt_number', flat=True)

    highest = 0
    prefix_length = len(_receipt_prefix(year))
    for receipt_number in issued:
        suffix = receipt_number[prefix_length:]
        if suffix.isdigit() and len(suffix) <= MAX_SEQUENCE_DIGITS:
            highest = max(highest, int(suffix))
    return highest


def _locked_counter(year):
    counter = ReceiptCounter.objects.select_for_update().filter(year=year).first()
    if counter is None:
        counter = ReceiptCounter.objects.create(
            year=year,
            last_number=_highest_issued_sequence(year),
        )
    return counter


def _fallback_receipt_number(year):
    return f"R{year}-{int(time.time() * 1000)}"


def generate_receipt_number(year=None):
    year = int(year or timezone.localdate().year)

    try:
        with transaction.atomic():
            counter = _locked_counter(year)
            counter.last_number += 1
            counter.save(update_fields=['last_number', 'updated_at'])
    except DatabaseError:
        logger.exception('Receipt counter unavailable for %s, using timestamp receipt number', year)
        return _fallback_receipt_number(year)

    return format_receipt_number(year, counter.last_number)
