from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from apps.core.members.categories import get_category
from apps.core.members.models import Member
from apps.core.users.audit import log_audit_event

from .exceptions import NotFoundError
from .forms import (
    FeeForm,
    PaymentForm,
    PaymentUpdateForm,
    clean_category_fee_overrides,
    clean_input,
    validate_fee_year,
)
from .models import Fee, Payment
from .receipts import generate_receipt_number
from .transactions import ledger_transaction

logger = logging.getLogger(__name__)

DETAIL_SUCCESS = 'success'
DETAIL_SKIPPED = 'skipped'
DETAIL_FAILED = 'failed'

REASON_CATEGORY_NOT_FOUND = 'Category not found'
REASON_NO_FEE_DUE = 'No fee due for category'


def _to_decimal(value) -> Decimal:
    return Decimal(str(value or '0'))


def _quantize(value) -> Decimal:
    return _to_decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _already_applied_reason(fee_year):
    return f'Fees already applied for {fee_year}'


def _lock_member(member_id) -> Member:
    member = Member.objects.select_for_update().filter(pk=member_id).first()
    if member is None:
        raise NotFoundError(f'Member {member_id} not found.')
    return member


def _lock_payment(payment_id) -> Payment:
    payment = Payment.objects.select_for_update().filter(pk=payment_id).first()
    if payment is None:
        raise NotFoundError(f'Payment {payment_id} not found.')
    return payment


def _adjust_balance(member: Member, delta: Decimal):
    member.account_balance = _quantize(_to_decimal(member.account_balance) + delta)
    member.save(update_fields=['account_balance', 'updated_at'])


# Payments

def record_payment(payment_data, *, recorded_by=None) -> Payment:
    cleaned = clean_input(PaymentForm, payment_data)
    return _record_payment(cleaned, recorded_by=recorded_by)


@ledger_transaction
def _record_payment(cleaned, *, recorded_by=None) -> Payment:
    member = _lock_member(cleaned['member_id'])
    amount = _quantize(cleaned['amount'])

    payment = Payment.objects.create(
        member=member,
        member_name=cleaned['member_name'] or member.full_name,
        amount=amount,
        payment_date=cleaned['payment_date'],
        payment_method=cleaned['payment_method'],
        reference=cleaned['reference'],
        notes=cleaned['notes'],
        receipt_number=generate_receipt_number(),
        recorded_by=recorded_by,
    )
    _adjust_balance(member, amount)

    log_audit_event(
        action='payment.recorded',
        user=recorded_by,
        target=payment,
        details=f"Member={member.pk}, Amount={amount}, Receipt={payment.receipt_number}",
    )
    return payment


def update_payment(payment_id, payment_data, *, updated_by=None) -> Payment:
    cleaned = clean_input(PaymentUpdateForm, payment_data)
    return _update_payment(payment_id, cleaned, updated_by=updated_by)


@ledger_transaction
def _update_payment(payment_id, cleaned, *, updated_by=None) -> Payment:
    payment = _lock_payment(payment_id)
    member = _lock_member(payment.member_id)

    old_amount = _quantize(payment.amount)
    new_amount = _quantize(cleaned['amount'])
    delta = new_amount - old_amount

    payment.amount = new_amount
    payment.payment_date = cleaned['payment_date']
    payment.payment_method = cleaned['payment_method']
    payment.reference = cleaned['reference']
    payment.notes = cleaned['notes']
    payment.updated_by = updated_by
    payment.save(update_fields=[
        'amount',
        'payment_date',
        'payment_method',
        'reference',
        'notes',
        'updated_by',
        'updated_at',
    ])
    if delta:
        _adjust_balance(member, delta)

    log_audit_event(
        action='payment.updated',
        user=updated_by,
        target=payment,
        details=f"Receipt={payment.receipt_number}, Amount={old_amount}->{new_amount}",
    )
    return payment


@ledger_transaction
def delete_payment(payment_id, *, deleted_by=None):
    payment = _lock_payment(payment_id)
    member = _lock_member(payment.member_id)

    _adjust_balance(member, -_quantize(payment.amount))
    details = f"Member={member.pk}, Amount={payment.amount}, Receipt={payment.receipt_number}"
    payment.delete()

    log_audit_event(action='payment.deleted', user=deleted_by, details=details)


def get_payments_for_member(member_id):
    return list(Payment.objects.filter(member_id=member_id).order_by('-payment_date', '-id'))


def get_payments_in_range(start_date, end_date):
    return list(
        Payment.objects.filter(
            payment_date__gte=start_date,
            payment_date__lte=end_date,
        ).order_by('-payment_date', '-id')
    )


def get_payment_stats(year):
    payments = Payment.objects.filter(payment_date__year=year).values_list(
        'amount', 'payment_method', 'payment_date'
    )

    stats = {
        'year': year,
        'total_amount': Decimal('0.00'),
        'total_count': 0,
        'by_method': {method: Decimal('0.00') for method, _ in Payment.METHOD_CHOICES},
        'by_month': {},
    }
    for amount, method, payment_date in payments:
        stats['total_amount'] += amount
        stats['total_count'] += 1
        stats['by_method'][method] = stats['by_method'].get(method, Decimal('0.00')) + amount
        month = payment_date.strftime('%Y-%m')
        stats['by_month'][month] = stats['by_month'].get(month, Decimal('0.00')) + amount
    return stats


# Fees

@ledger_transaction
def _debit_fee(
    member_id,
    *,
    amount,
    fee_year,
    category_id,
    category_name,
    notes,
    member_name='',
    applied_by=None,
    skip_if_applied=False,
):
    member = _lock_member(member_id)
    if skip_if_applied and Fee.objects.filter(member=member, fee_year=fee_year).exists():
        return None

    fee = Fee.objects.create(
        member=member,
        member_name=member_name or member.full_name,
        fee_year=fee_year,
        category_id=category_id,
        category_name=category_name,
        amount=amount,
        applied_by=applied_by,
        notes=notes,
    )
    _adjust_balance(member, -amount)

    log_audit_event(
        action='fee.applied',
        user=applied_by,
        target=fee,
        details=f"Member={member.pk}, Year={fee_year}, Category={category_id}, Amount={amount}",
    )
    return fee


def apply_fee_to_member(fee_data, *, applied_by=None) -> Fee:
    cleaned = clean_input(FeeForm, fee_data)
    amount = _quantize(cleaned['amount'])
    return _debit_fee(
        cleaned['member_id'],
        amount=amount,
        fee_year=cleaned['fee_year'],
        category_id=cleaned['category_id'],
        category_name=cleaned['category_name'],
        notes=cleaned['notes'] or f"Fee applied - ${amount}",
        member_name=cleaned['member_name'],
        applied_by=applied_by,
    )


def check_fees_applied(fee_year):
    return set(
        Fee.objects.filter(fee_year=fee_year).values_list('member_id', flat=True).distinct()
    )


def _category_fee(category, overrides) -> Decimal:
    return _quantize(overrides.get(category.id, category.annual_fee))


def preview_fee_application(fee_year, category_fee_overrides=None):
    """Project an annual fee run without writing anything.

    Members already holding a fee for the year are left out; members whose
    category cannot be resolved are counted in ``unresolved_count``.
    Categories overridden to zero show in the breakdown but add nothing to
    the totals.
    """
    fee_year = validate_fee_year(fee_year)
    overrides = clean_category_fee_overrides(category_fee_overrides)
    already_applied = check_fees_applied(fee_year)

    breakdown = {}
    total_amount = Decimal('0.00')
    total_members = 0
    unresolved_count = 0

    for member in Member.objects.active().order_by('full_name', 'id'):
        if member.pk in already_applied:
            continue

        category = get_category(member.membership_category)
        if category is None:
            unresolved_count += 1
            continue

        fee_amount = _category_fee(category, overrides)
        entry = breakdown.setdefault(category.id, {
            'category_name': category.name,
            'fee_amount': fee_amount,
            'member_count': 0,
            'member_names': [],
        })
        entry['member_count'] += 1
        entry['member_names'].append(member.full_name)

        if fee_amount > 0:
            total_amount += fee_amount
            total_members += 1

    return {
        'year': fee_year,
        'total_members': total_members,
        'total_amount': total_amount,
        'breakdown': breakdown,
        'already_applied_count': len(already_applied),
        'unresolved_count': unresolved_count,
    }


def apply_annual_fees(fee_year, category_fee_overrides=None, *, applied_by=None):
    fee_year = validate_fee_year(fee_year)
    overrides = clean_category_fee_overrides(category_fee_overrides)
    already_applied = check_fees_applied(fee_year)

    results = {
        'year': fee_year,
        'total_members': 0,
        'successful': 0,
        'skipped': 0,
        'failed': 0,
        'total_amount': Decimal('0.00'),
        'details': [],
    }

    def record(member, status, **extra):
        results[status if status != DETAIL_SUCCESS else 'successful'] += 1
        results['details'].append({
            'member_id': member.pk,
            'member_name': member.full_name,
            'status': status,
            **extra,
        })

    for member in Member.objects.active().order_by('full_name', 'id'):
        if member.pk in already_applied:
            record(member, DETAIL_SKIPPED, reason=_already_applied_reason(fee_year))
            continue

        category = get_category(member.membership_category)
        if category is None:
            record(member, DETAIL_SKIPPED, reason=REASON_CATEGORY_NOT_FOUND)
            continue

        fee_amount = _category_fee(category, overrides)
        if fee_amount <= 0:
            record(member, DETAIL_SKIPPED, reason=REASON_NO_FEE_DUE)
            continue

        try:
            fee = _debit_fee(
                member.pk,
                amount=fee_amount,
                fee_year=fee_year,
                category_id=category.id,
                category_name=category.name,
                notes=f"{fee_year} Annual Membership Fee - {category.name}",
                member_name=member.full_name,
                applied_by=applied_by,
                skip_if_applied=True,
            )
        except Exception as exc:
            # One member's failure must not stop the run.
            logger.warning('Annual fee %s failed for member %s: %s', fee_year, member.pk, exc)
            record(member, DETAIL_FAILED, reason=str(exc))
            continue

        if fee is None:
            record(member, DETAIL_SKIPPED, reason=_already_applied_reason(fee_year))
            continue

        results['total_amount'] += fee_amount
        record(
            member,
            DETAIL_SUCCESS,
            category_name=category.name,
            fee_amount=fee_amount,
            fee_id=fee.pk,
        )

    results['total_members'] = len(results['details'])

    log_audit_event(
        action='fee.annual_run',
        user=applied_by,
        details=(
            f"Year={fee_year}, Successful={results['successful']}, Skipped={results['skipped']}, "
            f"Failed={results['failed']}, Total={results['total_amount']}"
        ),
    )
    return results


def get_fees_for_member(member_id):
    return list(Fee.objects.filter(member_id=member_id).order_by('-applied_date', '-id'))


def get_fee_stats(fee_year):
    fees = Fee.objects.filter(fee_year=fee_year).values_list('category_name', 'amount')

    stats = {
        'year': fee_year,
        'total_amount': Decimal('0.00'),
        'total_count': 0,
        'by_category': {},
    }
    for category_name, amount in fees:
        stats['total_amount'] += amount
        stats['total_count'] += 1
        entry = stats['by_category'].setdefault(category_name, {'count': 0, 'amount': Decimal('0.00')})
        entry['count'] += 1
        entry['amount'] += amount
    return stats
