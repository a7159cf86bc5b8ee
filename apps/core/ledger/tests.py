from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import DatabaseError, OperationalError
from django.test import RequestFactory, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.core.members.models import Member
from apps.core.users.models import AuditLog

from . import services
from .admin import FeeAdmin, PaymentAdmin
from .bulk import iter_bulk_payments, record_bulk_payments
from .exceptions import BatchItemError, NotFoundError, TransactionConflictError
from .models import Fee, Payment, ReceiptCounter
from .receipts import format_receipt_number, generate_receipt_number
from .services import (
    apply_annual_fees,
    apply_fee_to_member,
    check_fees_applied,
    delete_payment,
    get_fee_stats,
    get_fees_for_member,
    get_payment_stats,
    get_payments_for_member,
    get_payments_in_range,
    preview_fee_application,
    record_payment,
    update_payment,
)


class LedgerBaseTestCase(TestCase):
    def setUp(self):
        self.today = timezone.localdate()
        self.treasurer = get_user_model().objects.create_user(
            username='treasurer',
            password='pass12345',
            role='edit',
        )
        self.member = Member.objects.create(
            full_name='Harriet Hook',
            membership_category='full',
            date_of_birth=date(1980, 3, 3),
        )

    def payment_data(self, **overrides):
        data = {
            'member_id': self.member.pk,
            'amount': '100.00',
            'payment_date': self.today.isoformat(),
            'payment_method': Payment.METHOD_BANK_TRANSFER,
            'reference': 'EFT-001',
        }
        data.update(overrides)
        return data

    def balance(self, member=None):
        member = member or self.member
        member.refresh_from_db()
        return member.account_balance


class ReceiptNumberTests(LedgerBaseTestCase):
    def test_sequence_starts_at_one_and_increments(self):
        numbers = [generate_receipt_number(2025) for _ in range(3)]
        self.assertEqual(numbers, ['R2025-001', 'R2025-002', 'R2025-003'])

    def test_years_have_independent_sequences(self):
        generate_receipt_number(2025)
        self.assertEqual(generate_receipt_number(2026), 'R2026-001')

    def test_sequence_grows_past_three_digits(self):
        self.assertEqual(format_receipt_number(2025, 1234), 'R2025-1234')

        Payment.objects.create(
            member=self.member,
            amount=Decimal('10.00'),
            payment_date=date(2025, 5, 1),
            receipt_number='R2025-999',
        )
        Payment.objects.create(
            member=self.member,
            amount=Decimal('10.00'),
            payment_date=date(2025, 5, 1),
            receipt_number='R2025-998',
        )
        # Timestamp fallbacks are not part of the sequence.
        Payment.objects.create(
            member=self.member,
            amount=Decimal('10.00'),
            payment_date=date(2025, 5, 1),
            receipt_number='R2025-1735689600000',
        )

        self.assertEqual(generate_receipt_number(2025), 'R2025-1000')
        self.assertEqual(generate_receipt_number(2025), 'R2025-1001')

    def test_database_failure_falls_back_to_timestamp(self):
        with patch('apps.core.ledger.receipts._locked_counter', side_effect=DatabaseError('locked')):
            with self.assertLogs('apps.core.ledger.receipts', level='ERROR'):
                number = generate_receipt_number(2025)

        self.assertRegex(number, r'^R2025-\d{13}$')
        self.assertFalse(ReceiptCounter.objects.filter(year=2025).exists())

    def test_rolled_back_payment_does_not_consume_a_number(self):
        with patch.object(Member, 'save', side_effect=DatabaseError('write failed')):
            with self.assertRaises(DatabaseError):
                record_payment(self.payment_data())

        payment = record_payment(self.payment_data())
        self.assertEqual(payment.receipt_number, format_receipt_number(self.today.year, 1))


class PaymentLedgerTests(LedgerBaseTestCase):
    def test_record_payment_credits_balance_and_issues_receipt(self):
        payment = record_payment(self.payment_data(notes='Annual sub'), recorded_by=self.treasurer)

        self.assertEqual(payment.amount, Decimal('100.00'))
        self.assertEqual(payment.member_name, 'Harriet Hook')
        self.assertEqual(payment.receipt_number, format_receipt_number(self.today.year, 1))
        self.assertEqual(payment.recorded_by, self.treasurer)
        self.assertEqual(self.balance(), Decimal('100.00'))
        self.assertTrue(
            AuditLog.objects.filter(action='payment.recorded', target_id=str(payment.pk)).exists()
        )

    def test_member_name_snapshot_can_be_supplied(self):
        payment = record_payment(self.payment_data(member_name='H. Hook'))
        self.assertEqual(payment.member_name, 'H. Hook')

    def test_invalid_input_is_rejected_before_any_write(self):
        for bad in (
            {'amount': '0'},
            {'amount': '-5'},
            {'member_id': ''},
            {'payment_date': ''},
            {'payment_method': 'bitcoin'},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ValidationError):
                    record_payment(self.payment_data(**bad))

        self.assertFalse(Payment.objects.exists())
        self.assertFalse(ReceiptCounter.objects.exists())
        self.assertEqual(self.balance(), Decimal('0.00'))

    def test_validation_error_names_the_field(self):
        with self.assertRaises(ValidationError) as ctx:
            record_payment(self.payment_data(amount='0'))
        self.assertEqual(ctx.exception.message_dict['amount'], ['Amount must be greater than 0.'])

    def test_missing_member_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            record_payment(self.payment_data(member_id=999999))
        self.assertFalse(Payment.objects.exists())

    def test_update_payment_applies_only_the_delta(self):
        payment = record_payment(self.payment_data(amount='100.00'))

        updated = update_payment(
            payment.pk,
            {
                'amount': '60.00',
                'payment_date': '2025-04-01',
                'payment_method': Payment.METHOD_CASH,
                'reference': '',
                'notes': 'Corrected amount',
            },
            updated_by=self.treasurer,
        )

        self.assertEqual(updated.amount, Decimal('60.00'))
        self.assertEqual(updated.payment_method, Payment.METHOD_CASH)
        self.assertEqual(updated.updated_by, self.treasurer)
        self.assertEqual(updated.receipt_number, payment.receipt_number)
        self.assertEqual(self.balance(), Decimal('60.00'))

        # Same amount again: no further balance change.
        update_payment(payment.pk, {
            'amount': '60.00',
            'payment_date': '2025-04-02',
            'payment_method': Payment.METHOD_CASH,
        })
        self.assertEqual(self.balance(), Decimal('60.00'))

    def test_update_payment_cannot_move_payment_to_another_member(self):
        other = Member.objects.create(full_name='Other Member', membership_category='full')
        payment = record_payment(self.payment_data())

        update_payment(payment.pk, {
            'member_id': other.pk,
            'amount': '150.00',
            'payment_date': self.today,
            'payment_method': Payment.METHOD_CARD,
        })

        payment.refresh_from_db()
        self.assertEqual(payment.member_id, self.member.pk)
        self.assertEqual(self.balance(), Decimal('150.00'))
        self.assertEqual(self.balance(other), Decimal('0.00'))

    def test_update_missing_payment_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            update_payment(999999, {
                'amount': '10.00',
                'payment_date': self.today,
                'payment_method': Payment.METHOD_CASH,
            })

    def test_delete_payment_reverses_balance(self):
        payment = record_payment(self.payment_data(amount='75.50'))

        delete_payment(payment.pk, deleted_by=self.treasurer)

        self.assertFalse(Payment.objects.filter(pk=payment.pk).exists())
        self.assertEqual(self.balance(), Decimal('0.00'))
        self.assertTrue(AuditLog.objects.filter(action='payment.deleted', user=self.treasurer).exists())

        with self.assertRaises(NotFoundError):
            delete_payment(payment.pk)

    def test_failed_balance_write_rolls_back_payment(self):
        with patch.object(Member, 'save', side_effect=DatabaseError('write failed')):
            with self.assertRaises(DatabaseError):
                record_payment(self.payment_data())

        self.assertFalse(Payment.objects.exists())
        self.assertEqual(self.balance(), Decimal('0.00'))

    def test_failed_balance_write_rolls_back_update_and_delete(self):
        payment = record_payment(self.payment_data(amount='100.00'))

        with patch.object(Member, 'save', side_effect=DatabaseError('write failed')):
            with self.assertRaises(DatabaseError):
                update_payment(payment.pk, {
                    'amount': '40.00',
                    'payment_date': self.today,
                    'payment_method': Payment.METHOD_CASH,
                })
            with self.assertRaises(DatabaseError):
                delete_payment(payment.pk)

        payment.refresh_from_db()
        self.assertEqual(payment.amount, Decimal('100.00'))
        self.assertEqual(self.balance(), Decimal('100.00'))

    def test_balance_is_conserved_across_operations(self):
        member = Member.objects.create(
            full_name='Opening Balance',
            membership_category='full',
            account_balance=Decimal('-50.00'),
        )

        first = record_payment(self.payment_data(member_id=member.pk, amount='200.00'))
        second = record_payment(self.payment_data(member_id=member.pk, amount='35.25'))
        update_payment(first.pk, {
            'amount': '180.00',
            'payment_date': self.today,
            'payment_method': Payment.METHOD_CHEQUE,
        })
        apply_fee_to_member({'member_id': member.pk, 'amount': '480.00', 'fee_year': 2025})
        apply_fee_to_member({'member_id': member.pk, 'amount': '12.10', 'fee_year': 2025})
        delete_payment(second.pk)

        payments = sum(p.amount for p in get_payments_for_member(member.pk))
        fees = sum(f.amount for f in get_fees_for_member(member.pk))
        self.assertEqual(self.balance(member), Decimal('-50.00') + payments - fees)
        self.assertEqual(self.balance(member), Decimal('-362.10'))


@override_settings(LEDGER_TRANSACTION_ATTEMPTS=3, LEDGER_TRANSACTION_RETRY_WAIT_SECONDS=0)
class LedgerTransactionRetryTests(LedgerBaseTestCase):
    def test_conflict_is_retried_with_fresh_transaction(self):
        lock_member = services._lock_member
        calls = []

        def flaky_lock(member_id):
            calls.append(member_id)
            if len(calls) == 1:
                raise OperationalError('database is locked')
            return lock_member(member_id)

        with patch('apps.core.ledger.services._lock_member', side_effect=flaky_lock):
            payment = record_payment(self.payment_data())

        self.assertEqual(len(calls), 2)
        self.assertEqual(payment.receipt_number, format_receipt_number(self.today.year, 1))
        self.assertEqual(self.balance(), Decimal('100.00'))

    def test_exhausted_retries_raise_transaction_conflict(self):
        with patch(
            'apps.core.ledger.services._lock_member',
            side_effect=OperationalError('database is locked'),
        ) as lock_member:
            with self.assertRaises(TransactionConflictError) as ctx:
                record_payment(self.payment_data())

        self.assertEqual(lock_member.call_count, 3)
        self.assertEqual(ctx.exception.attempts, 3)
        self.assertIsInstance(ctx.exception.__cause__, OperationalError)
        self.assertFalse(Payment.objects.exists())
        self.assertEqual(self.balance(), Decimal('0.00'))

    def test_not_found_is_not_retried(self):
        with patch(
            'apps.core.ledger.services._lock_member',
            side_effect=NotFoundError('Member 1 not found.'),
        ) as lock_member:
            with self.assertRaises(NotFoundError):
                record_payment(self.payment_data())

        self.assertEqual(lock_member.call_count, 1)


class FeeLedgerTests(LedgerBaseTestCase):
    def test_apply_fee_debits_balance_with_default_note(self):
        fee = apply_fee_to_member(
            {'member_id': self.member.pk, 'amount': '12.5'},
            applied_by=self.treasurer,
        )

        self.assertEqual(fee.amount, Decimal('12.50'))
        self.assertEqual(fee.fee_year, self.today.year)
        self.assertEqual(fee.category_id, Fee.MANUAL_CATEGORY_ID)
        self.assertEqual(fee.category_name, Fee.MANUAL_CATEGORY_NAME)
        self.assertEqual(fee.notes, 'Fee applied - $12.50')
        self.assertEqual(fee.member_name, 'Harriet Hook')
        self.assertEqual(self.balance(), Decimal('-12.50'))

    def test_manual_fees_for_same_year_are_allowed(self):
        apply_fee_to_member({'member_id': self.member.pk, 'amount': '10', 'fee_year': 2025})
        apply_fee_to_member({'member_id': self.member.pk, 'amount': '15', 'fee_year': 2025, 'notes': 'Locker'})

        self.assertEqual(Fee.objects.filter(member=self.member, fee_year=2025).count(), 2)
        self.assertEqual(self.balance(), Decimal('-25.00'))
        self.assertEqual(check_fees_applied(2025), {self.member.pk})
        self.assertEqual(check_fees_applied(2026), set())

    def test_invalid_fee_input_is_rejected(self):
        for bad in (
            {'member_id': self.member.pk, 'amount': '0'},
            {'member_id': self.member.pk, 'amount': '10', 'fee_year': 1999},
            {'amount': '10'},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ValidationError):
                    apply_fee_to_member(bad)

        self.assertFalse(Fee.objects.exists())

    def test_long_notes_are_rejected_not_truncated(self):
        with self.assertRaises(ValidationError) as ctx:
            apply_fee_to_member({'member_id': self.member.pk, 'amount': '10', 'notes': 'x' * 256})
        self.assertIn('notes', ctx.exception.message_dict)

        fee = apply_fee_to_member({'member_id': self.member.pk, 'amount': '10', 'notes': 'y' * 255})
        fee.refresh_from_db()
        self.assertEqual(fee.notes, 'y' * 255)

    def test_fee_for_missing_member_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            apply_fee_to_member({'member_id': 999999, 'amount': '10'})

    def test_failed_balance_write_rolls_back_fee(self):
        with patch.object(Member, 'save', side_effect=DatabaseError('write failed')):
            with self.assertRaises(DatabaseError):
                apply_fee_to_member({'member_id': self.member.pk, 'amount': '10'})

        self.assertFalse(Fee.objects.exists())
        self.assertEqual(self.balance(), Decimal('0.00'))


class AnnualFeeTests(LedgerBaseTestCase):
    def setUp(self):
        super().setUp()
        self.junior = Member.objects.create(full_name='Jimmy Junior', membership_category='junior_12_under')
        self.social = Member.objects.create(full_name='Sue Social', membership_category='social')
        self.legacy = Member.objects.create(full_name='Larry Legacy', membership_category='platinum')
        self.inactive = Member.objects.create(
            full_name='Ivy Inactive',
            membership_category='full',
            status=Member.STATUS_INACTIVE,
        )

    def details_by_member(self, results):
        return {detail['member_id']: detail for detail in results['details']}

    def test_preview_projects_totals_without_writing(self):
        first = preview_fee_application(2025)
        second = preview_fee_application(2025)

        self.assertEqual(first, second)
        self.assertEqual(first['total_members'], 3)
        self.assertEqual(first['total_amount'], Decimal('570.00'))
        self.assertEqual(first['already_applied_count'], 0)
        self.assertEqual(first['unresolved_count'], 1)
        self.assertEqual(first['breakdown']['full']['member_names'], ['Harriet Hook'])
        self.assertEqual(first['breakdown']['junior_12_under']['fee_amount'], Decimal('50.00'))
        self.assertNotIn('platinum', first['breakdown'])

        self.assertFalse(Fee.objects.exists())
        self.assertEqual(self.balance(), Decimal('0.00'))

    def test_preview_applies_overrides_and_skips_already_charged(self):
        apply_fee_to_member({'member_id': self.junior.pk, 'amount': '5', 'fee_year': 2025})

        preview = preview_fee_application(2025, {'full': '500', 'social': '0'})

        self.assertEqual(preview['already_applied_count'], 1)
        self.assertNotIn('junior_12_under', preview['breakdown'])
        self.assertEqual(preview['breakdown']['full']['fee_amount'], Decimal('500.00'))
        self.assertEqual(preview['breakdown']['social']['member_count'], 1)
        self.assertEqual(preview['total_members'], 1)
        self.assertEqual(preview['total_amount'], Decimal('500.00'))

    def test_apply_annual_fees_debits_each_active_member(self):
        results = apply_annual_fees(2025, applied_by=self.treasurer)

        self.assertEqual(results['total_members'], 4)
        self.assertEqual(results['successful'], 3)
        self.assertEqual(results['skipped'], 1)
        self.assertEqual(results['failed'], 0)
        self.assertEqual(results['total_amount'], Decimal('570.00'))

        details = self.details_by_member(results)
        self.assertEqual(details[self.legacy.pk]['status'], 'skipped')
        self.assertEqual(details[self.legacy.pk]['reason'], 'Category not found')
        self.assertNotIn(self.inactive.pk, details)

        self.assertEqual(self.balance(), Decimal('-480.00'))
        self.assertEqual(self.balance(self.junior), Decimal('-50.00'))
        self.assertEqual(self.balance(self.social), Decimal('-40.00'))
        self.assertEqual(self.balance(self.inactive), Decimal('0.00'))

        fee = Fee.objects.get(member=self.member, fee_year=2025)
        self.assertEqual(fee.category_name, 'Full Membership')
        self.assertEqual(fee.notes, '2025 Annual Membership Fee - Full Membership')
        self.assertTrue(AuditLog.objects.filter(action='fee.annual_run').exists())

    def test_second_run_for_same_year_is_skipped(self):
        apply_annual_fees(2025)
        results = apply_annual_fees(2025)

        self.assertEqual(results['successful'], 0)
        self.assertEqual(results['skipped'], 4)
        self.assertEqual(results['total_amount'], Decimal('0.00'))
        details = self.details_by_member(results)
        self.assertEqual(details[self.member.pk]['reason'], 'Fees already applied for 2025')
        self.assertEqual(self.balance(), Decimal('-480.00'))
        self.assertEqual(Fee.objects.filter(fee_year=2025).count(), 3)

    def test_zero_override_skips_category(self):
        results = apply_annual_fees(2025, {'social': '0', 'full': '450.00'})

        details = self.details_by_member(results)
        self.assertEqual(details[self.social.pk]['status'], 'skipped')
        self.assertEqual(details[self.social.pk]['reason'], 'No fee due for category')
        self.assertEqual(details[self.member.pk]['fee_amount'], Decimal('450.00'))
        self.assertEqual(self.balance(self.social), Decimal('0.00'))
        self.assertEqual(self.balance(), Decimal('-450.00'))

    def test_invalid_overrides_are_rejected_before_writing(self):
        with self.assertRaises(ValidationError) as ctx:
            apply_annual_fees(2025, {'full': '-1'})
        self.assertIn('full', ctx.exception.message_dict)

        with self.assertRaises(ValidationError):
            apply_annual_fees(1999)

        self.assertFalse(Fee.objects.exists())

    def test_one_member_failure_does_not_stop_the_run(self):
        lock_member = services._lock_member
        junior_pk = self.junior.pk

        def failing_lock(member_id):
            if member_id == junior_pk:
                raise DatabaseError('disk I/O error')
            return lock_member(member_id)

        with patch('apps.core.ledger.services._lock_member', side_effect=failing_lock):
            results = apply_annual_fees(2025)

        self.assertEqual(results['successful'], 2)
        self.assertEqual(results['failed'], 1)
        details = self.details_by_member(results)
        self.assertEqual(details[junior_pk]['status'], 'failed')
        self.assertEqual(details[junior_pk]['reason'], 'disk I/O error')
        self.assertEqual(self.balance(self.junior), Decimal('0.00'))
        self.assertEqual(self.balance(), Decimal('-480.00'))

    def test_fee_stats(self):
        apply_annual_fees(2025)

        stats = get_fee_stats(2025)
        self.assertEqual(stats['total_count'], 3)
        self.assertEqual(stats['total_amount'], Decimal('570.00'))
        self.assertEqual(stats['by_category']['Full Membership'], {'count': 1, 'amount': Decimal('480.00')})


class BulkPaymentTests(LedgerBaseTestCase):
    def setUp(self):
        super().setUp()
        self.members = [self.member] + [
            Member.objects.create(full_name=f'Bulk Member {index}', membership_category='full')
            for index in range(1, 5)
        ]

    def batch(self, bad_index=2):
        items = []
        for index, member in enumerate(self.members):
            member_id = 999999 if index == bad_index else member.pk
            items.append(self.payment_data(member_id=member_id, amount=f'{(index + 1) * 10}.00'))
        return items

    def test_failed_item_is_isolated(self):
        percents = []

        results = record_bulk_payments(
            self.batch(bad_index=2),
            recorded_by=self.treasurer,
            on_progress=percents.append,
        )

        self.assertEqual(len(results['successful']), 4)
        self.assertEqual(len(results['failed']), 1)
        failure = results['failed'][0]
        self.assertIsInstance(failure, BatchItemError)
        self.assertEqual(failure.index, 2)
        self.assertEqual(failure.member_id, 999999)
        self.assertIn('not found', failure.reason)

        self.assertEqual(percents, [20, 40, 60, 80, 100])
        expected = [Decimal('10.00'), Decimal('20.00'), Decimal('0.00'), Decimal('40.00'), Decimal('50.00')]
        self.assertEqual([self.balance(member) for member in self.members], expected)

    def test_failure_position_does_not_matter(self):
        for bad_index in (0, 4):
            with self.subTest(bad_index=bad_index):
                results = record_bulk_payments(self.batch(bad_index=bad_index))
                self.assertEqual(len(results['successful']), 4)
                self.assertEqual(results['failed'][0].index, bad_index)

    def test_progress_stream_is_monotonic_and_ends_at_100(self):
        items = [self.payment_data(amount='5.00') for _ in range(3)]
        items[1]['amount'] = '0'

        progress = list(iter_bulk_payments(items))

        self.assertEqual([p.percent for p in progress], [33, 66, 100])
        self.assertEqual([p.completed for p in progress], [1, 2, 3])
        self.assertIsNone(progress[0].error)
        self.assertEqual(progress[1].error.reason, 'Amount must be greater than 0.')
        self.assertEqual(
            [p.payment.receipt_number for p in progress if p.payment],
            [format_receipt_number(self.today.year, 1), format_receipt_number(self.today.year, 2)],
        )

    def test_malformed_items_are_collected_as_failures(self):
        items = [self.payment_data(amount='10.00'), ['not', 'a', 'mapping'], 'junk', self.payment_data(amount='20.00')]

        results = record_bulk_payments(items)

        self.assertEqual(len(results['successful']), 2)
        self.assertEqual([failure.index for failure in results['failed']], [1, 2])
        for failure in results['failed']:
            self.assertIsNone(failure.member_id)
            self.assertEqual(failure.reason, 'Input must be a mapping of field values.')
        self.assertEqual(self.balance(), Decimal('30.00'))

    def test_empty_batch(self):
        self.assertEqual(record_bulk_payments([]), {'successful': [], 'failed': []})


class LedgerReportTests(LedgerBaseTestCase):
    def test_payment_queries_and_stats(self):
        record_payment(self.payment_data(amount='100.00', payment_date='2025-03-10'))
        record_payment(self.payment_data(
            amount='40.00',
            payment_date='2025-03-20',
            payment_method=Payment.METHOD_CASH,
        ))
        record_payment(self.payment_data(amount='25.00', payment_date='2024-12-31'))

        in_march = get_payments_in_range(date(2025, 3, 1), date(2025, 3, 31))
        self.assertEqual([p.amount for p in in_march], [Decimal('40.00'), Decimal('100.00')])
        self.assertEqual(len(get_payments_for_member(self.member.pk)), 3)

        stats = get_payment_stats(2025)
        self.assertEqual(stats['total_count'], 2)
        self.assertEqual(stats['total_amount'], Decimal('140.00'))
        self.assertEqual(stats['by_method'][Payment.METHOD_CASH], Decimal('40.00'))
        self.assertEqual(stats['by_method'][Payment.METHOD_CARD], Decimal('0.00'))
        self.assertEqual(stats['by_month'], {'2025-03': Decimal('140.00')})


class LedgerAdminTests(LedgerBaseTestCase):
    def setUp(self):
        super().setUp()
        self.superuser = get_user_model().objects.create_superuser('owner', 'owner@example.com', 'pass12345')
        self.client.force_login(self.superuser)
        self.payment = record_payment(self.payment_data(amount='100.00'))

    def test_payment_admin_is_browse_only(self):
        change_url = reverse('admin:ledger_payment_change', args=[self.payment.pk])

        self.assertEqual(self.client.get(reverse('admin:ledger_payment_changelist')).status_code, 200)
        self.assertEqual(self.client.get(change_url).status_code, 200)
        self.assertEqual(self.client.get(reverse('admin:ledger_payment_add')).status_code, 403)

        response = self.client.post(change_url, {
            'amount': '10.00',
            'payment_date': self.today.isoformat(),
            'payment_method': Payment.METHOD_CASH,
        })
        self.assertEqual(response.status_code, 403)

        response = self.client.post(
            reverse('admin:ledger_payment_delete', args=[self.payment.pk]),
            {'post': 'yes'},
        )
        self.assertEqual(response.status_code, 403)

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.amount, Decimal('100.00'))
        self.assertEqual(self.balance(), Decimal('100.00'))

    def test_fee_admin_is_browse_only(self):
        fee = apply_fee_to_member({'member_id': self.member.pk, 'amount': '30.00', 'fee_year': 2025})

        response = self.client.post(
            reverse('admin:ledger_fee_delete', args=[fee.pk]),
            {'post': 'yes'},
        )
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Fee.objects.filter(pk=fee.pk).exists())
        self.assertEqual(self.balance(), Decimal('70.00'))

    def test_bulk_delete_action_is_not_offered(self):
        request = RequestFactory().get('/')
        request.user = self.superuser

        for model, model_admin in ((Payment, PaymentAdmin), (Fee, FeeAdmin)):
            with self.subTest(model=model.__name__):
                actions = model_admin(model, admin.site).get_actions(request)
                self.assertNotIn('delete_selected', actions)
