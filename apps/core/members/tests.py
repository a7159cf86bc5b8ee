from datetime import date
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase

from apps.core.ledger.exceptions import NotFoundError
from apps.core.ledger.services import record_payment
from apps.core.users.models import AuditLog

from .categories import (
    COLTS,
    DEFAULT_CATEGORY_ID,
    FULL,
    JUNIOR_12_UNDER,
    JUNIOR_16_18,
    LIFE,
    SOCIAL,
    calculate_age,
    determine_category_by_age,
    get_all_categories,
    get_category,
)
from .models import Member
from .pricing import calculate_pro_rata_fee, pro_rata_breakdown
from .services import (
    create_member,
    deactivate_member,
    get_member,
    get_member_stats,
    get_members_with_outstanding_balance,
    update_member,
)


class CategoryTableTests(TestCase):
    as_of = date(2025, 6, 15)

    def test_age_counts_completed_years_only(self):
        self.assertEqual(calculate_age(date(2000, 6, 15), as_of=self.as_of), 25)
        self.assertEqual(calculate_age(date(2000, 6, 16), as_of=self.as_of), 24)
        self.assertEqual(calculate_age('2000-06-14', as_of=self.as_of), 25)

    def test_unparseable_date_raises_value_error(self):
        with self.assertRaises(ValueError):
            calculate_age('not-a-date', as_of=self.as_of)

    def test_age_bounds_are_inclusive(self):
        # Exactly 24 opens Full, exactly 18 closes the 16-18 junior bracket.
        self.assertEqual(determine_category_by_age(date(2001, 6, 15), as_of=self.as_of), FULL)
        self.assertEqual(determine_category_by_age(date(2007, 6, 15), as_of=self.as_of), JUNIOR_16_18)
        self.assertEqual(determine_category_by_age(date(2006, 6, 15), as_of=self.as_of), COLTS)
        self.assertEqual(determine_category_by_age(date(2025, 1, 1), as_of=self.as_of), JUNIOR_12_UNDER)
        self.assertEqual(determine_category_by_age(date(1940, 1, 1), as_of=self.as_of), LIFE)

    def test_missing_or_invalid_birth_date_uses_default(self):
        self.assertEqual(determine_category_by_age(None), DEFAULT_CATEGORY_ID)
        self.assertEqual(determine_category_by_age(''), DEFAULT_CATEGORY_ID)
        self.assertEqual(determine_category_by_age('31/02/1990'), DEFAULT_CATEGORY_ID)

    def test_special_category_is_never_auto_assigned(self):
        for years in range(0, 120):
            birth_date = date(self.as_of.year - years, 1, 1)
            self.assertNotEqual(determine_category_by_age(birth_date, as_of=self.as_of), SOCIAL)

    def test_non_special_categories_cover_every_age(self):
        for age in range(0, 1000):
            self.assertTrue(
                any(c.covers_age(age) for c in get_all_categories() if not c.is_special),
                msg=f'age {age} uncovered',
            )

    def test_table_is_sorted_by_order(self):
        orders = [category.order for category in get_all_categories()]
        self.assertEqual(orders, sorted(orders))
        self.assertIsNone(get_category('platinum'))


class ProRataFeeTests(TestCase):
    def test_new_season_months_charge_joining_fee_only(self):
        self.assertEqual(calculate_pro_rata_fee(FULL, date(2025, 1, 20)), Decimal('25'))
        self.assertEqual(calculate_pro_rata_fee(FULL, '2025-02-28'), Decimal('25'))

    def test_late_year_months_are_pro_rated(self):
        self.assertEqual(calculate_pro_rata_fee(FULL, date(2025, 9, 1)), Decimal('185'))
        self.assertEqual(calculate_pro_rata_fee(FULL, date(2025, 12, 1)), Decimal('65'))

        breakdown = pro_rata_breakdown(FULL, date(2025, 8, 10))
        self.assertEqual(breakdown['months_remaining'], 5)
        self.assertEqual(breakdown['subscription'], Decimal('200'))
        self.assertEqual(breakdown['total'], Decimal('225'))

    def test_subscription_rounds_half_up_to_whole_units(self):
        # 5/12 of 435 is 181.25, 4/12 of 300 is 100.
        self.assertEqual(pro_rata_breakdown('senior', date(2025, 8, 1))['subscription'], Decimal('181'))
        self.assertEqual(pro_rata_breakdown(COLTS, date(2025, 9, 1))['subscription'], Decimal('100'))
        # 2/12 of 75 is 12.5.
        self.assertEqual(pro_rata_breakdown(LIFE, date(2025, 11, 1))['subscription'], Decimal('13'))

    def test_mid_year_months_charge_full_year(self):
        self.assertEqual(calculate_pro_rata_fee(FULL, date(2025, 5, 5)), Decimal('505'))
        self.assertEqual(calculate_pro_rata_fee(FULL, date(2025, 3, 1)), Decimal('505'))
        self.assertEqual(calculate_pro_rata_fee(FULL, date(2025, 7, 31)), Decimal('505'))

    def test_colts_joining_fee_only_in_declared_months(self):
        self.assertEqual(calculate_pro_rata_fee(COLTS, date(2025, 10, 1)), Decimal('125'))
        self.assertEqual(calculate_pro_rata_fee(COLTS, date(2025, 4, 1)), Decimal('300'))
        self.assertEqual(calculate_pro_rata_fee(COLTS, date(2025, 1, 1)), Decimal('0'))

    def test_unknown_category_costs_nothing(self):
        self.assertEqual(calculate_pro_rata_fee('platinum', date(2025, 9, 1)), Decimal('0'))


class MemberServiceTests(TestCase):
    def setUp(self):
        self.admin = get_user_model().objects.create_user(
            username='club_admin',
            password='pass12345',
            role='admin',
        )

    def test_create_member_assigns_category_from_birth_date(self):
        member = create_member(
            {'full_name': '  Greg Fairway ', 'date_of_birth': '1960-01-01'},
            created_by=self.admin,
        )

        self.assertEqual(member.full_name, 'Greg Fairway')
        self.assertEqual(member.membership_category, determine_category_by_age(date(1960, 1, 1)))
        self.assertEqual(member.status, Member.STATUS_ACTIVE)
        self.assertEqual(member.account_balance, Decimal('0.00'))
        self.assertTrue(AuditLog.objects.filter(action='member.created', user=self.admin).exists())

    def test_create_member_without_birth_date_uses_default(self):
        member = create_member({'full_name': 'No Birthday'})
        self.assertEqual(member.membership_category, DEFAULT_CATEGORY_ID)

    def test_create_member_keeps_explicit_category_and_opening_balance(self):
        member = create_member({
            'full_name': 'Sally Social',
            'date_of_birth': '1990-05-05',
            'membership_category': SOCIAL,
            'opening_balance': '-40.00',
        })

        self.assertEqual(member.membership_category, SOCIAL)
        self.assertEqual(member.account_balance, Decimal('-40.00'))

    def test_create_member_rejects_blank_name(self):
        with self.assertRaises(ValidationError) as ctx:
            create_member({'full_name': '   '})
        self.assertIn('full_name', ctx.exception.message_dict)

    def test_profile_and_category_edits_do_not_touch_balance(self):
        member = create_member({'full_name': 'Owen Owing', 'opening_balance': '-120.00'})

        updated = update_member(
            member.pk,
            {'phone': '0400 000 000', 'membership_category': 'senior'},
            updated_by=self.admin,
        )

        updated.refresh_from_db()
        self.assertEqual(updated.phone, '0400 000 000')
        self.assertEqual(updated.membership_category, 'senior')
        self.assertEqual(updated.account_balance, Decimal('-120.00'))

    def test_profile_edit_keeps_balance_changes_made_after_the_read(self):
        member = create_member({'full_name': 'Stale Read'})
        stale = Member.objects.get(pk=member.pk)
        record_payment({
            'member_id': member.pk,
            'amount': '100.00',
            'payment_date': '2025-05-01',
            'payment_method': 'cash',
        })

        with patch('apps.core.members.services.get_member', return_value=stale):
            update_member(member.pk, {'phone': '0400'})

        member.refresh_from_db()
        self.assertEqual(member.phone, '0400')
        self.assertEqual(member.account_balance, Decimal('100.00'))

    def test_deactivate_is_a_soft_delete(self):
        member = create_member({'full_name': 'Retiring Member'})

        deactivate_member(member.pk, updated_by=self.admin)

        member.refresh_from_db()
        self.assertEqual(member.status, Member.STATUS_INACTIVE)
        self.assertFalse(Member.objects.active().filter(pk=member.pk).exists())

    def test_missing_member_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            get_member(999999)
        with self.assertRaises(NotFoundError):
            update_member(999999, {'phone': '1'})

    def test_outstanding_balances_and_stats(self):
        owing = create_member({'full_name': 'A Owing', 'opening_balance': '-75.00'})
        create_member({'full_name': 'B Credit', 'opening_balance': '20.00'})
        gone = create_member({'full_name': 'C Gone', 'opening_balance': '-10.00'})
        deactivate_member(gone.pk)

        self.assertEqual(get_members_with_outstanding_balance(), [owing])

        stats = get_member_stats()
        self.assertEqual(stats['total'], 3)
        self.assertEqual(stats['active'], 2)
        self.assertEqual(stats['inactive'], 1)
        self.assertEqual(stats['total_outstanding'], Decimal('75.00'))
        self.assertEqual(stats['by_category'][FULL], 3)


class SeedCommandTests(TestCase):
    def test_seed_creates_members_with_ledger_history(self):
        call_command('seed', members=6, seed=7, stdout=StringIO())

        self.assertEqual(Member.objects.count(), 6)
        self.assertTrue(get_user_model().objects.filter(username='treasurer').exists())
        for member in Member.objects.all():
            self.assertEqual(member.fees.count(), 1)
            paid = sum(p.amount for p in member.payments.all())
            charged = sum(f.amount for f in member.fees.all())
            self.assertEqual(member.account_balance, paid - charged)
