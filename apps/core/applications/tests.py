from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from apps.core.ledger.exceptions import NotFoundError
from apps.core.ledger.models import Fee
from apps.core.members.models import Member
from apps.core.members.pricing import pro_rata_breakdown

from .models import MembershipApplication
from .services import (
    approve_application,
    get_application_stats,
    mark_email_verified,
    reject_application,
    submit_application,
)


class ApplicationWorkflowTests(TestCase):
    def setUp(self):
        self.admin = get_user_model().objects.create_user(
            username='membership_admin',
            password='pass12345',
            role='admin',
        )
        self.application_data = {
            'full_name': 'Penny Putter',
            'email': 'penny@example.com',
            'phone': '0400 111 222',
            'date_of_birth': '1985-04-12',
            'membership_category': 'full',
        }

    def test_submit_quotes_joining_cost(self):
        application = submit_application(self.application_data)

        estimate = pro_rata_breakdown('full', timezone.localdate())
        self.assertEqual(application.status, MembershipApplication.STATUS_SUBMITTED)
        self.assertEqual(application.estimated_total_cost, estimate['total'])
        self.assertEqual(application.estimated_joining_fee, Decimal('25'))
        self.assertEqual(
            application.estimated_pro_rata_fee + application.estimated_joining_fee,
            application.estimated_total_cost,
        )

    def test_submit_assigns_category_from_birth_date(self):
        data = dict(self.application_data, membership_category='')
        application = submit_application(data)
        self.assertEqual(application.membership_category, 'full')

    def test_submit_requires_birth_date_and_email(self):
        with self.assertRaises(ValidationError) as ctx:
            submit_application({'full_name': 'Incomplete'})
        self.assertIn('email', ctx.exception.message_dict)
        self.assertIn('date_of_birth', ctx.exception.message_dict)

    def test_approval_requires_verified_email(self):
        application = submit_application(self.application_data)

        with self.assertRaises(ValidationError):
            approve_application(application.pk, approved_by=self.admin)
        self.assertFalse(Member.objects.exists())

    def test_approval_creates_member_owing_quoted_cost(self):
        application = submit_application(self.application_data)
        mark_email_verified(application.pk)

        member = approve_application(application.pk, approved_by=self.admin)

        application.refresh_from_db()
        self.assertEqual(application.status, MembershipApplication.STATUS_APPROVED)
        self.assertEqual(application.member, member)
        self.assertEqual(application.approved_by, self.admin)
        self.assertEqual(member.full_name, 'Penny Putter')
        self.assertEqual(member.membership_category, 'full')
        self.assertEqual(member.account_balance, -application.estimated_total_cost)

        fee = Fee.objects.get(member=member)
        self.assertEqual(fee.category_name, 'Full Membership')
        self.assertEqual(
            fee.notes,
            f"New Member Fee (Pro-Rata: ${application.estimated_pro_rata_fee:.2f}, "
            f"Joining: ${application.estimated_joining_fee:.2f})",
        )

    def test_approved_application_cannot_be_approved_again(self):
        application = submit_application(self.application_data)
        mark_email_verified(application.pk)
        approve_application(application.pk)

        with self.assertRaises(ValidationError):
            approve_application(application.pk)
        self.assertEqual(Member.objects.count(), 1)

    def test_rejection_requires_reason(self):
        application = submit_application(self.application_data)
        mark_email_verified(application.pk)

        with self.assertRaises(ValidationError):
            reject_application(application.pk, rejected_by=self.admin, reason='   ')

        rejected = reject_application(application.pk, rejected_by=self.admin, reason=' Waiting list full ')
        self.assertEqual(rejected.status, MembershipApplication.STATUS_REJECTED)
        self.assertEqual(rejected.rejection_reason, 'Waiting list full')

    def test_email_can_only_be_verified_once(self):
        application = submit_application(self.application_data)
        mark_email_verified(application.pk)

        with self.assertRaises(ValidationError):
            mark_email_verified(application.pk)

    def test_missing_application_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            approve_application(999999)

    def test_stats_count_each_status(self):
        submit_application(self.application_data)
        verified = submit_application(dict(self.application_data, email='other@example.com'))
        mark_email_verified(verified.pk)

        stats = get_application_stats()
        self.assertEqual(stats['submitted'], 1)
        self.assertEqual(stats['email_verified'], 1)
        self.assertEqual(stats['approved'], 0)
        self.assertEqual(stats['total'], 2)
