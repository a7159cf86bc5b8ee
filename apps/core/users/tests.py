from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase

from apps.core.members.models import Member
from apps.core.users.audit import log_audit_event
from apps.core.users.models import AuditLog, User


class UserRoleTests(TestCase):
    def test_new_user_defaults_to_view_role(self):
        user = get_user_model().objects.create_user(username='clerk', password='pass12345')
        self.assertEqual(user.role, User.ROLE_VIEW)

    def test_superuser_is_always_super_admin(self):
        user = get_user_model().objects.create_superuser('owner', 'owner@example.com', 'pass12345')
        self.assertEqual(user.role, User.ROLE_SUPER_ADMIN)

        user.role = User.ROLE_VIEW
        user.save()
        user.refresh_from_db()
        self.assertEqual(user.role, User.ROLE_SUPER_ADMIN)


class AuditLogTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(
            username='treasurer',
            password='pass12345',
            role=User.ROLE_ADMIN,
        )
        self.member = Member.objects.create(full_name='Ada Birdie', membership_category='full')

    def test_records_target_and_user(self):
        log_audit_event('member.updated', user=self.user, target=self.member, details='Fields=phone')

        entry = AuditLog.objects.get()
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.target_model, 'Member')
        self.assertEqual(entry.target_id, str(self.member.pk))
        self.assertEqual(entry.details, 'Fields=phone')

    def test_unsaved_user_is_recorded_as_system(self):
        log_audit_event('fee.annual_run', user=User(username='ghost'))

        self.assertIsNone(AuditLog.objects.get().user)

    def test_database_error_does_not_propagate(self):
        with patch.object(AuditLog.objects, 'create', side_effect=DatabaseError('disk full')):
            with self.assertLogs('apps.core.users.audit', level='ERROR'):
                log_audit_event('payment.recorded', target=self.member)

        self.assertFalse(AuditLog.objects.exists())
