from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.db import models


class UserManager(DjangoUserManager):
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', 'super_admin')
        return super().create_superuser(username, email=email, password=password, **extra_fields)


class User(AbstractUser):
    ROLE_VIEW = 'view'
    ROLE_EDIT = 'edit'
    ROLE_ADMIN = 'admin'
    ROLE_SUPER_ADMIN = 'super_admin'

    ROLE_CHOICES = (
        (ROLE_VIEW, 'View Only'),
        (ROLE_EDIT, 'Edit'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_SUPER_ADMIN, 'Super Admin'),
    )

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_VIEW)

    objects = UserManager()

    class Meta:
        indexes = [
            models.Index(fields=['role'], name='users_user_role_36d76d_idx'),
        ]

    def save(self, *args, **kwargs):
        if self.is_superuser and self.role != self.ROLE_SUPER_ADMIN:
            self.role = self.ROLE_SUPER_ADMIN
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.username} ({self.role})"


class AuditLog(models.Model):
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )

    action = models.CharField(max_length=100)
    target_model = models.CharField(max_length=100, blank=True)
    target_id = models.CharField(max_length=64, blank=True)
    details = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='users_audit_user_id_4b1f2e_idx'),
            models.Index(fields=['action'], name='users_audit_action_9c3d1a_idx'),
            models.Index(fields=['target_model', 'target_id'], name='users_audit_target__7e2a5b_idx'),
        ]

    def __str__(self):
        return f"{self.action} by {self.user_id or 'system'}"
