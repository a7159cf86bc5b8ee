from decimal import Decimal

from django.db import models
from django.utils import timezone

from .categories import get_category
from .managers import MemberManager


class Member(models.Model):
    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    )

    full_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    golf_australia_id = models.CharField(max_length=20, blank=True)
    emergency_contact = models.CharField(max_length=200, blank=True)
    date_joined = models.DateField(default=timezone.localdate)

    # Category id from the static table; unknown ids are kept as stored.
    membership_category = models.CharField(max_length=64)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    # Positive means the member is in credit, negative means they owe the club.
    # Only ledger services change this value.
    account_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        editable=False,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MemberManager()

    class Meta:
        ordering = ['full_name', 'id']
        indexes = [
            models.Index(fields=['status', 'membership_category'], name='members_status_cat_idx'),
            models.Index(fields=['status', 'account_balance'], name='members_status_balance_idx'),
        ]

    @property
    def category(self):
        return get_category(self.membership_category)

    @property
    def category_name(self):
        category = self.category
        return category.name if category else self.membership_category

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    def __str__(self):
        return self.full_name
