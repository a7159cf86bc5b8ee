from django.conf import settings
from django.db import models

from apps.core.members.categories import get_category
from apps.core.members.models import Member


class MembershipApplication(models.Model):
    STATUS_SUBMITTED = 'submitted'
    STATUS_EMAIL_VERIFIED = 'email_verified'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = (
        (STATUS_SUBMITTED, 'Submitted'),
        (STATUS_EMAIL_VERIFIED, 'Email Verified'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    )

    full_name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    date_of_birth = models.DateField()
    golf_australia_id = models.CharField(max_length=20, blank=True)
    emergency_contact = models.CharField(max_length=200, blank=True)
    membership_category = models.CharField(max_length=64)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUBMITTED)

    # Joining cost quoted to the applicant at submission.
    estimated_pro_rata_fee = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    estimated_joining_fee = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    estimated_total_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    estimated_on = models.DateField(null=True, blank=True)

    email_verified_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_applications',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='rejected_applications',
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    member = models.OneToOneField(
        Member,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='application',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status', '-created_at'], name='applications_status_idx'),
        ]

    @property
    def category_name(self):
        category = get_category(self.membership_category)
        return category.name if category else ''

    def __str__(self):
        return f"{self.full_name} ({self.status})"
