from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.members.models import Member


class Payment(models.Model):
    METHOD_BANK_TRANSFER = 'bank_transfer'
    METHOD_CASH = 'cash'
    METHOD_CHEQUE = 'cheque'
    METHOD_CARD = 'card'
    METHOD_CHOICES = (
        (METHOD_BANK_TRANSFER, 'Bank Transfer'),
        (METHOD_CASH, 'Cash'),
        (METHOD_CHEQUE, 'Cheque'),
        (METHOD_CARD, 'Card'),
    )

    member = models.ForeignKey(Member, on_delete=models.PROTECT, related_name='payments')
    member_name = models.CharField(max_length=200, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_date = models.DateField()
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES, default=METHOD_BANK_TRANSFER)
    reference = models.CharField(max_length=120, blank=True)
    notes = models.TextField(blank=True)
    receipt_number = models.CharField(max_length=40, unique=True)

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_payments',
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='updated_payments',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-payment_date', '-id']
        indexes = [
            models.Index(fields=['member', '-payment_date'], name='ledger_pay_member_date_idx'),
            models.Index(fields=['payment_date'], name='ledger_pay_date_idx'),
        ]

    def __str__(self):
        return f"{self.receipt_number} - {self.member_name} ({self.amount})"


class Fee(models.Model):
    MANUAL_CATEGORY_ID = 'manual'
    MANUAL_CATEGORY_NAME = 'Manual Fee'

    member = models.ForeignKey(Member, on_delete=models.PROTECT, related_name='fees')
    member_name = models.CharField(max_length=200, blank=True)
    fee_year = models.PositiveIntegerField(
        validators=[MinValueValidator(2020), MaxValueValidator(2100)],
    )
    category_id = models.CharField(max_length=64, default=MANUAL_CATEGORY_ID)
    category_name = models.CharField(max_length=120, default=MANUAL_CATEGORY_NAME)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    applied_date = models.DateField(default=timezone.localdate)
    applied_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='applied_fees',
    )
    notes = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-applied_date', '-id']
        indexes = [
            models.Index(fields=['fee_year', 'member'], name='ledger_fee_year_member_idx'),
        ]

    def __str__(self):
        return f"{self.fee_year} {self.category_name} - {self.member_name} ({self.amount})"


class ReceiptCounter(models.Model):
    year = models.PositiveIntegerField(unique=True)
    last_number = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year']

    def __str__(self):
        return f"{self.year}: {self.last_number}"
