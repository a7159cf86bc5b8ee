from collections.abc import Mapping
from decimal import Decimal

from django import forms
from django.core.exceptions import ValidationError
from django.utils import timezone

from .models import Fee, Payment

AMOUNT_FIELD_OPTIONS = {
    'max_digits': 12,
    'decimal_places': 2,
    'min_value': Decimal('0.01'),
    'error_messages': {'min_value': 'Amount must be greater than 0.'},
}


class PaymentUpdateForm(forms.Form):
    amount = forms.DecimalField(**AMOUNT_FIELD_OPTIONS)
    payment_date = forms.DateField()
    payment_method = forms.ChoiceField(choices=Payment.METHOD_CHOICES)
    reference = forms.CharField(max_length=120, required=False)
    notes = forms.CharField(required=False)


class PaymentForm(PaymentUpdateForm):
    member_id = forms.IntegerField(min_value=1, error_messages={'required': 'Please select a member.'})
    member_name = forms.CharField(max_length=200, required=False)

    field_order = ['member_id', 'member_name', 'amount', 'payment_date', 'payment_method', 'reference', 'notes']


class FeeForm(forms.Form):
    member_id = forms.IntegerField(min_value=1, error_messages={'required': 'Member ID is required.'})
    member_name = forms.CharField(max_length=200, required=False)
    amount = forms.DecimalField(**AMOUNT_FIELD_OPTIONS)
    fee_year = forms.IntegerField(min_value=2020, max_value=2100, required=False)
    category_id = forms.CharField(max_length=64, required=False)
    category_name = forms.CharField(max_length=120, required=False)
    notes = forms.CharField(max_length=255, required=False)

    def clean_fee_year(self):
        return self.cleaned_data.get('fee_year') or timezone.localdate().year

    def clean_category_id(self):
        return (self.cleaned_data.get('category_id') or '').strip() or Fee.MANUAL_CATEGORY_ID

    def clean_category_name(self):
        return (self.cleaned_data.get('category_name') or '').strip() or Fee.MANUAL_CATEGORY_NAME


def clean_input(form_class, data):
    """Validate ``data`` with ``form_class`` and return the cleaned values."""
    if data is not None and not isinstance(data, Mapping):
        raise ValidationError('Input must be a mapping of field values.')
    form = form_class(data=data or {})
    if not form.is_valid():
        raise ValidationError(form.errors.as_data())
    return form.cleaned_data


def validate_fee_year(fee_year):
    field = forms.IntegerField(min_value=2020, max_value=2100)
    try:
        return field.clean(fee_year)
    except ValidationError as exc:
        raise ValidationError({'fee_year': exc.error_list})


def clean_category_fee_overrides(overrides):
    """Map category ids to non-negative fee amounts, rejecting bad values."""
    field = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    cleaned = {}
    errors = {}
    for category_id, amount in (overrides or {}).items():
        if amount in (None, ''):
            continue
        try:
            cleaned[str(category_id)] = field.clean(amount)
        except ValidationError as exc:
            errors[str(category_id)] = exc.error_list
    if errors:
        raise ValidationError(errors)
    return cleaned
