from decimal import Decimal

from django import forms

from .categories import category_choices
from .models import Member


class MemberForm(forms.ModelForm):
    membership_category = forms.ChoiceField(choices=(), required=False)

    class Meta:
        model = Member
        fields = [
            'full_name',
            'email',
            'phone',
            'address',
            'date_of_birth',
            'golf_australia_id',
            'emergency_contact',
            'date_joined',
            'membership_category',
            'status',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['membership_category'].choices = [('', 'Assign from date of birth')] + category_choices()
        self.fields['status'].required = False
        self.fields['date_joined'].required = False

    def clean_full_name(self):
        full_name = (self.cleaned_data.get('full_name') or '').strip()
        if not full_name:
            raise forms.ValidationError('Full name is required.')
        return full_name


class MemberCreateForm(MemberForm):
    opening_balance = forms.DecimalField(max_digits=12, decimal_places=2, required=False)

    def clean_opening_balance(self):
        return self.cleaned_data.get('opening_balance') or Decimal('0.00')
