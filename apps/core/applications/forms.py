from django import forms

from apps.core.members.categories import category_choices

from .models import MembershipApplication


class MembershipApplicationForm(forms.ModelForm):
    membership_category = forms.ChoiceField(choices=(), required=False)

    class Meta:
        model = MembershipApplication
        fields = [
            'full_name',
            'email',
            'phone',
            'address',
            'date_of_birth',
            'golf_australia_id',
            'emergency_contact',
            'membership_category',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['membership_category'].choices = [('', 'Assign from date of birth')] + category_choices()

    def clean_full_name(self):
        full_name = (self.cleaned_data.get('full_name') or '').strip()
        if not full_name:
            raise forms.ValidationError('Full name is required.')
        return full_name
