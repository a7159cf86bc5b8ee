from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Sum
from django.forms.models import model_to_dict
from django.utils import timezone

from apps.core.ledger.exceptions import NotFoundError
from apps.core.users.audit import log_audit_event

from .categories import determine_category_by_age
from .forms import MemberCreateForm, MemberForm
from .models import Member


def _raise_form_errors(form):
    raise ValidationError(form.errors.as_data())


def get_member(member_id, *, for_update=False) -> Member:
    queryset = Member.objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    member = queryset.filter(pk=member_id).first()
    if member is None:
        raise NotFoundError(f'Member {member_id} not found.')
    return member


@transaction.atomic
def create_member(member_data, *, created_by=None) -> Member:
    form = MemberCreateForm(data=member_data)
    if not form.is_valid():
        _raise_form_errors(form)

    cleaned = form.cleaned_data
    member = form.save(commit=False)
    member.membership_category = cleaned['membership_category'] or determine_category_by_age(
        cleaned.get('date_of_birth')
    )
    member.status = cleaned['status'] or Member.STATUS_ACTIVE
    member.date_joined = cleaned['date_joined'] or timezone.localdate()
    member.account_balance = cleaned['opening_balance']
    member.save()

    log_audit_event(
        action='member.created',
        user=created_by,
        target=member,
        details=f"Category={member.membership_category}, OpeningBalance={member.account_balance}",
    )
    return member


@transaction.atomic
def update_member(member_id, member_data, *, updated_by=None) -> Member:
    member = get_member(member_id, for_update=True)

    data = model_to_dict(member, fields=MemberForm.Meta.fields)
    data.update(member_data)
    form = MemberForm(data=data, instance=member)
    if not form.is_valid():
        _raise_form_errors(form)

    cleaned = form.cleaned_data
    member = form.save(commit=False)
    if not cleaned['membership_category']:
        member.membership_category = determine_category_by_age(cleaned.get('date_of_birth'))
    member.status = cleaned['status'] or Member.STATUS_ACTIVE
    member.date_joined = cleaned['date_joined'] or member.date_joined or timezone.localdate()
    # Only profile columns are written; the balance belongs to the ledger.
    member.save(update_fields=[*MemberForm.Meta.fields, 'updated_at'])

    log_audit_event(
        action='member.updated',
        user=updated_by,
        target=member,
        details=f"Fields={','.join(sorted(member_data))}",
    )
    return member


@transaction.atomic
def deactivate_member(member_id, *, updated_by=None) -> Member:
    member = get_member(member_id)
    if member.status != Member.STATUS_INACTIVE:
        member.status = Member.STATUS_INACTIVE
        member.save(update_fields=['status', 'updated_at'])
        log_audit_event(action='member.deactivated', user=updated_by, target=member)
    return member


def get_members_with_outstanding_balance():
    return list(Member.objects.owing().order_by('account_balance', 'full_name'))


def get_member_stats():
    members = Member.objects.all()
    outstanding = Member.objects.owing().aggregate(total=Sum('account_balance')).get('total')

    by_category = {
        row['membership_category']: row['total']
        for row in members.values('membership_category').annotate(total=Count('id')).order_by()
    }

    return {
        'total': members.count(),
        'active': members.filter(status=Member.STATUS_ACTIVE).count(),
        'inactive': members.filter(status=Member.STATUS_INACTIVE).count(),
        # Owed money reported as a positive figure.
        'total_outstanding': abs(outstanding or Decimal('0.00')),
        'by_category': by_category,
    }
