from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.ledger.exceptions import NotFoundError
from apps.core.ledger.services import apply_fee_to_member
from apps.core.members.categories import determine_category_by_age
from apps.core.members.pricing import pro_rata_breakdown
from apps.core.members.services import create_member
from apps.core.users.audit import log_audit_event

from .forms import MembershipApplicationForm
from .models import MembershipApplication

NEW_MEMBER_CATEGORY_NAME = 'New Member'


def get_application(application_id, *, for_update=False) -> MembershipApplication:
    queryset = MembershipApplication.objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    application = queryset.filter(pk=application_id).first()
    if application is None:
        raise NotFoundError(f'Application {application_id} not found.')
    return application


def _require_email_verified(application, action):
    if application.status != MembershipApplication.STATUS_EMAIL_VERIFIED:
        raise ValidationError(f'Application must be email verified before {action}.')


@transaction.atomic
def submit_application(application_data) -> MembershipApplication:
    form = MembershipApplicationForm(data=application_data)
    if not form.is_valid():
        raise ValidationError(form.errors.as_data())

    application = form.save(commit=False)
    application.membership_category = (
        form.cleaned_data['membership_category']
        or determine_category_by_age(application.date_of_birth)
    )

    application.estimated_on = timezone.localdate()
    estimate = pro_rata_breakdown(application.membership_category, application.estimated_on)
    application.estimated_pro_rata_fee = estimate['subscription']
    application.estimated_joining_fee = estimate['joining_fee']
    application.estimated_total_cost = estimate['total']
    application.status = MembershipApplication.STATUS_SUBMITTED
    application.save()
    return application


@transaction.atomic
def mark_email_verified(application_id) -> MembershipApplication:
    application = get_application(application_id, for_update=True)
    if application.status != MembershipApplication.STATUS_SUBMITTED:
        raise ValidationError('Email already verified.')

    application.status = MembershipApplication.STATUS_EMAIL_VERIFIED
    application.email_verified_at = timezone.now()
    application.save(update_fields=['status', 'email_verified_at', 'updated_at'])
    return application


@transaction.atomic
def approve_application(application_id, *, approved_by=None):
    """Turn a verified application into an active member.

    The member starts at a zero balance and is charged the quoted joining
    cost as a single fee. Nothing is kept if any step fails.
    """
    application = get_application(application_id, for_update=True)
    _require_email_verified(application, 'approval')

    member = create_member(
        {
            'full_name': application.full_name,
            'email': application.email,
            'phone': application.phone,
            'address': application.address,
            'date_of_birth': application.date_of_birth,
            'golf_australia_id': application.golf_australia_id,
            'emergency_contact': application.emergency_contact,
            'membership_category': application.membership_category,
            'status': 'active',
        },
        created_by=approved_by,
    )

    if application.estimated_total_cost > 0:
        apply_fee_to_member(
            {
                'member_id': member.pk,
                'member_name': member.full_name,
                'amount': application.estimated_total_cost,
                'fee_year': timezone.localdate().year,
                'category_id': application.membership_category,
                'category_name': application.category_name or NEW_MEMBER_CATEGORY_NAME,
                'notes': (
                    f"New Member Fee (Pro-Rata: ${application.estimated_pro_rata_fee:.2f}, "
                    f"Joining: ${application.estimated_joining_fee:.2f})"
                ),
            },
            applied_by=approved_by,
        )

    application.status = MembershipApplication.STATUS_APPROVED
    application.approved_by = approved_by
    application.approved_at = timezone.now()
    application.member = member
    application.save(update_fields=['status', 'approved_by', 'approved_at', 'member', 'updated_at'])

    log_audit_event(
        action='application.approved',
        user=approved_by,
        target=application,
        details=f"Member={member.pk}, Total={application.estimated_total_cost}",
    )
    member.refresh_from_db()
    return member


@transaction.atomic
def reject_application(application_id, *, rejected_by=None, reason=''):
    application = get_application(application_id, for_update=True)
    _require_email_verified(application, 'rejection')

    reason = (reason or '').strip()
    if not reason:
        raise ValidationError({'reason': 'Rejection reason is required.'})

    application.status = MembershipApplication.STATUS_REJECTED
    application.rejected_by = rejected_by
    application.rejected_at = timezone.now()
    application.rejection_reason = reason
    application.save(update_fields=['status', 'rejected_by', 'rejected_at', 'rejection_reason', 'updated_at'])

    log_audit_event(
        action='application.rejected',
        user=rejected_by,
        target=application,
        details=f"Reason={reason}",
    )
    return application


def get_application_stats():
    counts = {status: 0 for status, _ in MembershipApplication.STATUS_CHOICES}
    for status in MembershipApplication.objects.values_list('status', flat=True):
        counts[status] = counts.get(status, 0) + 1
    counts['total'] = sum(counts.values())
    return counts
