import logging

from django.db import DatabaseError, transaction

from apps.core.users.models import AuditLog

logger = logging.getLogger(__name__)


def log_audit_event(action, user=None, target=None, details=''):
    target_model = ''
    target_id = ''

    if target is not None:
        target_model = target.__class__.__name__
        target_id = str(getattr(target, 'pk', ''))

    if user is not None and not getattr(user, 'pk', None):
        user = None

    try:
        # Savepoint so a failed audit write leaves the caller's transaction usable.
        with transaction.atomic():
            AuditLog.objects.create(
                user=user,
                action=action,
                target_model=target_model,
                target_id=target_id,
                details=details,
            )
    except DatabaseError:
        # Logging must never break business actions.
        logger.exception('Could not write audit event %s for %s #%s', action, target_model, target_id)
