from django.core.exceptions import ObjectDoesNotExist


class NotFoundError(ObjectDoesNotExist):
    """A referenced member or payment does not exist."""


class TransactionConflictError(Exception):
    """The database kept rejecting a ledger transaction as conflicting."""

    def __init__(self, message, attempts=None):
        super().__init__(message)
        self.attempts = attempts


class BatchItemError(Exception):
    """Failure of one item inside a bulk run.

    Bulk operations collect these instead of raising them.
    """

    def __init__(self, reason, *, index=None, member_id=None, member_name=''):
        super().__init__(reason)
        self.reason = reason
        self.index = index
        self.member_id = member_id
        self.member_name = member_name

    def as_dict(self):
        return {
            'index': self.index,
            'member_id': self.member_id,
            'member_name': self.member_name,
            'reason': self.reason,
        }
