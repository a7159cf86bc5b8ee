from django.db import models


class MemberQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=self.model.STATUS_ACTIVE)

    def owing(self):
        return self.active().filter(account_balance__lt=0)

    def in_category(self, category_id):
        return self.filter(membership_category=category_id)


class MemberManager(models.Manager):
    def get_queryset(self):
        return MemberQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()

    def owing(self):
        return self.get_queryset().owing()
