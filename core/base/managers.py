"""
Core Base Managers Module

Provides custom querysets for base models.

Exports:
    - ActiveQuerySet: active(), inactive(), search()
    - ActiveManager: Manager for ActiveFlagMixin models

Usage:
    from core.base import ActiveFlagMixin
    from core.base.managers import ActiveManager

    class Bank(ActiveFlagMixin, models.Model):
        objects = ActiveManager()

    Bank.objects.active()
"""
from django.db import models
from django.db.models import Q


class ActiveQuerySet(models.QuerySet):
    """
    QuerySet for models with an is_active flag.

    Methods:
        - active(): Return is_active=True records
        - inactive(): Return is_active=False records
        - search(term, *fields): icontains match across fields
    """

    def active(self):
        """Return only active records."""
        return self.filter(is_active=True)

    def inactive(self):
        """Return only inactive records."""
        return self.filter(is_active=False)

    def search(self, term, *fields):
        """
        Filter by a free-text term across the given fields.

        Args:
            term: Search string; empty term returns the queryset unchanged
            fields: Field lookups to match with icontains
        """
        if not term or not fields:
            return self
        condition = Q()
        for field in fields:
            condition |= Q(**{f'{field}__icontains': term})
        return self.filter(condition)


class ActiveManager(models.Manager.from_queryset(ActiveQuerySet)):
    """
    Manager for ActiveFlagMixin models.

    Usage:
        class Team(ActiveFlagMixin, models.Model):
            objects = ActiveManager()

        Team.objects.active()
    """
    pass
