"""
Core Base Module

Provides shared base classes, mixins, and utilities for all modules.

Exports:
    Individual Feature Mixins:
        - AuditMixin: Adds created_at, updated_at, created_by, updated_by
        - ActiveFlagMixin: Adds is_active + soft delete behavior

    Managers & QuerySets:
        - ActiveQuerySet: QuerySet with active()/inactive()/search()
        - ActiveManager: Manager for ActiveFlagMixin models

Usage:
    from core.base.models import AuditMixin, ActiveFlagMixin
    from core.base.managers import ActiveManager
"""
