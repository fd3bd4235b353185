"""Shared column helpers and the tenant-scoping marker mixin."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import declared_attr


def new_id():
    """Opaque string identifier for every row."""
    return uuid.uuid4().hex


def utcnow():
    """Naive UTC timestamp (stored without tz so SQLite and PostgreSQL agree)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TenantScopedMixin:
    """
    Marks a model as belonging to exactly one church.

    Every model carrying this mixin gets a non-null ``church_id`` and is
    only reachable through ``TenantScopedSession`` inside request handlers.
    """

    @declared_attr
    def church_id(cls):
        return Column(String(32), ForeignKey('church.id'), nullable=False, index=True)


def is_tenant_scoped(model):
    """True when ``model`` (a class or an instance) carries a tenant column."""
    cls = model if isinstance(model, type) else type(model)
    return issubclass(cls, TenantScopedMixin)
