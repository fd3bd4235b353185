"""
Tenant-scoped data access.

A ``TenantScopedSession`` wraps the request's SQLAlchemy session and only
exposes operations that carry the church id structurally:

- reads get ``Model.church_id == <church>`` appended to every query
- new rows are stamped with the church id (caller-supplied values are overwritten)
- rows belonging to another church look exactly like missing rows
- models without a ``church_id`` column are refused with ``TenantScopeError``
- bulk ``update()`` through a scoped query cannot move rows to another church
"""
import logging

from sqlalchemy import inspect
from sqlalchemy.orm import Query, scoped_session

from faithsite.database import get_session
from faithsite.exceptions import NotFoundError, TenantScopeError
from faithsite.models.mixins import is_tenant_scoped

logger = logging.getLogger(__name__)


def _column_key(key):
    return key if isinstance(key, str) else getattr(key, 'key', None)


class TenantQuery(Query):
    """Query bound to one church; bulk updates cannot re-point its rows."""

    _tenant_church_id = None

    def update(self, values, *args, **kwargs):
        items = values.items() if hasattr(values, 'items') else values
        for key, value in items:
            if _column_key(key) != 'church_id':
                continue
            if not isinstance(value, str) or value != self._tenant_church_id:
                logger.error(f"Blocked bulk church_id update from church {self._tenant_church_id}")
                raise TenantScopeError("Bulk updates cannot move rows to another church")
        return super().update(values, *args, **kwargs)


class TenantScopedSession:
    """Data-access handle bound to a single church."""

    def __init__(self, session, church_id):
        if not church_id:
            raise ValueError("church_id is required for a tenant-scoped session")
        self._session = session
        self.church_id = church_id

    def _require_scoped(self, model):
        if not is_tenant_scoped(model):
            name = model.__name__ if isinstance(model, type) else type(model).__name__
            raise TenantScopeError(
                f"{name} has no church_id column and cannot be used through a tenant-scoped session"
            )

    def _owned(self, obj):
        """True when ``obj`` belongs to this church both now and as loaded."""
        if obj.church_id != self.church_id:
            return False
        state = inspect(obj)
        if state.persistent or state.detached:
            history = state.attrs.church_id.history
            if history.deleted and any(value != self.church_id for value in history.deleted):
                return False
        return True

    # Reads

    def query(self, model, *criteria):
        """Query ``model`` restricted to this church, plus optional criteria."""
        self._require_scoped(model)
        session = self._session() if isinstance(self._session, scoped_session) else self._session
        query = TenantQuery([model], session=session)
        query._tenant_church_id = self.church_id
        query = query.filter(model.church_id == self.church_id)
        if criteria:
            query = query.filter(*criteria)
        return query

    def get(self, model, ident):
        """Primary-key lookup; another church's row returns None."""
        self._require_scoped(model)
        if ident is None:
            return None
        obj = self._session.get(model, ident)
        if obj is None or obj.church_id != self.church_id:
            return None
        return obj

    def get_or_404(self, model, ident):
        """Primary-key lookup raising the same NotFoundError for absent and foreign rows."""
        obj = self.get(model, ident)
        if obj is None:
            raise NotFoundError(f"{model.__name__} not found")
        return obj

    def count(self, model, *criteria):
        return self.query(model, *criteria).count()

    # Writes

    def add(self, obj):
        """Stage ``obj`` for insert/update inside this church."""
        self._require_scoped(obj)
        state = inspect(obj)
        if state.transient or state.pending:
            obj.church_id = self.church_id
        elif not self._owned(obj):
            raise TenantScopeError(
                f"{type(obj).__name__} {getattr(obj, 'id', None)} belongs to another church"
            )
        self._session.add(obj)
        return obj

    def add_all(self, objs):
        for obj in objs:
            self.add(obj)

    def delete(self, obj):
        self._require_scoped(obj)
        if not self._owned(obj):
            raise TenantScopeError(
                f"{type(obj).__name__} {getattr(obj, 'id', None)} belongs to another church"
            )
        self._session.delete(obj)

    def _check_pending(self):
        """Refuse to flush tenant rows that were re-pointed at another church."""
        for obj in list(self._session.new) + list(self._session.dirty):
            if is_tenant_scoped(obj) and not self._owned(obj):
                logger.error(
                    f"Blocked cross-tenant write: {type(obj).__name__} {getattr(obj, 'id', None)} "
                    f"from church {self.church_id}"
                )
                raise TenantScopeError(
                    f"{type(obj).__name__} {getattr(obj, 'id', None)} belongs to another church"
                )

    def flush(self):
        self._check_pending()
        self._session.flush()

    def commit(self):
        self._check_pending()
        self._session.commit()

    def rollback(self):
        self._session.rollback()

    def __repr__(self):
        return f"<TenantScopedSession(church_id={self.church_id})>"


def get_tenant_session(church_id, session=None):
    """Build a tenant-scoped handle over ``session`` (default: the request session)."""
    return TenantScopedSession(session if session is not None else get_session(), church_id)
