"""
Tenant context — текущая школа вне request (management commands, signals).

Middleware ставит значение на время запроса и очищает после.
contextvars вместо threading.local: безопасно и в sync, и в async views.
"""
import contextvars
from contextlib import contextmanager

_current_tenant: contextvars.ContextVar = contextvars.ContextVar(
    'current_tenant', default=None
)


def set_current_tenant(tenant):
    _current_tenant.set(tenant)


def get_current_tenant():
    """Текущий tenant или None если не установлен."""
    return _current_tenant.get()


def clear_current_tenant():
    _current_tenant.set(None)


@contextmanager
def tenant_scope(tenant):
    """Временно установить tenant (для кода без request)."""
    token = _current_tenant.set(tenant)
    try:
        yield tenant
    finally:
        _current_tenant.reset(token)
