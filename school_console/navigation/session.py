"""
Раскрытые пункты навигации — в Django-сессии, отдельно для каждой школы.

Сборка дерева об этом состоянии не знает: views читают его отсюда
и передают явно.
"""
from .tree import toggle_expanded
from .types import ExpandedState

SESSION_KEY_TEMPLATE = 'navigation:expanded:{tenant_id}'


def _session_key(tenant) -> str:
    return SESSION_KEY_TEMPLATE.format(tenant_id=tenant.pk if tenant is not None else 'none')


def get_expanded(request) -> ExpandedState:
    stored = request.session.get(_session_key(getattr(request, 'tenant', None)), [])
    return frozenset(str(node_id) for node_id in stored)


def set_expanded(request, state: ExpandedState) -> None:
    # Сессия сериализуется в JSON — храним отсортированный список
    request.session[_session_key(getattr(request, 'tenant', None))] = sorted(state)


def toggle(request, node_id: str) -> ExpandedState:
    state = toggle_expanded(get_expanded(request), node_id)
    set_expanded(request, state)
    return state
