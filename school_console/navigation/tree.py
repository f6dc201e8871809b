"""
Сборка дерева навигации школы.

build() — чистая функция: одинаковые входные данные всегда дают
одинаковое дерево, без счётчиков и скрытого состояния.
Глубина дерева — ровно 2 уровня.
"""
from typing import Iterable, Optional, Tuple

from .classifier import classify
from .routes import DEFAULT_TENANT_ROOT
from .types import ExpandedState, FeatureEntry, IconKind, NavigationNode

DASHBOARD_ID = 'dashboard'
ACADEMIC_YEARS_ID = 'academic-years'

# Первое совпадение по подстроке имени (без учёта регистра)
_FEATURE_ICON_RULES = (
    ('staff', IconKind.PEOPLE),
    ('student', IconKind.GRADUATION),
    ('class', IconKind.INSTITUTION),
    ('subject', IconKind.BOOK),
)


def normalize_root(tenant_root: Optional[str]) -> str:
    root = (tenant_root or DEFAULT_TENANT_ROOT).rstrip('/')
    return root or DEFAULT_TENANT_ROOT


def feature_icon(feature_name: str) -> IconKind:
    lowered = (feature_name or '').lower()
    for needle, icon in _FEATURE_ICON_RULES:
        if needle in lowered:
            return icon
    return IconKind.GEAR


def feature_path(tenant_root: str, feature_id: str) -> str:
    return f'{tenant_root}/features/{feature_id}'


def base_nodes(tenant_root: str = DEFAULT_TENANT_ROOT) -> Tuple[NavigationNode, ...]:
    """Пункты, которые есть у любой школы независимо от фич."""
    root = normalize_root(tenant_root)
    return (
        NavigationNode(
            id=DASHBOARD_ID,
            label='Dashboard',
            target_path=root,
            icon_kind=IconKind.HOME,
            is_pinned=True,
        ),
        NavigationNode(
            id=ACADEMIC_YEARS_ID,
            label='Academic Years',
            target_path=f'{root}/academic-years',
            icon_kind=IconKind.CALENDAR,
        ),
    )


def feature_node(feature: FeatureEntry, tenant_root: str, keyword_fallback: bool = True) -> NavigationNode:
    path = feature_path(tenant_root, feature.id)
    return NavigationNode(
        id=feature.id,
        label=feature.name or '',
        target_path=path,
        icon_kind=feature_icon(feature.name),
        children=classify(feature, path, keyword_fallback=keyword_fallback),
    )


def matches_query(node: NavigationNode, query: str) -> bool:
    """Корневой пункт подходит, если запрос есть в его подписи или в подписи любого ребёнка."""
    if not query:
        return True
    needle = query.lower()
    if needle in node.label.lower():
        return True
    return any(needle in child.label.lower() for child in node.children)


def filter_tree(tree: Iterable[NavigationNode], query: Optional[str]) -> Tuple[NavigationNode, ...]:
    """Фильтр только убирает корневые пункты; дети подходящего пункта остаются все."""
    return tuple(node for node in tree if matches_query(node, query or ''))


def build(
    features: Iterable[FeatureEntry],
    search_query: Optional[str] = '',
    tenant_root: str = DEFAULT_TENANT_ROOT,
    keyword_fallback: bool = True,
) -> Tuple[NavigationNode, ...]:
    """
    Дерево навигации: Dashboard, Academic Years, затем включённые фичи
    в порядке, в котором их отдал каталог. Выключенные фичи пропускаются.
    """
    root = normalize_root(tenant_root)
    nodes = list(base_nodes(root))
    seen_ids = {node.id for node in nodes}

    for feature in features:
        if not feature.enabled or feature.id in seen_ids:
            continue
        seen_ids.add(feature.id)
        nodes.append(feature_node(feature, root, keyword_fallback=keyword_fallback))

    return filter_tree(nodes, search_query)


def expandable_ids(tree: Iterable[NavigationNode]) -> ExpandedState:
    """id пунктов, которые вообще можно раскрыть (есть дети)."""
    return frozenset(node.id for node in tree if node.has_children)


def toggle_expanded(state: ExpandedState, node_id: str) -> ExpandedState:
    if node_id in state:
        return frozenset(state - {node_id})
    return frozenset(state | {node_id})
