"""
Дочерние пункты меню для фичи.

Источник дочерних пунктов (первый подходящий):
  1. menu_links, настроенные супер-админом;
  2. явные capabilities фичи;
  3. эвристика по ключевым словам в описании (legacy, отключается
     NAVIGATION['KEYWORD_FALLBACK']).

Эвристика срабатывает на любые вхождения подстрок: описание
"assign seating" даст пункт Assignments. Это известное поведение.
"""
from typing import Iterable, Tuple

from .types import CAPABILITY_ORDER, CapabilityTag, FeatureEntry, IconKind, NavigationNode

_MANAGEMENT_SUFFIX = ' Management'

_CHILD_ICONS = {
    CapabilityTag.LIST: IconKind.BOOK,
    CapabilityTag.CREATE: IconKind.PEOPLE,
    CapabilityTag.ASSIGNMENTS: IconKind.GRADUATION,
    CapabilityTag.SCHEDULES: IconKind.CALENDAR,
    CapabilityTag.TYPES: IconKind.SETTINGS,
}


def _base_name(feature_name: str) -> str:
    """'Staff Management' → 'Staff' (только первое вхождение)."""
    return feature_name.replace(_MANAGEMENT_SUFFIX, '', 1)


def child_label(tag: CapabilityTag, feature_name: str) -> str:
    if tag is CapabilityTag.LIST:
        return f'{feature_name} List'
    if tag is CapabilityTag.CREATE:
        return f'Create {_base_name(feature_name)}'
    if tag is CapabilityTag.ASSIGNMENTS:
        return 'Assignments'
    if tag is CapabilityTag.SCHEDULES:
        return 'Schedules'
    if 'Staff' in feature_name:
        return 'Staff Types'
    return f'{_base_name(feature_name)} Types'


def keyword_capabilities(feature: FeatureEntry) -> Tuple[CapabilityTag, ...]:
    """Подразделы фичи, угаданные по её описанию (регистр не важен)."""
    description = (feature.description or '').lower()
    if not description:
        return ()

    tags = []
    if 'manage' in description or 'list' in description:
        tags.append(CapabilityTag.LIST)
    if 'create' in description or 'add' in description:
        tags.append(CapabilityTag.CREATE)
    if 'assignment' in description or 'assign' in description:
        tags.append(CapabilityTag.ASSIGNMENTS)
    if 'schedule' in description or 'timetable' in description:
        tags.append(CapabilityTag.SCHEDULES)
    # Имя сравнивается с учётом регистра
    if 'type' in description and 'Staff' in (feature.name or ''):
        tags.append(CapabilityTag.TYPES)
    return tuple(tags)


def ordered_capabilities(tags: Iterable[CapabilityTag]) -> Tuple[CapabilityTag, ...]:
    present = set(tags)
    return tuple(tag for tag in CAPABILITY_ORDER if tag in present)


def _menu_link_children(feature: FeatureEntry) -> Tuple[NavigationNode, ...]:
    return tuple(
        NavigationNode(
            id=f'{feature.id}-link-{index}',
            label=link.name,
            target_path=link.href,
            icon_kind=IconKind.GEAR,
        )
        for index, link in enumerate(feature.menu_links)
        if link.enabled
    )


def classify(
    feature: FeatureEntry,
    feature_root: str,
    keyword_fallback: bool = True,
) -> Tuple[NavigationNode, ...]:
    """
    Дочерние пункты для фичи. Родителя собирает tree.build().

    feature_root — путь родительского пункта, например /school/features/<id>.
    Пустой результат означает, что фича станет листом.
    """
    if feature.menu_links:
        return _menu_link_children(feature)

    if feature.capabilities:
        tags = ordered_capabilities(feature.capabilities)
    elif keyword_fallback:
        tags = keyword_capabilities(feature)
    else:
        tags = ()

    name = feature.name or ''
    return tuple(
        NavigationNode(
            id=f'{feature.id}-{tag.value}',
            label=child_label(tag, name),
            target_path=f'{feature_root}/{tag.value}',
            icon_kind=_CHILD_ICONS[tag],
        )
        for tag in tags
    )
