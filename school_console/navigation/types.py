"""
Типы данных навигации.

Все структуры неизменяемые: дерево пересобирается целиком,
а не правится на месте.
"""
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Tuple


class IconKind(str, Enum):
    """Иконка пункта меню / карточки. Фронт сам сопоставляет с набором иконок."""

    HOME = 'home'
    CALENDAR = 'calendar'
    PEOPLE = 'people'
    GRADUATION = 'graduation'
    INSTITUTION = 'institution'
    BOOK = 'book'
    GEAR = 'gear'
    SETTINGS = 'settings'


class CapabilityTag(str, Enum):
    """Подразделы, которые может предлагать фича."""

    LIST = 'list'
    CREATE = 'create'
    ASSIGNMENTS = 'assignments'
    SCHEDULES = 'schedules'
    TYPES = 'types'


# Порядок определяет порядок дочерних пунктов
CAPABILITY_ORDER: Tuple[CapabilityTag, ...] = (
    CapabilityTag.LIST,
    CapabilityTag.CREATE,
    CapabilityTag.ASSIGNMENTS,
    CapabilityTag.SCHEDULES,
    CapabilityTag.TYPES,
)


@dataclass(frozen=True)
class MenuLink:
    """Ссылка меню, настроенная супер-админом для фичи (или для фичи в конкретной школе)."""

    name: str
    href: str
    icon: str = 'fas fa-home'
    enabled: bool = True


@dataclass(frozen=True)
class FeatureEntry:
    """Фича каталога в том виде, в каком её видит навигация."""

    id: str
    key: str = ''
    name: str = ''
    description: str = ''
    enabled: bool = False
    capabilities: Tuple[CapabilityTag, ...] = ()
    menu_links: Tuple[MenuLink, ...] = ()


@dataclass(frozen=True)
class NavigationNode:
    id: str
    label: str
    target_path: str
    icon_kind: IconKind
    children: Tuple['NavigationNode', ...] = ()
    is_pinned: bool = False

    @property
    def has_children(self) -> bool:
        return bool(self.children)


@dataclass(frozen=True)
class QuickAction:
    title: str
    description: str
    icon_kind: IconKind
    target_path: str
    color_token: str


# id родительских пунктов, раскрытых в текущей сессии
ExpandedState = FrozenSet[str]
