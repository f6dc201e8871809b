"""
Быстрые действия дашборда школы.

Действие берётся из фиксированного каталога по Feature.key.
Роль может добавить обязательные действия (школьному админу всегда
показываем School Setup). Пути в каталоге заданы относительно корня
консоли школы (NAVIGATION['TENANT_ROOT']), корень подставляется в resolve().
Итоговый список без повторов target_path.
"""
from dataclasses import replace
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from .routes import DEFAULT_TENANT_ROOT
from .tree import normalize_root
from .types import FeatureEntry, IconKind, QuickAction

SCHOOL_ADMIN_ROLE = 'school_admin'

SCHOOL_SETUP = QuickAction(
    title='School Setup',
    description="Configure your school's classes, sections, subjects and branches",
    icon_kind=IconKind.INSTITUTION,
    target_path='/setup',
    color_token='bg-gray-500',
)

QUICK_ACTION_CATALOG: Mapping[str, QuickAction] = MappingProxyType({
    'staff_management': QuickAction(
        title='Staff Management',
        description='Manage staff records and assignments',
        icon_kind=IconKind.PEOPLE,
        target_path='/features/staff-management',
        color_token='bg-blue-500',
    ),
    'student_management': QuickAction(
        title='Student Management',
        description='Manage student records and enrollment',
        icon_kind=IconKind.GRADUATION,
        target_path='/features/student-management',
        color_token='bg-green-500',
    ),
    'academic_years': QuickAction(
        title='Academic Years',
        description='Manage academic years and terms',
        icon_kind=IconKind.CALENDAR,
        target_path='/academic-years',
        color_token='bg-blue-500',
    ),
    'class_management': QuickAction(
        title='Classes & Sections',
        description='Organize classes and sections',
        icon_kind=IconKind.INSTITUTION,
        target_path='/setup/classes',
        color_token='bg-green-500',
    ),
    'subject_management': QuickAction(
        title='Subjects',
        description='Organize subjects per class',
        icon_kind=IconKind.BOOK,
        target_path='/setup/subjects',
        color_token='bg-purple-500',
    ),
    'timetable': QuickAction(
        title='Schedules',
        description='Build and review class timetables',
        icon_kind=IconKind.CALENDAR,
        target_path='/features/schedules',
        color_token='bg-purple-500',
    ),
    'branch_management': QuickAction(
        title='Branches',
        description='Manage school branches and campuses',
        icon_kind=IconKind.INSTITUTION,
        target_path='/setup/branches',
        color_token='bg-gray-500',
    ),
    'school_setup': SCHOOL_SETUP,
})

# Роль → действия, которые показываются всегда (в конце списка)
ROLE_FORCED_ACTIONS: Mapping[str, Tuple[QuickAction, ...]] = MappingProxyType({
    SCHOOL_ADMIN_ROLE: (SCHOOL_SETUP,),
})


def resolve(
    features: Iterable[FeatureEntry],
    role: str,
    tenant_root: str = DEFAULT_TENANT_ROOT,
) -> Tuple[QuickAction, ...]:
    root = normalize_root(tenant_root)
    actions = []
    seen_paths = set()

    def append(action):
        action = replace(action, target_path=f'{root}{action.target_path}')
        if action.target_path in seen_paths:
            return
        seen_paths.add(action.target_path)
        actions.append(action)

    for feature in features:
        if not feature.enabled:
            continue
        action = QUICK_ACTION_CATALOG.get(feature.key)
        if action is not None:
            append(action)

    for action in ROLE_FORCED_ACTIONS.get(role or '', ()):
        append(action)

    return tuple(actions)
