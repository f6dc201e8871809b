"""
Тесты сборки навигации: классификатор, дерево, быстрые действия, активный пункт.

Запуск: python manage.py test navigation.tests -v2
"""
from django.test import SimpleTestCase

from navigation import classifier, quick_actions, tree
from navigation.routes import is_active
from navigation.serializers import NavigationNodeSerializer
from navigation.types import CapabilityTag, FeatureEntry, IconKind, MenuLink, QuickAction

STAFF = FeatureEntry(
    id='f-staff',
    key='staff_management',
    name='Staff Management',
    description='Manage staff records and assignments',
    enabled=True,
)


def _feature(**kwargs):
    data = {'id': 'f1', 'key': '', 'name': 'Feature', 'description': '', 'enabled': True}
    data.update(kwargs)
    return FeatureEntry(**data)


def _labels(nodes):
    return [node.label for node in nodes]


class ClassifierKeywordTests(SimpleTestCase):
    """Эвристика по описанию."""

    def test_empty_description_gives_leaf(self):
        self.assertEqual(classifier.classify(_feature(description=''), '/r'), ())

    def test_manage_and_create_give_list_then_create(self):
        feature = _feature(name='Student Management', description='Create and manage students')
        children = classifier.classify(feature, '/school/features/f1')
        self.assertEqual(_labels(children), ['Student Management List', 'Create Student'])
        self.assertEqual(children[0].target_path, '/school/features/f1/list')
        self.assertEqual(children[1].target_path, '/school/features/f1/create')

    def test_case_insensitive_match(self):
        children = classifier.classify(_feature(description='LIST of Timetables'), '/r')
        self.assertEqual(_labels(children), ['Feature List', 'Schedules'])

    def test_all_rules_in_fixed_order(self):
        feature = _feature(
            name='Staff Management',
            description='Schedule, add, assign, list staff of any type',
        )
        children = classifier.classify(feature, '/r')
        self.assertEqual(
            _labels(children),
            ['Staff Management List', 'Create Staff', 'Assignments', 'Schedules', 'Staff Types'],
        )
        self.assertEqual(
            [c.target_path for c in children],
            ['/r/list', '/r/create', '/r/assignments', '/r/schedules', '/r/types'],
        )

    def test_staff_types_requires_staff_in_name(self):
        children = classifier.classify(_feature(name='Fee Management', description='fee types'), '/r')
        self.assertEqual(children, ())

    def test_staff_name_is_case_sensitive(self):
        children = classifier.classify(_feature(name='staff tools', description='types'), '/r')
        self.assertEqual(children, ())

    def test_staff_types_present(self):
        children = classifier.classify(_feature(name='Staff', description='staff types'), '/r')
        self.assertEqual(_labels(children), ['Staff Types'])

    def test_management_suffix_stripped_once(self):
        feature = _feature(name='Class Management Management', description='add')
        self.assertEqual(_labels(classifier.classify(feature, '/r')), ['Create Class Management'])

    def test_spurious_match_is_kept(self):
        # "assign seating" всё равно даёт Assignments
        children = classifier.classify(_feature(description='assign seating'), '/r')
        self.assertEqual(_labels(children), ['Assignments'])

    def test_child_ids_are_stable(self):
        first = classifier.classify(STAFF, '/r')
        second = classifier.classify(STAFF, '/r')
        self.assertEqual(first, second)
        self.assertEqual([c.id for c in first], ['f-staff-list', 'f-staff-assignments'])

    def test_keyword_fallback_disabled(self):
        self.assertEqual(classifier.classify(STAFF, '/r', keyword_fallback=False), ())


class ClassifierExplicitSourcesTests(SimpleTestCase):
    """capabilities и menu_links приоритетнее эвристики."""

    def test_capabilities_win_over_keywords(self):
        feature = _feature(
            name='Staff Management',
            description='Manage staff records and assignments',
            capabilities=(CapabilityTag.TYPES, CapabilityTag.CREATE),
        )
        children = classifier.classify(feature, '/r')
        self.assertEqual(_labels(children), ['Create Staff', 'Staff Types'])
        self.assertEqual(children[0].icon_kind, IconKind.PEOPLE)
        self.assertEqual(children[1].icon_kind, IconKind.SETTINGS)

    def test_capabilities_work_without_fallback(self):
        feature = _feature(capabilities=(CapabilityTag.SCHEDULES,))
        children = classifier.classify(feature, '/r', keyword_fallback=False)
        self.assertEqual(_labels(children), ['Schedules'])

    def test_menu_links_win_over_everything(self):
        feature = _feature(
            description='manage',
            capabilities=(CapabilityTag.LIST,),
            menu_links=(
                MenuLink(name='Directory', href='/school/staff'),
                MenuLink(name='Hidden', href='/school/hidden', enabled=False),
                MenuLink(name='Payroll', href='/school/payroll'),
            ),
        )
        children = classifier.classify(feature, '/r')
        self.assertEqual(_labels(children), ['Directory', 'Payroll'])
        self.assertEqual([c.target_path for c in children], ['/school/staff', '/school/payroll'])
        self.assertEqual([c.id for c in children], ['f1-link-0', 'f1-link-2'])

    def test_child_label_types_without_staff(self):
        self.assertEqual(classifier.child_label(CapabilityTag.TYPES, 'Fee Management'), 'Fee Types')


class TreeBuildTests(SimpleTestCase):

    def test_fixed_roots_without_features(self):
        nodes = tree.build([])
        self.assertEqual([n.id for n in nodes], [tree.DASHBOARD_ID, tree.ACADEMIC_YEARS_ID])
        dashboard, years = nodes
        self.assertTrue(dashboard.is_pinned)
        self.assertEqual(dashboard.target_path, '/school')
        self.assertEqual(dashboard.icon_kind, IconKind.HOME)
        self.assertEqual(years.target_path, '/school/academic-years')
        self.assertEqual(years.icon_kind, IconKind.CALENDAR)
        self.assertFalse(years.is_pinned)

    def test_fixed_roots_always_first(self):
        features = [_feature(id='a', name='Dashboard'), _feature(id='b', name='Zeta')]
        nodes = tree.build(features)
        self.assertEqual(_labels(nodes)[:2], ['Dashboard', 'Academic Years'])
        self.assertEqual(_labels(nodes)[2:], ['Dashboard', 'Zeta'])

    def test_disabled_features_are_skipped(self):
        nodes = tree.build([_feature(id='a', name='Off', enabled=False), _feature(id='b', name='On')])
        self.assertEqual(_labels(nodes), ['Dashboard', 'Academic Years', 'On'])

    def test_feature_order_preserved(self):
        features = [_feature(id=str(i), name=f'F{i}') for i in (3, 1, 2)]
        self.assertEqual(_labels(tree.build(features))[2:], ['F3', 'F1', 'F2'])

    def test_duplicate_feature_ids_kept_once(self):
        features = [_feature(id='a', name='First'), _feature(id='a', name='Second')]
        self.assertEqual(_labels(tree.build(features))[2:], ['First'])

    def test_feature_icons(self):
        cases = {
            'Staff Management': IconKind.PEOPLE,
            'STUDENT records': IconKind.GRADUATION,
            'Classes': IconKind.INSTITUTION,
            'Subjects': IconKind.BOOK,
            'Attendance': IconKind.GEAR,
            # staff проверяется раньше student
            'Student Staff': IconKind.PEOPLE,
        }
        for name, icon in cases.items():
            with self.subTest(name=name):
                self.assertEqual(tree.feature_icon(name), icon)

    def test_feature_node_path_and_children(self):
        nodes = tree.build([STAFF])
        node = nodes[2]
        self.assertEqual(node.id, 'f-staff')
        self.assertEqual(node.target_path, '/school/features/f-staff')
        self.assertEqual(node.children[0].target_path, '/school/features/f-staff/list')

    def test_custom_tenant_root(self):
        nodes = tree.build([STAFF], tenant_root='/academy/')
        self.assertEqual(nodes[0].target_path, '/academy')
        self.assertEqual(nodes[1].target_path, '/academy/academic-years')
        self.assertEqual(nodes[2].target_path, '/academy/features/f-staff')

    def test_missing_name_and_description(self):
        nodes = tree.build([FeatureEntry(id='x', enabled=True)])
        self.assertEqual(nodes[2].label, '')
        self.assertEqual(nodes[2].children, ())

    def test_build_is_idempotent(self):
        features = [STAFF, _feature(id='b', name='Timetable', description='class schedule')]
        self.assertEqual(tree.build(features, 'time'), tree.build(features, 'time'))


class TreeSearchTests(SimpleTestCase):

    def setUp(self):
        self.features = [
            STAFF,
            _feature(id='t', name='Timetable', description='class schedule'),
        ]

    def test_empty_query_keeps_all(self):
        self.assertEqual(len(tree.build(self.features, '')), 4)
        self.assertEqual(len(tree.build(self.features, None)), 4)

    def test_match_by_root_label(self):
        self.assertEqual(_labels(tree.build(self.features, 'timetable')), ['Timetable'])

    def test_match_by_child_label_keeps_all_children(self):
        nodes = tree.build(self.features, 'assignments')
        self.assertEqual(_labels(nodes), ['Staff Management'])
        self.assertEqual(_labels(nodes[0].children), ['Staff Management List', 'Assignments'])

    def test_no_match(self):
        self.assertEqual(tree.build(self.features, 'zzz'), ())

    def test_filter_only_removes_roots(self):
        full = {node.id for node in tree.build(self.features, '')}
        for query in ('a', 'dash', 'academic', 'zzz', 'STAFF'):
            with self.subTest(query=query):
                self.assertTrue({node.id for node in tree.build(self.features, query)} <= full)


class ExpandedStateTests(SimpleTestCase):

    def test_toggle(self):
        state = tree.toggle_expanded(frozenset(), 'a')
        self.assertEqual(state, frozenset({'a'}))
        self.assertEqual(tree.toggle_expanded(state, 'a'), frozenset())

    def test_expandable_ids(self):
        nodes = tree.build([STAFF, _feature(id='leaf', name='Leaf')])
        self.assertEqual(tree.expandable_ids(nodes), frozenset({'f-staff'}))


class QuickActionTests(SimpleTestCase):

    def test_end_to_end_school_admin(self):
        actions = quick_actions.resolve([STAFF], 'school_admin')
        self.assertEqual(
            [(a.title, a.target_path) for a in actions],
            [
                ('Staff Management', '/school/features/staff-management'),
                ('School Setup', '/school/setup'),
            ],
        )

    def test_setup_not_duplicated(self):
        features = [_feature(key='school_setup'), STAFF]
        actions = quick_actions.resolve(features, 'school_admin')
        paths = [a.target_path for a in actions]
        self.assertEqual(paths.count('/school/setup'), 1)
        self.assertEqual(paths[0], '/school/setup')

    def test_disabled_feature_has_no_action(self):
        features = [_feature(key='staff_management', enabled=False)]
        self.assertEqual(quick_actions.resolve(features, 'teacher'), ())

    def test_unknown_key_and_role(self):
        self.assertEqual(quick_actions.resolve([_feature(key='attendance')], 'janitor'), ())

    def test_empty_role(self):
        self.assertEqual(quick_actions.resolve([], ''), ())
        self.assertEqual(quick_actions.resolve([], None), ())

    def test_feature_order_then_forced(self):
        features = [
            _feature(id='1', key='timetable'),
            _feature(id='2', key='student_management'),
        ]
        titles = [a.title for a in quick_actions.resolve(features, 'school_admin')]
        self.assertEqual(titles, ['Schedules', 'Student Management', 'School Setup'])

    def test_same_feature_twice_gives_one_action(self):
        features = [_feature(id='1', key='timetable'), _feature(id='2', key='timetable')]
        self.assertEqual(len(quick_actions.resolve(features, 'teacher')), 1)

    def test_custom_tenant_root(self):
        features = [_feature(key='school_setup'), STAFF]
        actions = quick_actions.resolve(features, 'school_admin', tenant_root='/academy/')
        self.assertEqual(
            [a.target_path for a in actions],
            ['/academy/setup', '/academy/features/staff-management'],
        )

    def test_catalog_is_read_only(self):
        with self.assertRaises(TypeError):
            quick_actions.QUICK_ACTION_CATALOG['x'] = QuickAction('x', '', IconKind.GEAR, '/x', '')


class ActiveRouteTests(SimpleTestCase):

    def test_root_exact_match_only(self):
        self.assertTrue(is_active('/school', '/school'))
        self.assertFalse(is_active('/school', '/school/academic-years'))

    def test_prefix_match(self):
        self.assertTrue(is_active('/school/academic-years', '/school/academic-years/5'))
        self.assertTrue(is_active('/school/academic-years', '/school/academic-years'))
        self.assertFalse(is_active('/school/academic-years', '/school/features/x'))

    def test_custom_root(self):
        self.assertFalse(is_active('/academy', '/academy/x', tenant_root='/academy'))
        self.assertTrue(is_active('/academy', '/academy', tenant_root='/academy'))

    def test_empty_values(self):
        self.assertFalse(is_active('', '/school'))
        self.assertFalse(is_active('/school/x', None))


class NavigationNodeSerializerTests(SimpleTestCase):

    def test_end_to_end_tree_shape(self):
        nodes = tree.build([STAFF])
        data = NavigationNodeSerializer(
            nodes, many=True,
            context={'expanded': frozenset({'f-staff'}), 'location': '/school/features/f-staff/list'},
        ).data

        dashboard, years, staff = data
        self.assertNotIn('children', dashboard)
        self.assertNotIn('children', years)
        self.assertFalse(dashboard['is_active'])
        self.assertEqual(dashboard['icon_kind'], 'home')

        self.assertEqual(staff['label'], 'Staff Management')
        self.assertTrue(staff['is_expanded'])
        self.assertTrue(staff['is_active'])
        self.assertEqual(
            [(c['label'], c['target_path']) for c in staff['children']],
            [
                ('Staff Management List', '/school/features/f-staff/list'),
                ('Assignments', '/school/features/f-staff/assignments'),
            ],
        )
        self.assertTrue(staff['children'][0]['is_active'])
        self.assertFalse(staff['children'][1]['is_active'])

    def test_collapsed_and_no_location(self):
        data = NavigationNodeSerializer(tree.build([STAFF]), many=True, context={}).data
        self.assertFalse(data[2]['is_expanded'])
        self.assertFalse(any(item['is_active'] for item in data))
