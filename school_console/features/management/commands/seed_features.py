"""
Базовый каталог фич.

Использование:
    python manage.py seed_features
    python manage.py seed_features --assign demo    # и подключить школе demo
"""
from django.core.management.base import BaseCommand, CommandError

from features import services
from features.models import Feature
from tenants.models import Tenant

DEFAULT_FEATURES = [
    {
        'key': 'staff_management',
        'name': 'Staff Management',
        'description': 'Manage staff records and assignments',
        'capabilities': ['list', 'create', 'assignments', 'types'],
    },
    {
        'key': 'student_management',
        'name': 'Student Management',
        'description': 'Student list, admissions and records',
        'capabilities': ['list', 'create'],
    },
    {
        'key': 'class_management',
        'name': 'Class Management',
        'description': 'Class list and class teacher assignments',
        'category': Feature.Category.ACADEMIC,
        'capabilities': ['list', 'create', 'assignments'],
    },
    {
        'key': 'subject_management',
        'name': 'Subject Management',
        'description': 'Subject list and subject assignments',
        'category': Feature.Category.ACADEMIC,
        'capabilities': ['list', 'create', 'assignments'],
    },
    {
        'key': 'timetable',
        'name': 'Timetable',
        'description': 'Class schedules and periods',
        'category': Feature.Category.ACADEMIC,
        'capabilities': ['schedules'],
    },
    {
        'key': 'branch_management',
        'name': 'Branch Management',
        'description': 'Branch list for multi-campus schools',
        'capabilities': ['list', 'create'],
    },
]


class Command(BaseCommand):
    help = 'Создать базовый каталог фич (повторный запуск ничего не дублирует)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--assign',
            metavar='SLUG',
            help='Подключить все фичи каталога школе с этим slug',
        )

    def handle(self, *args, **options):
        created = 0
        for data in DEFAULT_FEATURES:
            defaults = {k: v for k, v in data.items() if k != 'key'}
            _, was_created = Feature.objects.get_or_create(key=data['key'], defaults=defaults)
            if was_created:
                created += 1
        self.stdout.write(self.style.SUCCESS(f'Каталог фич готов. Создано: {created}'))

        slug = options.get('assign')
        if slug:
            try:
                tenant = Tenant.objects.get(slug=slug)
            except Tenant.DoesNotExist:
                raise CommandError(f'Школа {slug} не найдена')
            keys = [data['key'] for data in DEFAULT_FEATURES]
            services.bulk_assign([tenant], Feature.objects.alive().filter(key__in=keys))
            self.stdout.write(self.style.SUCCESS(f'Фичи подключены школе {tenant.slug}'))
