import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Feature',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('key', models.SlugField(max_length=100, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('category', models.CharField(choices=[('CORE', 'Core'), ('ACADEMIC', 'Academic'), ('FINANCE', 'Finance'), ('COMMUNICATION', 'Communication')], default='CORE', max_length=30)),
                ('price', models.PositiveIntegerField(blank=True, help_text='Цена в минимальных единицах валюты', null=True)),
                ('capabilities', models.JSONField(blank=True, default=list, help_text='Подразделы фичи: list, create, assignments, schedules, types')),
                ('menu_links', models.JSONField(blank=True, default=list, help_text='Ссылки меню по умолчанию: [{name, href, icon, enabled}]')),
                ('is_active', models.BooleanField(default=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Фича',
                'verbose_name_plural': 'Фичи',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='SchoolFeature',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('enabled', models.BooleanField(default=True)),
                ('menu_links', models.JSONField(blank=True, default=list, help_text='Ссылки меню для этой школы; пусто — берутся из каталога')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('feature', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='school_assignments', to='features.feature')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='school_features', to='tenants.tenant')),
            ],
            options={
                'verbose_name': 'Фича школы',
                'verbose_name_plural': 'Фичи школ',
                'ordering': ['created_at', 'id'],
                'unique_together': {('tenant', 'feature')},
            },
        ),
    ]
