"""
Features app — глобальный каталог фич и их подключение к школам.

Супер-админ ведёт каталог (Feature) и включает фичи школам (SchoolFeature).
Навигация школы читает подключённые фичи через features.catalog.
"""
