"""
Navigation app — сайдбар и быстрые действия дашборда школы.

Всё, что здесь вычисляется, выводится из списка фич школы:
    фичи → дерево навигации (types, classifier, tree)
    фичи + роль → быстрые действия (quick_actions)
    путь пункта + текущий location → активен ли пункт (routes)

Дерево и действия — чистые функции, пересчитываются на каждый запрос.
Состояние раскрытых пунктов живёт в сессии (session.py).
"""
