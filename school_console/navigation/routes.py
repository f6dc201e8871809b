"""Определение активного пункта меню по текущему location."""

DEFAULT_TENANT_ROOT = '/school'


def is_active(node_target_path: str, current_location: str, tenant_root: str = DEFAULT_TENANT_ROOT) -> bool:
    """
    Активен ли пункт с путём node_target_path для current_location.

    Корень школы (Dashboard) активен только при точном совпадении:
    любой путь внутри консоли начинается с /school.
    Остальные пункты активны по префиксу.
    """
    if not node_target_path or current_location is None:
        return False
    if node_target_path == tenant_root:
        return current_location == tenant_root
    return current_location.startswith(node_target_path)
