"""
Логирование школьной консоли.

ThreadSafeStreamHandler — запись в поток под общим RLock
(gthread-воркеры Gunicorn пишут в stderr одновременно).
TenantContextFilter — добавляет в запись slug текущей школы,
чтобы строки лога разных школ можно было различить.

Оба подключаются в settings.LOGGING.
"""
import logging
import threading

from tenants.context import get_current_tenant

NO_TENANT = '-'


class TenantContextFilter(logging.Filter):
    """record.tenant = slug школы текущего запроса или '-'."""

    def filter(self, record):
        tenant = get_current_tenant()
        record.tenant = getattr(tenant, 'slug', None) or NO_TENANT
        return True


class ThreadSafeStreamHandler(logging.StreamHandler):

    _write_lock = threading.RLock()

    def emit(self, record):
        try:
            msg = self.format(record)
            with self._write_lock:
                self.stream.write(msg + self.terminator)
                self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def handleError(self, record):
        # Ошибка записи лога не должна ронять запрос
        pass
