"""School Console — бэкенд школьной административной панели (multi-tenant)."""
