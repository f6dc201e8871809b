"""
Tenants app — multi-tenant архитектура школьной консоли.

Каждая школа = отдельный tenant на одном движке.
Разделение через subdomain: greenfield.eliteschola.com → Tenant(slug='greenfield')

Модель данных:
    Tenant ← N TenantMembership (кто в этой школе и с какой ролью)
    Tenant ← N SchoolFeature (какие фичи каталога подключены)
"""
