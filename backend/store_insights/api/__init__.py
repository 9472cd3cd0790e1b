"""
API Layer - FastAPI routers

Admin routes live under /admin/custom (plus /admin/orders/{id}/complete),
storefront routes under /store.
"""
