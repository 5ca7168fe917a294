# Routes package init
"""
Catalog API: Routes Package
============================

Route Inventory:
    - products.py:  /products/*   (CRUD, filter, pagination, search)
    - health.py:    GET /health    (service health check)

Routes stay thin: read the request, call a service, shape the response.
"""
