# Services package init
"""
Catalog API: Services Layer
============================

Service Inventory:
    - product_query:    pure translation of request parameters into criteria,
                        sort clauses and paging offsets
    - product_service:  ProductService, runs those queries against the session
                        and translates store failures into app exceptions
"""
