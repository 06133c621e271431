# Services package init
"""
Polystore CRUD API — Services Package
=======================================

What:  One service per resource family; each wraps exactly one backend.

Services:
    - user_service.py:     MongoDB `usuarios` collection
    - product_service.py:  MySQL `produto` table
    - bucket_service.py:   S3 buckets and objects

Services raise crud_api.exceptions types only; driver exceptions are
translated at this layer.
"""
