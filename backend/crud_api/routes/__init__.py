# Routes package init
"""
Polystore CRUD API — API Routes Package
=========================================

Route Inventory:
    - users.py:     GET /mongodb/testar-conexao, /usuarios CRUD    (MongoDB)
    - products.py:  GET /mysql/testar-conexao, POST /init-db,
                    /produtos CRUD                                 (MySQL)
    - buckets.py:   /buckets listing, upload, delete               (S3)

Routes are THIN: extract parameters, call the resource's service, record
the outcome in the event log, return the response model. Errors are
raised, not returned; main.py's exception handlers turn them into
responses.
"""
