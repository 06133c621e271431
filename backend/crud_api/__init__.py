"""
Polystore CRUD API — Application Package Initializer
======================================================

What: Marks `crud_api` as a Python package.
Who:  Imported by uvicorn (crud_api.main:app), pytest and the routes.

Architecture Note:
    One resource family per backend, each cut into the same layers:

    ┌─────────────────────────────────────────────┐
    │             Routes (API Layer)              │  ← HTTP concerns, event log
    ├─────────────────────────────────────────────┤
    │          Services (Backend Calls)           │  ← one call, error translation
    ├─────────────────────────────────────────────┤
    │       Models & Schemas (Data Shapes)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────────────┤
    │  DocumentStore │ RelationalStore │ ObjectStorage │  ← shared connections
    └─────────────────────────────────────────────┘

    Users live in MongoDB, products in MySQL, files in S3. The three
    connection managers are created once per process and handed to the
    routes through FastAPI dependencies.
"""

__version__ = "1.0.0"
