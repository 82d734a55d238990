"""
Bookstore API — Application Package Initializer
===============================================

What: Marks the `bookstore_api` directory as a Python package.
Who:  Imported by uvicorn (`bookstore_api.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way for every entity:

    ┌─────────────────────────────────────┐
    │        Routes (HTTP surface)        │  ← one router per entity, built by a factory
    ├─────────────────────────────────────┤
    │     CrudHandler (request logic)     │  ← validate → repository → mapper → result
    ├─────────────────────────────────────┤
    │  Repositories / Mapper / Schemas    │  ← SQLAlchemy access, DTO conversion
    ├─────────────────────────────────────┤
    │      Database (async SQLAlchemy)    │  ← session per request
    └─────────────────────────────────────┘

    Authors and Books share the same handler and route code; only the
    resource definition (model, DTO shapes, repository) differs.
"""

__version__ = "1.0.0"
