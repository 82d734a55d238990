"""
Bookstore API — Routes Package
===============================

Route Inventory:
    - crud.py:    build_crud_router(), mounted for /api/Authors and /api/Books
    - health.py:  GET /health

Routes handle HTTP only: extract the path id and body, call the handler,
set status code and headers.
"""
