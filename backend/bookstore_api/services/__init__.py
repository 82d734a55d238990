"""
Bookstore API — Services Layer
===============================

Request logic between routes (HTTP) and repositories (persistence).

Service Inventory:
    - CrudHandler:       validate → repository → mapper pipeline, one per entity
    - EntityResource:    what differs per entity (AUTHORS, BOOKS)
    - MappingRegistry:   explicit DTO ↔ ORM field rules
    - mapping_profile:   the application's rules, built once at startup
"""
