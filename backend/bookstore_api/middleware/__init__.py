"""
Bookstore API — Middleware Package
===================================

Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line carries the correlation id
    2. Logging records status and duration once the response comes back
"""
