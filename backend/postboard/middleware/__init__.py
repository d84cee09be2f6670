"""
Postboard Backend — Middleware Package
========================================

Cross-cutting concerns applied to every request, plus the bearer token
check used by mutating routes.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: Generate correlation ID for logging and tracing
    2. Logging: Log request details with the generated request ID
    3. CORS: FastAPI's CORSMiddleware (answers preflight OPTIONS)

    Authentication is not middleware: it is the `get_current_user`
    dependency in auth.py, attached only to create, update and delete.
"""
