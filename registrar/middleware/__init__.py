"""
Registrar Backend: Middleware Package
======================================

Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

Request ID runs first so the logging middleware and exception handlers can
tag every line with the same correlation id.
"""
