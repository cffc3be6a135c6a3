"""
NoteShare Backend - Middleware Package
========================================

Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation ID
    2. Logging: method, path, status and duration, tagged with the request ID
"""
