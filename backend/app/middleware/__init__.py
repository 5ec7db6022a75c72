# Middleware package init
"""
NotesWise Backend: Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID / user context] → [Access log] → [CORS] → Route Handler

    The request ID is set first so the access log line and every log line
    emitted while handling the request share it.
"""
