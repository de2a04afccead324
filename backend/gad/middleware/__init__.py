# Middleware package init
"""
GAD Backend — Middleware Package
=================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The request ID is assigned before the logging middleware reads it, and
    the logging middleware sees the final status code on the way back.
"""
