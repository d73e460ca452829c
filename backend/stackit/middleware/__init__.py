# Middleware package init
"""
StackIt Backend — Middleware Package
======================================

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    - Rate limit rejects over-limit writes before anything else runs
    - Request ID is set before logging so access lines carry it
    - Responses pass back through the chain in reverse order
"""
