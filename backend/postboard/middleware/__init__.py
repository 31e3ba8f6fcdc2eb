# Middleware package init
"""
Postboard Backend — Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    1. Request ID: assigns the correlation id every later log line uses
    2. Access Log: one line per request with status, duration and, for
       authenticated requests, the user id the auth guard resolved
"""
