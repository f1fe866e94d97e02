# Middleware package init
"""
EstateHub Backend — Middleware Package
========================================

Request → [Request ID] → [Access Log] → [CORS] → Route Handler

The request ID is assigned first so the access log line and every log call
made while handling the request can be correlated.
"""
