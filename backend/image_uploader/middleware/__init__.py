"""
Image Uploader Backend - Middleware Package
============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Body Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Body Limit first: oversized uploads are refused before anything reads them
    2. Request ID: correlation id for logs and error bodies
    3. Logging: one access line per request, tagged with the request id
"""
