"""
FastAPI REST Endpoints
======================

HTTP access to the render worker.

Endpoints:
- POST /: Render HTML, a URL or a PDF source and return the JSON envelope
- GET /health: Health check endpoint
"""
