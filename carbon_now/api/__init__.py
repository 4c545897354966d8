"""
FastAPI REST Endpoints
======================

HTTP access to the Carbon pipeline.

Endpoints:
- POST /api/v1.0/carbonize: Render a snippet, respond with the PNG
- GET /health: Health check endpoint
"""
