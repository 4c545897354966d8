"""
Data Models
===========

Pydantic models for render settings, pipeline requests, renderer records,
and API request/response bodies.
"""
