"""
carbon-now
==========

Turn source code snippets into beautiful images through Carbon.

This package provides:
- Layered preset resolution backed by a per-user JSON store
- A sequential task pipeline shared by the CLI and the HTTP service
- Isolated per-run workspaces and a subprocess renderer protocol
- FastAPI REST endpoint for HTTP access
- Browser automation with Playwright
"""

__version__ = "1.0.0"
__author__ = "carbon-now contributors"
