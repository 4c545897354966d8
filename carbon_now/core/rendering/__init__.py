"""
Rendering Module
===============

Isolated per-run workspaces and the out-of-process renderer protocol.

Components:
- workspace: Scoped workspace directories with guaranteed removal
- invocation: Runs the renderer subprocess and classifies its outcome
- headless_visit: Playwright renderer that exports an image from Carbon
"""
