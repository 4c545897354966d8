"""
Test Suite
==========

Test Layout:
- unit: Single components, with the renderer either mocked or run as the fake script
- integration: The CLI and the HTTP API end to end against the fake renderer
- utils: The fake renderer script and shared assertion helpers
"""
