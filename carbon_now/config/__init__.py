"""
Configuration Management
=======================

Environment-based configuration using Pydantic Settings.

Components:
- settings: Main application settings and environment configuration
- defaults: Default Carbon render options and preset constants
- logging: Structured logging configuration
"""
