"""
Command Line Interface
======================

``carbon-now`` command and interactive option prompts.
"""
