"""
Core Business Logic
==================

Core modules for turning source snippets into Carbon images.

Modules:
- presets: Preset store and layered settings resolution
- pipeline: Task runner and the Carbon pipeline stages
- rendering: Workspaces, renderer invocation and the headless renderer
- content / language / input_source / clipboard: pipeline collaborators
"""
