"""Copilot endpoint API adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level validation and response shaping.
- Delegates generation to a weighted-selected endpoint from the core layer.
"""
