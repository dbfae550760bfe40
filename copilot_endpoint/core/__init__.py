"""Endpoint orchestration package.

Composition:
    - `selection`: builds configured endpoints and picks one by weight.
"""
