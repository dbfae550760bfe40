"""Copilot Studio (Direct Line) text-generation endpoint."""
