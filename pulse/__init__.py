"""Pulse Studio copilot: natural-language requests to validated project mutations."""
