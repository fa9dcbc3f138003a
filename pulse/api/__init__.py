"""HTTP API for Pulse Copilot."""
