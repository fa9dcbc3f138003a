"""Static seed data bundled with the service."""
