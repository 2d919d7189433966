"""Infrastructure layer: persistence, hooks and the HTTP API."""
