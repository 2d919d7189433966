"""Domain layer: entities and services for access tokens."""
