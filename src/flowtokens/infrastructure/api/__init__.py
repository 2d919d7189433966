"""HTTP API: application factory, routes and schemas."""
