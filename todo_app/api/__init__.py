"""HTTP API: application factory, middleware, routes."""
