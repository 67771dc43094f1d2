"""API layer: HTTP routes and WebSocket handlers."""
