"""HTTP routers for the JSON API."""
