"""HTTP API server."""
