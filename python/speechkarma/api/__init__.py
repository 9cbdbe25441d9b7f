"""HTTP API package: dependencies and route definitions."""
