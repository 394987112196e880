"""HTTP API for the catalog engine."""
