"""HTTP API for the presentation layer."""
