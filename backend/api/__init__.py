"""HTTP API for the fantasy league."""
