"""HTTP API for character card extraction."""
