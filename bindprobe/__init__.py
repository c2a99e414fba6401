"""Form binding probe service."""
