"""Application layer - use cases."""
