"""Infrastructure adapters and process configuration."""
