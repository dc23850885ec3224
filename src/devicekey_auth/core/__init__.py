"""Core configuration, security capabilities and error types."""
