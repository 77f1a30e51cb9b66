"""Core building blocks: configuration and the connection-mode registry."""
