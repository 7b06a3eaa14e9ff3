"""Core infrastructure: configuration, logging, errors, transport and metrics."""
