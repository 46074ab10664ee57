"""Core infrastructure: configuration, database, errors, Temporal client."""
