"""Core utilities: configuration, errors, security, access control."""
