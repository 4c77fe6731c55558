"""Core domain: models, instruments, registry and encoders."""
