"""Core types shared across the store (exceptions, error codes)."""
