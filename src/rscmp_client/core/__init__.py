"""Core client-side state, forms and status models."""
