"""Utility modules for the RSCMP client."""
