"""Configuration modules for the RSCMP client."""
