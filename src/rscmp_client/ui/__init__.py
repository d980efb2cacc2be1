"""User interfaces for the RSCMP client."""
