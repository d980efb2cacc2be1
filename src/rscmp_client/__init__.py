"""Client library for the Research Submission & Conference Management Platform."""

__version__ = "0.1.0"
