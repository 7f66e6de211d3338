"""ATS resume analysis, rewriting and export."""

__version__ = "0.1.0"
