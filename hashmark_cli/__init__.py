"""Command line interface for hashmark."""
