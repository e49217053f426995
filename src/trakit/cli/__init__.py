"""Command-line interface for Trakit."""
