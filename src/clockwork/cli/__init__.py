"""Command-line interface for clockwork."""
