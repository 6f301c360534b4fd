"""Core operations for clockwork."""
