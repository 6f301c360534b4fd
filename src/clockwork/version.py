"""Version of the clockwork CLI."""

__version__ = "0.4.0"
