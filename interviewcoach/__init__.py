"""Interview Coach - spoken interview practice scored by a language model."""

__version__ = "0.1.0"
