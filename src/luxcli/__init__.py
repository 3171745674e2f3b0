"""Command-line orchestration for Lux applications."""

__version__ = "1.2.0"
