"""Configuration input parsing."""

from .declarations import parse_declarations

__all__ = ["parse_declarations"]
