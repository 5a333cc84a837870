"""Gherkin feature discovery and parsing, with typed conversion of captured step arguments."""

__version__ = "0.1.0"
__all__ = ["model", "parser", "convert"]