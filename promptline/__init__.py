"""Building blocks for powerline-style shell prompts."""

__version__ = "0.1.0"