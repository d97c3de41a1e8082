"""Command-mode resolution and orchestration driver for a compiler CLI."""

__version__ = "0.1.0"
